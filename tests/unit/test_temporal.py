"""Unit tests for product validity-range derivation."""

from datetime import date, timedelta

import pandas as pd

from datawarehouse.medallion.silver.temporal import (
    assign_end_dates,
    derive_validity_ends,
    start_date_order,
)


def _products(rows):
    return pd.DataFrame(rows, columns=["prd_id", "prd_key", "prd_start_dt"])


class TestDeriveValidityEnds:
    """Pure lookahead over an ordered start-date sequence."""

    def test_product_history_scenario(self):
        ends = derive_validity_ends([date(2021, 1, 1), date(2022, 6, 1)])
        assert ends == [date(2022, 5, 31), None]

    def test_single_row_stays_open(self):
        assert derive_validity_ends([date(2020, 1, 1)]) == [None]

    def test_empty_sequence(self):
        assert derive_validity_ends([]) == []

    def test_leap_day_boundary(self):
        ends = derive_validity_ends([date(2020, 1, 1), date(2020, 3, 1)])
        assert ends[0] == date(2020, 2, 29)


class TestStartDateOrder:
    """Ordering rule: missing start dates first, ties stable."""

    def test_nulls_sort_first(self):
        starts = [date(2021, 1, 1), None, date(2020, 1, 1)]
        assert start_date_order(starts) == [1, 2, 0]

    def test_ties_keep_ingestion_order(self):
        starts = [date(2021, 1, 1), date(2021, 1, 1), date(2020, 1, 1)]
        assert start_date_order(starts) == [2, 0, 1]


class TestAssignEndDates:
    """Frame-level derivation grouped by product key."""

    def test_groups_are_independent_and_row_order_is_kept(self):
        frame = _products([
            (1, "P1", pd.Timestamp("2022-06-01")),
            (2, "P2", pd.Timestamp("2019-01-01")),
            (3, "P1", pd.Timestamp("2021-01-01")),
        ])

        result = assign_end_dates(frame)

        assert list(result["prd_id"]) == [1, 2, 3]
        assert list(result["prd_end_dt"]) == [None, None, date(2022, 5, 31)]
        assert list(result["prd_start_dt"]) == [date(2022, 6, 1), date(2019, 1, 1), date(2021, 1, 1)]

    def test_missing_start_date_precedes_dated_rows(self):
        frame = _products([
            (1, "P1", pd.Timestamp("2021-01-01")),
            (2, "P1", None),
        ])

        result = assign_end_dates(frame)

        assert result.loc[1, "prd_end_dt"] == date(2020, 12, 31)
        assert result.loc[0, "prd_end_dt"] is None

    def test_end_date_totality(self):
        starts = ["2010-01-01", "2012-05-17", "2011-03-03", "2015-12-31", "2013-01-01"]
        frame = _products(
            [(i, "K1" if i % 2 else "K2", pd.Timestamp(s)) for i, s in enumerate(starts)]
        )

        result = assign_end_dates(frame)

        for _, group in result.groupby("prd_key"):
            open_rows = group[group["prd_end_dt"].isna()]
            assert len(open_rows) == 1
            group_starts = set(group["prd_start_dt"])
            for start, end in zip(group["prd_start_dt"], group["prd_end_dt"]):
                if end is not None:
                    assert end + timedelta(days=1) in group_starts
                    assert end >= start

    def test_several_undated_rows_stay_open(self):
        frame = _products([
            (1, "P1", None),
            (2, "P1", None),
            (3, "P1", pd.Timestamp("2021-01-01")),
        ])

        result = assign_end_dates(frame)

        assert result.loc[0, "prd_end_dt"] is None
        assert result.loc[1, "prd_end_dt"] == date(2020, 12, 31)
        assert result.loc[2, "prd_end_dt"] is None
        assert derive_validity_ends([None, None]) == [None, None]

    def test_input_frame_is_unchanged(self):
        frame = _products([(1, "P1", pd.Timestamp("2021-01-01"))])
        assign_end_dates(frame)
        assert "prd_end_dt" not in frame.columns
