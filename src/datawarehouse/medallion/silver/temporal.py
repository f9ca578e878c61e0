"""Validity-range derivation for product history.

Product rows carry only a start date. Within each product key the rows are
ordered by start date and each row ends the day before its successor starts;
the last row of a key stays open (``None``).

Ordering rule: rows with a missing start date sort before every dated row,
and rows with equal start dates keep their ingestion order.

A row whose successor also lacks a start date gets no end date, so a key
with several undated rows has several open rows. The
``SCD crm_prd_info single open row per prd_key`` quality check reports it.
"""

from datetime import date, timedelta
from typing import Any, Dict, Hashable, List, Optional, Sequence

import pandas as pd

from datawarehouse.medallion.silver.dates import to_date
from datawarehouse.medallion.silver.normalizers import is_missing

ONE_DAY = timedelta(days=1)


def derive_validity_ends(start_dates: Sequence[Optional[date]]) -> List[Optional[date]]:
    """Compute end dates for an already ordered sequence of start dates.

    Example:
        >>> derive_validity_ends([date(2021, 1, 1), date(2022, 6, 1)])
        [datetime.date(2022, 5, 31), None]
    """
    if not start_dates:
        return []
    successors = list(start_dates[1:]) + [None]
    return [successor - ONE_DAY if successor is not None else None for successor in successors]


def start_date_order(start_dates: Sequence[Optional[date]]) -> List[int]:
    """Positions of ``start_dates`` sorted nulls-first, stable on ties."""
    return sorted(
        range(len(start_dates)),
        key=lambda i: (start_dates[i] is not None, start_dates[i] or date.min, i),
    )


def _group_key(value: Any) -> Hashable:
    return None if is_missing(value) else value


def assign_end_dates(
    frame: pd.DataFrame,
    key: str = "prd_key",
    start: str = "prd_start_dt",
    end: str = "prd_end_dt",
) -> pd.DataFrame:
    """Add the derived ``end`` column to a frame of product rows.

    Row order of the input is preserved; only the new column depends on the
    per-key ordering.
    """
    result = frame.copy()
    starts = [to_date(value) for value in result[start]]

    groups: Dict[Hashable, List[int]] = {}
    for position, value in enumerate(result[key]):
        groups.setdefault(_group_key(value), []).append(position)

    ends: List[Optional[date]] = [None] * len(result)
    for positions in groups.values():
        group_starts = [starts[i] for i in positions]
        ordered = [positions[i] for i in start_date_order(group_starts)]
        for position, end_date in zip(ordered, derive_validity_ends([starts[i] for i in ordered])):
            ends[position] = end_date

    result[start] = pd.Series(starts, index=result.index, dtype="object")
    result[end] = pd.Series(ends, index=result.index, dtype="object")
    return result
