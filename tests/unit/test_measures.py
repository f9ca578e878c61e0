"""Unit tests for sales/price reconciliation."""

import pandas as pd
import pytest

from datawarehouse.medallion.silver.measures import reconcile_frame, reconcile_measures


class TestReconcileMeasures:
    """Scalar repair rules."""

    def test_sales_repair_scenario(self):
        assert reconcile_measures(None, 5, -10) == (50, 10)

    def test_valid_values_are_kept(self):
        assert reconcile_measures(100, 2, 50) == (100, 50)

    @pytest.mark.parametrize("sales", [None, 0, -40])
    def test_invalid_sales_rebuilt_from_price(self, sales):
        assert reconcile_measures(sales, 4, 10) == (40, 10)

    def test_negative_price_with_valid_sales_uses_sales(self):
        assert reconcile_measures(100, 4, -7) == (100, 25)

    def test_missing_price_uses_sales(self):
        assert reconcile_measures(100, 2, None) == (100, 50)

    def test_price_is_truncated(self):
        assert reconcile_measures(10, 3, 0) == (10, 3)

    def test_zero_quantity_gives_missing_price(self):
        assert reconcile_measures(100, 0, None) == (100, None)

    def test_missing_quantity_propagates(self):
        assert reconcile_measures(None, None, 10) == (None, 10)

    def test_both_missing(self):
        assert reconcile_measures(None, 3, None) == (None, None)


class TestReconcileFrame:
    """Frame-level reconciliation."""

    def test_identity_holds_after_repair(self):
        frame = pd.DataFrame(
            {
                "sls_sales": [None, -40, 0, 60, None],
                "sls_quantity": [5, 4, 3, 2, 1],
                "sls_price": [-10, 10, 7, None, 25],
            }
        )

        result = reconcile_frame(frame)

        for sales, quantity, price in zip(result["sls_sales"], result["sls_quantity"], result["sls_price"]):
            assert sales == quantity * price

    def test_columns_are_nullable_integers(self):
        frame = pd.DataFrame({"sls_sales": [None], "sls_quantity": [0], "sls_price": [None]})

        result = reconcile_frame(frame)

        assert str(result["sls_sales"].dtype) == "Int64"
        assert result["sls_price"].isna().all()

    def test_other_columns_untouched(self):
        frame = pd.DataFrame(
            {"sls_ord_num": ["SO1"], "sls_sales": [10], "sls_quantity": [1], "sls_price": [10]}
        )
        result = reconcile_frame(frame)
        assert list(result["sls_ord_num"]) == ["SO1"]
        assert frame is not result
