"""Sales measure reconciliation.

A sales line carries ``sales``, ``quantity`` and unit ``price``. Non-positive
or missing sales and prices are rebuilt from the other fields:

* sales: ``quantity * |price|`` when the raw sales is missing or <= 0.
* price: ``numerator / quantity`` truncated toward zero when the raw price is
  missing or <= 0, where the numerator is ``quantity * |price|`` if the raw
  sales was also invalid and the raw sales otherwise. Zero or missing
  quantity gives a missing price.

When both values are invalid the derived price is computed from the invalid
price's absolute value. That fallback is kept as-is.
"""

from typing import Any, Optional, Tuple

import pandas as pd

from datawarehouse.medallion.silver.normalizers import is_missing

Number = Optional[float]


def _as_number(value: Any) -> Number:
    return None if is_missing(value) else value


def _is_invalid(value: Number) -> bool:
    return value is None or value <= 0


def _truncate(value: float) -> int:
    return int(value)


def reconcile_measures(sales: Any, quantity: Any, price: Any) -> Tuple[Number, Number]:
    """Repair one sales line.

    Args:
        sales: Raw sales amount
        quantity: Raw quantity
        price: Raw unit price

    Returns:
        ``(sales, price)`` after repair. Missing inputs propagate as None.

    Example:
        >>> reconcile_measures(None, 5, -10)
        (50, 10)
    """
    sales = _as_number(sales)
    quantity = _as_number(quantity)
    price = _as_number(price)

    sales_invalid = _is_invalid(sales)

    rebuilt_sales: Number = None
    if quantity is not None and price is not None:
        rebuilt_sales = quantity * abs(price)

    new_sales = rebuilt_sales if sales_invalid else sales

    if not _is_invalid(price):
        return new_sales, price

    numerator = rebuilt_sales if sales_invalid else sales
    if numerator is None or quantity is None or quantity == 0:
        return new_sales, None
    return new_sales, _truncate(numerator / quantity)


def reconcile_frame(
    frame: pd.DataFrame,
    sales_column: str = "sls_sales",
    quantity_column: str = "sls_quantity",
    price_column: str = "sls_price",
) -> pd.DataFrame:
    """Apply :func:`reconcile_measures` to every row of a sales frame."""
    result = frame.copy()
    if result.empty:
        return result

    repaired = [
        reconcile_measures(sales, quantity, price)
        for sales, quantity, price in zip(
            result[sales_column], result[quantity_column], result[price_column]
        )
    ]
    result[sales_column] = pd.array([_to_int(s) for s, _ in repaired], dtype="Int64")
    result[price_column] = pd.array([_to_int(p) for _, p in repaired], dtype="Int64")
    return result


def _to_int(value: Number) -> Optional[int]:
    if value is None:
        return None
    return int(value)
