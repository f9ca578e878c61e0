"""Recency-based deduplication of re-ingested records."""

import pandas as pd

_POSITION = "__ingestion_position"
_ORDER = "__recency"


def deduplicate_latest(frame: pd.DataFrame, key: str, order_by: str) -> pd.DataFrame:
    """Keep the most recent row per business key.

    Rows are ranked within each key by ``order_by`` descending. Missing
    ``order_by`` values rank below any dated row, and exact ties keep the row
    that was ingested first. Rows with a missing key form one group of their
    own. Output rows keep their relative ingestion order.

    Args:
        frame: Raw rows, possibly several per key
        key: Business key column
        order_by: Recency column (date or timestamp)

    Returns:
        A new frame with exactly one row per distinct key value.
    """
    if frame.empty:
        return frame.copy()

    ranked = frame.assign(
        **{
            _POSITION: list(range(len(frame))),
            _ORDER: pd.to_datetime(frame[order_by], errors="coerce"),
        }
    )
    ranked = ranked.sort_values(
        [_ORDER, _POSITION],
        ascending=[False, True],
        na_position="last",
        kind="mergesort",
    )
    latest = ranked.drop_duplicates(subset=[key], keep="first")
    return (
        latest.sort_values(_POSITION)
        .drop(columns=[_POSITION, _ORDER])
        .reset_index(drop=True)
    )
