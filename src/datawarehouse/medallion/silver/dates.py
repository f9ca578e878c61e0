"""Integer-encoded date decoding.

Sales dates arrive as ``YYYYMMDD`` integers. Zero, wrong-length encodings
and calendar-invalid values (``20231301``) all decode to ``None``.
"""

from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from datawarehouse.medallion.silver.normalizers import is_missing

ENCODED_DATE_LENGTH = 8


def decode_yyyymmdd(value: Any) -> Optional[date]:
    """Decode a ``YYYYMMDD`` integer to a date.

    Args:
        value: Integer (or integral float/string) encoded date.

    Returns:
        The calendar date, or None when the value is missing, zero, not
        exactly eight digits long, or not a real calendar day.

    Example:
        >>> decode_yyyymmdd(20101229)
        datetime.date(2010, 12, 29)
        >>> decode_yyyymmdd(5489) is None
        True
    """
    if is_missing(value):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    if isinstance(value, float) and number != value:
        return None
    if number == 0:
        return None

    text = str(number)
    if len(text) != ENCODED_DATE_LENGTH:
        return None

    try:
        return date(int(text[0:4]), int(text[4:6]), int(text[6:8]))
    except ValueError:
        return None


def encode_yyyymmdd(value: Optional[date]) -> Optional[int]:
    """Encode a date as a ``YYYYMMDD`` integer (inverse of the decoder)."""
    if value is None:
        return None
    return value.year * 10_000 + value.month * 100 + value.day


def to_date(value: Any) -> Optional[date]:
    """Cast a timestamp, date or date string to a date; unparseable -> None."""
    if is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = pd.to_datetime(value, errors="coerce")
    if is_missing(parsed):
        return None
    return parsed.date()
