"""Field normalizers for Silver standardization.

Every normalizer is total: unrecognized or missing input resolves to a
sentinel (``N/A`` or ``None``) and never raises. Code domains are compared
after trimming and uppercasing.
"""

from typing import Any, Mapping, Optional, Tuple

import pandas as pd

from datawarehouse.constants.domains import (
    CATEGORY_ID_LENGTH,
    CRM_GENDER_LABELS,
    ERP_CUSTOMER_PREFIX,
    ERP_GENDER_LABELS,
    GERMANY,
    GERMANY_PREFIX,
    MARITAL_STATUS_LABELS,
    NOT_AVAILABLE,
    PRODUCT_KEY_OFFSET,
    PRODUCT_LINE_LABELS,
    UNITED_STATES,
    UNITED_STATES_CODES,
)


def is_missing(value: Any) -> bool:
    """True for None, NaN, NaT and pandas NA."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def trim_text(value: Any) -> Optional[str]:
    """Strip leading and trailing spaces. Tabs and line breaks are kept."""
    if is_missing(value):
        return None
    return str(value).strip(" ")


def _normalize_code(value: Any, labels: Mapping[str, str]) -> str:
    if is_missing(value):
        return NOT_AVAILABLE
    return labels.get(str(value).strip(" ").upper(), NOT_AVAILABLE)


def normalize_marital_status(value: Any) -> str:
    """``S`` -> Single, ``M`` -> Married, anything else -> N/A."""
    return _normalize_code(value, MARITAL_STATUS_LABELS)


def normalize_crm_gender(value: Any) -> str:
    """``F`` -> Female, ``M`` -> Male, anything else -> N/A."""
    return _normalize_code(value, CRM_GENDER_LABELS)


def normalize_erp_gender(value: Any) -> str:
    """``F``/``FEMALE`` -> Female, ``M``/``MALE`` -> Male, anything else -> N/A."""
    return _normalize_code(value, ERP_GENDER_LABELS)


def normalize_product_line(value: Any) -> str:
    return _normalize_code(value, PRODUCT_LINE_LABELS)


def normalize_country(value: Any) -> str:
    """Standardize a free-text country value.

    The ``DE`` prefix test is case-sensitive, the US codes are not. Values
    outside both rules are returned trimmed.

    Example:
        >>> [normalize_country(v) for v in ["DE", "Deutschland", " US ", "usa", "", None]]
        ['Germany', 'Deutschland', 'United States', 'United States', 'N/A', 'N/A']
    """
    trimmed = trim_text(value)
    if not trimmed:
        return NOT_AVAILABLE
    if trimmed.startswith(GERMANY_PREFIX):
        return GERMANY
    if trimmed.upper() in UNITED_STATES_CODES:
        return UNITED_STATES
    return trimmed


def strip_customer_prefix(value: Any) -> Optional[str]:
    """Drop the leading ``NAS`` marker from ERP customer ids (case-sensitive)."""
    if is_missing(value):
        return None
    text = str(value)
    if text.startswith(ERP_CUSTOMER_PREFIX):
        return text[len(ERP_CUSTOMER_PREFIX):]
    return text


def strip_dashes(value: Any) -> Optional[str]:
    if is_missing(value):
        return None
    return str(value).replace("-", "")


def split_product_key(value: Any) -> Tuple[Optional[str], Optional[str]]:
    """Split a CRM product business key into ``(cat_id, prd_key)``.

    The category id is the first five characters with dashes turned into
    underscores; the product key is everything from the seventh character.

    Example:
        >>> split_product_key("CO-RF-FR-R92B-58")
        ('CO_RF', 'FR-R92B-58')
    """
    if is_missing(value):
        return None, None
    text = str(value)
    return text[:CATEGORY_ID_LENGTH].replace("-", "_"), text[PRODUCT_KEY_OFFSET:]
