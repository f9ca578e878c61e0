"""Canonical code domains for Silver standardization.

Raw codes are compared after trimming and uppercasing. Anything outside a
mapping resolves to ``NOT_AVAILABLE``.
"""

from typing import Dict, FrozenSet

NOT_AVAILABLE = "N/A"

MARITAL_STATUS_LABELS: Dict[str, str] = {
    "S": "Single",
    "M": "Married",
}

CRM_GENDER_LABELS: Dict[str, str] = {
    "F": "Female",
    "M": "Male",
}

ERP_GENDER_LABELS: Dict[str, str] = {
    "F": "Female",
    "FEMALE": "Female",
    "M": "Male",
    "MALE": "Male",
}

PRODUCT_LINE_LABELS: Dict[str, str] = {
    "M": "Mountain",
    "R": "Road",
    "S": "Other Sales",
    "T": "Touring",
}

GERMANY_PREFIX = "DE"
GERMANY = "Germany"
UNITED_STATES_CODES: FrozenSet[str] = frozenset({"USA", "US"})
UNITED_STATES = "United States"

ERP_CUSTOMER_PREFIX = "NAS"

# Product business keys look like "CO-RF-FR-R92B-58": category id in the first
# five characters, product key from the seventh character onward.
CATEGORY_ID_LENGTH = 5
PRODUCT_KEY_OFFSET = 6

GENDER_VALUES: FrozenSet[str] = frozenset({"Male", "Female", NOT_AVAILABLE})
MARITAL_STATUS_VALUES: FrozenSet[str] = frozenset({"Single", "Married", NOT_AVAILABLE})
PRODUCT_LINE_VALUES: FrozenSet[str] = frozenset(set(PRODUCT_LINE_LABELS.values()) | {NOT_AVAILABLE})
