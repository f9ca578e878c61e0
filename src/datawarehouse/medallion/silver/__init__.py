"""Silver layer: cleaning, standardization and product-history derivation.

Components:
    - normalizers: code-to-label mapping and identifier cleanup
    - deduplicator: latest record per business key
    - temporal: validity end dates from ordered start dates
    - dates: YYYYMMDD integer decoding
    - measures: sales/price reconciliation
    - transformations: the registered entity transforms
    - processor: the truncate-and-reload run over all entities
"""

from datawarehouse.medallion.silver.dates import decode_yyyymmdd, encode_yyyymmdd
from datawarehouse.medallion.silver.decorators import get_metadata, registered_entities, silver_entity
from datawarehouse.medallion.silver.deduplicator import deduplicate_latest
from datawarehouse.medallion.silver.measures import reconcile_frame, reconcile_measures
from datawarehouse.medallion.silver.processor import SilverProcessor
from datawarehouse.medallion.silver.temporal import assign_end_dates, derive_validity_ends

__all__ = [
    "SilverProcessor",
    "silver_entity",
    "get_metadata",
    "registered_entities",
    "deduplicate_latest",
    "derive_validity_ends",
    "assign_end_dates",
    "decode_yyyymmdd",
    "encode_yyyymmdd",
    "reconcile_measures",
    "reconcile_frame",
]
