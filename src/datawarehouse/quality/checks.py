"""Data quality checks for the Silver and Gold layers.

Each check counts offending rows (or offending key groups for uniqueness
checks) and passes at zero. Orphan, row-count and date-sanity checks are
WARN severity: they are reported but do not fail the layer.

The Silver duplicate and missing-key checks follow the ``business_key`` each
entity declares in its ``@silver_entity`` registration.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

import pandas as pd

from datawarehouse.constants import CheckSeverity, Layer
from datawarehouse.constants.domains import (
    GENDER_VALUES,
    MARITAL_STATUS_VALUES,
    PRODUCT_LINE_VALUES,
)
from datawarehouse.logging import get_logger
from datawarehouse.medallion.gold.views import DIM_CUSTOMERS, DIM_PRODUCTS, FACT_SALES
from datawarehouse.medallion.silver import get_metadata, registered_entities
from datawarehouse.medallion.silver.schemas import (
    CRM_CUST_INFO,
    CRM_PRD_INFO,
    CRM_SALES_DETAILS,
    ERP_CUST_AZ12,
    ERP_LOC_A101,
)
from datawarehouse.types.quality import QualityCheckResult, QualityReport

logger = get_logger(__name__)

ORDER_DATE_HORIZON_DAYS = 30

# Silver tables that may legitimately hold fewer rows than their Bronze source.
REDUCING_TABLES = frozenset({CRM_CUST_INFO})


def duplicate_groups(frame: pd.DataFrame, columns: List[str]) -> int:
    """Number of key groups occurring more than once (nulls form a group)."""
    if frame.empty:
        return 0
    sizes = frame.groupby(columns, dropna=False).size()
    return int((sizes > 1).sum())


def blank_count(series: pd.Series) -> int:
    """Rows that are null or whitespace-only."""
    text = series.astype("string").str.strip()
    return int((series.isna() | (text == "")).sum())


def outside_domain(series: pd.Series, allowed: Iterable[str]) -> int:
    return int((~series.isin(list(allowed))).sum())


def _dates(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series, errors="coerce")


def _numbers(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce")


def _result(name: str, layer: Layer, failed: int, severity: CheckSeverity = CheckSeverity.ERROR) -> QualityCheckResult:
    return QualityCheckResult(check_name=name, layer=layer.value, failed_count=int(failed), severity=severity)


def key_checks(tables: Dict[str, pd.DataFrame]) -> List[QualityCheckResult]:
    """Duplicate and missing-key checks for every registered entity with a business key."""
    results = []
    for transform in registered_entities():
        metadata = get_metadata(transform)
        key = metadata.business_key
        if not key or metadata.target_table not in tables:
            continue
        frame = tables[metadata.target_table]
        table_name = metadata.target_table
        label = f"{table_name}.{key[0]}" if len(key) == 1 else f"{table_name}({', '.join(key)})"
        results.append(_result(f"DUP {label}", Layer.SILVER, duplicate_groups(frame, key), metadata.key_severity))
        results.append(_result(f"NULL {table_name}.{key[0]}", Layer.SILVER, blank_count(frame[key[0]])))
    return results


def row_count_checks(tables: Dict[str, pd.DataFrame], bronze_counts: Dict[str, int]) -> List[QualityCheckResult]:
    """Compare Silver row counts with their Bronze sources.

    Silver never holds more rows than Bronze. Only deduplicated tables may
    hold fewer; for every other table any difference is counted.
    """
    results = []
    for table_name, bronze_rows in bronze_counts.items():
        if table_name not in tables:
            continue
        silver_rows = len(tables[table_name])
        if table_name in REDUCING_TABLES:
            failed = max(silver_rows - bronze_rows, 0)
        else:
            failed = abs(silver_rows - bronze_rows)
        results.append(_result(f"ROWCOUNT {table_name}", Layer.SILVER, failed, CheckSeverity.WARN))
    return results


def run_silver_checks(
    tables: Dict[str, pd.DataFrame],
    today: Optional[date] = None,
    bronze_counts: Optional[Dict[str, int]] = None,
) -> QualityReport:
    """Validate the six Silver tables.

    Args:
        tables: Silver frames keyed by table name
        today: Reference date for future-date checks. Defaults to today.
        bronze_counts: Bronze row counts keyed by table name; enables the
            ROWCOUNT checks
    """
    today = today or date.today()
    now = pd.Timestamp(today)
    customers = tables[CRM_CUST_INFO]
    products = tables[CRM_PRD_INFO]
    sales = tables[CRM_SALES_DETAILS]
    demographics = tables[ERP_CUST_AZ12]
    locations = tables[ERP_LOC_A101]

    start = _dates(products["prd_start_dt"])
    end = _dates(products["prd_end_dt"])
    birth = _dates(demographics["BDATE"])
    order_dt = _dates(sales["sls_order_dt"])
    quantity = _numbers(sales["sls_quantity"])
    amount = _numbers(sales["sls_sales"])
    price = _numbers(sales["sls_price"])
    open_rows = products[products["prd_end_dt"].isna()]

    silver = Layer.SILVER
    results = row_count_checks(tables, bronze_counts or {}) + key_checks(tables) + [
        # Domains
        _result("DOMAIN crm_cust_info.cst_gndr", silver, outside_domain(customers["cst_gndr"], GENDER_VALUES)),
        _result("DOMAIN crm_cust_info.cst_marital_status", silver,
                outside_domain(customers["cst_marital_status"], MARITAL_STATUS_VALUES)),
        _result("DOMAIN crm_prd_info.prd_line", silver, outside_domain(products["prd_line"], PRODUCT_LINE_VALUES)),
        _result("DOMAIN erp_cust_az12.GEN", silver, outside_domain(demographics["GEN"], GENDER_VALUES)),
        _result("DOMAIN erp_loc_a101.CNTRY not empty", silver, blank_count(locations["CNTRY"])),
        # Dates
        _result("DATE erp_cust_az12.BDATE not in future", silver, (birth > now).sum()),
        _result("DATE crm_sales_details.order_dt not far future", silver,
                (order_dt > now + timedelta(days=ORDER_DATE_HORIZON_DAYS)).sum(), CheckSeverity.WARN),
        _result("DATE crm_prd_info.end_dt >= start_dt", silver, (end < start).sum()),
        _result("SCD crm_prd_info single open row per prd_key", silver, duplicate_groups(open_rows, ["prd_key"])),
        # Referential integrity
        _result("RI sales -> customers", silver,
                (~sales["sls_cust_id"].isin(customers["cst_id"].dropna())).sum(), CheckSeverity.WARN),
        _result("RI sales -> products", silver,
                (~sales["sls_prd_key"].isin(products["prd_key"].dropna())).sum(), CheckSeverity.WARN),
        # Measures
        _result("NUMERIC crm_sales_details.quantity > 0", silver, (quantity.isna() | (quantity <= 0)).sum()),
        _result("NUMERIC crm_sales_details.sales >= 0", silver, (amount.isna() | (amount < 0)).sum()),
        _result("NUMERIC crm_sales_details.price >= 0", silver, (price.isna() | (price < 0)).sum()),
        _result("NUMERIC crm_sales_details.sales = quantity * price", silver,
                (amount.notna() & price.notna() & (amount != quantity * price)).sum(), CheckSeverity.WARN),
    ]
    return _report(silver, results)


def run_gold_checks(
    gold: Dict[str, pd.DataFrame],
    silver_products: Optional[pd.DataFrame] = None,
    today: Optional[date] = None,
) -> QualityReport:
    """Validate the Gold dimensions and fact.

    Args:
        gold: Frames keyed by ``dim_customers``, ``dim_products``, ``fact_sales``
        silver_products: Silver ``crm_prd_info``; enables the history-leak check
        today: Reference date for future-date checks. Defaults to today.
    """
    today = today or date.today()
    customers = gold[DIM_CUSTOMERS]
    products = gold[DIM_PRODUCTS]
    fact = gold[FACT_SALES]

    order_dt = _dates(fact["order_date"])
    ship_dt = _dates(fact["ship_date"])
    due_dt = _dates(fact["due_date"])

    gold_layer = Layer.GOLD
    results = [
        _result("NULL dim_customers keys", gold_layer,
                customers[["customer_key", "customer_id", "customer_number"]].isna().any(axis=1).sum()),
        _result("DUP dim_customers.customer_key", gold_layer, duplicate_groups(customers, ["customer_key"])),
        _result("DUP dim_customers.customer_id", gold_layer, duplicate_groups(customers, ["customer_id"])),
        _result("NULL dim_customers.gender", gold_layer, customers["gender"].isna().sum()),
        _result("DATE dim_customers.birth_date not in future", gold_layer,
                (_dates(customers["birth_date"]) > pd.Timestamp(today)).sum()),
        _result("NULL dim_products keys", gold_layer,
                products[["product_key", "product_id", "product_number"]].isna().any(axis=1).sum()),
        _result("DUP dim_products.product_key", gold_layer, duplicate_groups(products, ["product_key"])),
        _result("DUP dim_products.product_number", gold_layer, duplicate_groups(products, ["product_number"])),
        _result("NUMERIC dim_products.cost >= 0", gold_layer, (_numbers(products["cost"]) < 0).sum()),
        _result("NULL fact_sales.order_number", gold_layer, fact["order_number"].isna().sum()),
        _result("DUP fact_sales grain", gold_layer,
                duplicate_groups(fact, ["order_number", "product_key", "customer_key"]), CheckSeverity.WARN),
        _result("RI fact_sales -> dim_products", gold_layer,
                (~fact["product_key"].isin(products["product_key"].dropna())).sum(), CheckSeverity.WARN),
        _result("RI fact_sales -> dim_customers", gold_layer,
                (~fact["customer_key"].isin(customers["customer_key"].dropna())).sum(), CheckSeverity.WARN),
        _result("DATE fact_sales.ship_date >= order_date", gold_layer, (ship_dt < order_dt).sum(), CheckSeverity.WARN),
        _result("DATE fact_sales.due_date >= order_date", gold_layer, (due_dt < order_dt).sum(), CheckSeverity.WARN),
        _result("NUMERIC fact_sales measures", gold_layer,
                ((_numbers(fact["sales_amount"]) < 0)
                 | (_numbers(fact["quantity"]) <= 0)
                 | (_numbers(fact["price"]) < 0)).sum()),
    ]

    if silver_products is not None:
        closed = silver_products[silver_products["prd_end_dt"].notna()]
        leaked = products.assign(_start=_dates(products["start_date"])).merge(
            closed.assign(_start=_dates(closed["prd_start_dt"]))[["prd_key", "_start"]],
            how="inner",
            left_on=["product_number", "_start"],
            right_on=["prd_key", "_start"],
        )
        results.append(_result("SCD dim_products has no closed rows", gold_layer, len(leaked)))

    return _report(gold_layer, results)


def _report(layer: Layer, results: List[QualityCheckResult]) -> QualityReport:
    report = QualityReport(layer=layer.value, results=results)
    for failure in report.failures:
        log = logger.warning if failure.severity == CheckSeverity.WARN.value else logger.error
        log(
            "Quality check failed",
            extra={"check_name": failure.check_name, "failed_count": failure.failed_count, "layer": layer.value},
        )
    logger.info(
        "Quality checks finished",
        extra={"layer": layer.value, "checks": len(results), "failed": len(report.failures), "passed": report.passed},
    )
    return report
