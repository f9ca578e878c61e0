"""Silver entity transforms.

One function per Bronze entity, registered in load order. Each takes the
Bronze snapshot and returns the cleaned rowset in Silver column order
(without the load timestamp). Field-level defects are repaired to
sentinels; only a structurally unusable input raises.
"""

from typing import Callable, List

import pandas as pd

from datawarehouse.constants.medallion import CheckSeverity
from datawarehouse.medallion.silver.dates import decode_yyyymmdd, to_date
from datawarehouse.medallion.silver.decorators import silver_entity
from datawarehouse.medallion.silver.deduplicator import deduplicate_latest
from datawarehouse.medallion.silver.measures import reconcile_frame
from datawarehouse.medallion.silver.normalizers import (
    normalize_country,
    normalize_crm_gender,
    normalize_erp_gender,
    normalize_marital_status,
    normalize_product_line,
    split_product_key,
    strip_customer_prefix,
    strip_dashes,
    trim_text,
)
from datawarehouse.medallion.silver.schemas import (
    BRONZE_COLUMNS,
    CRM_CUST_INFO,
    CRM_PRD_INFO,
    CRM_SALES_DETAILS,
    ERP_CUST_AZ12,
    ERP_LOC_A101,
    ERP_PX_CAT_G1V2,
    SILVER_COLUMNS,
    require_columns,
)
from datawarehouse.medallion.silver.temporal import assign_end_dates
from datawarehouse.types.run import TransformContext


def _output_columns(table_name: str) -> List[str]:
    return SILVER_COLUMNS[table_name][:-1]


def _apply(series: pd.Series, func: Callable) -> pd.Series:
    return pd.Series([func(value) for value in series], index=series.index, dtype="object")


def _integers(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").astype("Int64")


@silver_entity(
    target_table=CRM_CUST_INFO,
    step_name="LOAD_CRM_CUSTOMERS",
    description="Loading CRM customers into Silver",
    business_key=["cst_id"],
)
def load_crm_customers(frame: pd.DataFrame, context: TransformContext) -> pd.DataFrame:
    """Latest record per customer with trimmed names and standardized codes."""
    require_columns(frame, CRM_CUST_INFO, BRONZE_COLUMNS[CRM_CUST_INFO])
    latest = deduplicate_latest(frame, key="cst_id", order_by="cst_create_date")

    return pd.DataFrame(
        {
            "cst_id": _integers(latest["cst_id"]),
            "cst_key": latest["cst_key"],
            "cst_firstname": _apply(latest["cst_firstname"], trim_text),
            "cst_lastname": _apply(latest["cst_lastname"], trim_text),
            "cst_marital_status": _apply(latest["cst_marital_status"], normalize_marital_status),
            "cst_gndr": _apply(latest["cst_gndr"], normalize_crm_gender),
            "cst_create_date": _apply(latest["cst_create_date"], to_date),
        },
        columns=_output_columns(CRM_CUST_INFO),
    )


@silver_entity(
    target_table=CRM_PRD_INFO,
    step_name="LOAD_CRM_PRODUCTS",
    description="Loading CRM products into Silver",
    business_key=["prd_key", "prd_start_dt"],
)
def load_crm_products(frame: pd.DataFrame, context: TransformContext) -> pd.DataFrame:
    """Split product keys, default costs and derive validity end dates."""
    require_columns(frame, CRM_PRD_INFO, BRONZE_COLUMNS[CRM_PRD_INFO])
    keys = [split_product_key(value) for value in frame["prd_key"]]

    products = pd.DataFrame(
        {
            "prd_id": _integers(frame["prd_id"]),
            "cat_id": pd.Series([cat_id for cat_id, _ in keys], index=frame.index, dtype="object"),
            "prd_key": pd.Series([prd_key for _, prd_key in keys], index=frame.index, dtype="object"),
            "prd_nm": frame["prd_nm"],
            "prd_cost": _integers(frame["prd_cost"]).fillna(0),
            "prd_line": _apply(frame["prd_line"], normalize_product_line),
            "prd_start_dt": frame["prd_start_dt"],
        }
    )
    products = assign_end_dates(products, key="prd_key", start="prd_start_dt", end="prd_end_dt")
    return products[_output_columns(CRM_PRD_INFO)].reset_index(drop=True)


@silver_entity(
    target_table=CRM_SALES_DETAILS,
    step_name="LOAD_CRM_SALES",
    description="Loading CRM sales details into Silver",
    business_key=["sls_ord_num", "sls_prd_key", "sls_cust_id"],
    key_severity=CheckSeverity.WARN,
)
def load_crm_sales(frame: pd.DataFrame, context: TransformContext) -> pd.DataFrame:
    """Decode integer dates and repair sales and price measures."""
    require_columns(frame, CRM_SALES_DETAILS, BRONZE_COLUMNS[CRM_SALES_DETAILS])

    sales = pd.DataFrame(
        {
            "sls_ord_num": frame["sls_ord_num"],
            "sls_prd_key": frame["sls_prd_key"],
            "sls_cust_id": _integers(frame["sls_cust_id"]),
            "sls_order_dt": _apply(frame["sls_order_dt"], decode_yyyymmdd),
            "sls_ship_dt": _apply(frame["sls_ship_dt"], decode_yyyymmdd),
            "sls_due_dt": _apply(frame["sls_due_dt"], decode_yyyymmdd),
            "sls_sales": frame["sls_sales"],
            "sls_quantity": _integers(frame["sls_quantity"]),
            "sls_price": frame["sls_price"],
        }
    )
    sales = reconcile_frame(sales)
    return sales[_output_columns(CRM_SALES_DETAILS)].reset_index(drop=True)


@silver_entity(
    target_table=ERP_CUST_AZ12,
    step_name="LOAD_ERP_CUST_AZ12",
    description="Loading ERP customer demographics into Silver",
    business_key=["CID"],
)
def load_erp_customers(frame: pd.DataFrame, context: TransformContext) -> pd.DataFrame:
    """Strip the NAS id prefix, null future birth dates and map gender."""
    require_columns(frame, ERP_CUST_AZ12, BRONZE_COLUMNS[ERP_CUST_AZ12])

    def birth_date(value):
        parsed = to_date(value)
        if parsed is not None and parsed > context.today:
            return None
        return parsed

    return pd.DataFrame(
        {
            "CID": _apply(frame["CID"], strip_customer_prefix),
            "BDATE": _apply(frame["BDATE"], birth_date),
            "GEN": _apply(frame["GEN"], normalize_erp_gender),
        },
        columns=_output_columns(ERP_CUST_AZ12),
    ).reset_index(drop=True)


@silver_entity(
    target_table=ERP_LOC_A101,
    step_name="LOAD_ERP_LOC_A101",
    description="Loading ERP location into Silver",
    business_key=["CID"],
)
def load_erp_locations(frame: pd.DataFrame, context: TransformContext) -> pd.DataFrame:
    require_columns(frame, ERP_LOC_A101, BRONZE_COLUMNS[ERP_LOC_A101])
    return pd.DataFrame(
        {
            "CID": _apply(frame["CID"], strip_dashes),
            "CNTRY": _apply(frame["CNTRY"], normalize_country),
        },
        columns=_output_columns(ERP_LOC_A101),
    ).reset_index(drop=True)


@silver_entity(
    target_table=ERP_PX_CAT_G1V2,
    step_name="LOAD_ERP_PX_CAT_G1V2",
    description="Loading ERP product categories into Silver",
    business_key=["ID"],
)
def load_erp_product_categories(frame: pd.DataFrame, context: TransformContext) -> pd.DataFrame:
    require_columns(frame, ERP_PX_CAT_G1V2, BRONZE_COLUMNS[ERP_PX_CAT_G1V2])
    return frame[_output_columns(ERP_PX_CAT_G1V2)].reset_index(drop=True)
