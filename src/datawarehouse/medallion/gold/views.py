"""Gold star-schema builders.

Three denormalized frames are derived from Silver:

    dim_customers  CRM customers enriched with ERP demographics and location
    dim_products   currently active products (open validity range) with categories
    fact_sales     sales lines keyed by both dimensions

Surrogate keys are deterministic hashes of the business key, so they are
stable across runs. All joins are left joins: unmatched rows keep a null key
and are never dropped.
"""

import hashlib
from typing import Any, Dict, Optional

import pandas as pd

from datawarehouse.constants import Layer, NOT_AVAILABLE
from datawarehouse.logging import get_logger
from datawarehouse.medallion.silver.normalizers import is_missing
from datawarehouse.medallion.silver.schemas import (
    CRM_CUST_INFO,
    CRM_PRD_INFO,
    CRM_SALES_DETAILS,
    ERP_CUST_AZ12,
    ERP_LOC_A101,
    ERP_PX_CAT_G1V2,
)

logger = get_logger(__name__)

DIM_CUSTOMERS = "dim_customers"
DIM_PRODUCTS = "dim_products"
FACT_SALES = "fact_sales"


def surrogate_key(value: Any) -> Optional[int]:
    """Deterministic signed 64-bit key for a business key value.

    Integral floats hash like the matching integer, so a key read back from
    a nullable numeric column keeps its surrogate.
    """
    if is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    digest = hashlib.md5(str(value).encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=True)


def resolve_gender(crm_gender: Any, erp_gender: Any) -> str:
    """CRM gender unless it is ``N/A``; then ERP gender; then ``N/A``."""
    if not is_missing(crm_gender) and crm_gender != NOT_AVAILABLE:
        return crm_gender
    if is_missing(erp_gender):
        return NOT_AVAILABLE
    return erp_gender


def _keys(series: pd.Series) -> pd.Series:
    return pd.Series([surrogate_key(v) for v in series], index=series.index, dtype="Int64")


def _int_key(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").astype("Int64")


def build_dim_customers(
    customers: pd.DataFrame,
    demographics: pd.DataFrame,
    locations: pd.DataFrame,
) -> pd.DataFrame:
    """Customer dimension joined to ERP data on the customer business key."""
    merged = customers.merge(
        demographics[["CID", "BDATE", "GEN"]].rename(columns={"CID": "_az12_cid"}),
        how="left",
        left_on="cst_key",
        right_on="_az12_cid",
    ).merge(
        locations[["CID", "CNTRY"]].rename(columns={"CID": "_loc_cid"}),
        how="left",
        left_on="cst_key",
        right_on="_loc_cid",
    )

    return pd.DataFrame(
        {
            "customer_key": _keys(merged["cst_id"]),
            "customer_id": _int_key(merged["cst_id"]),
            "customer_number": merged["cst_key"],
            "first_name": merged["cst_firstname"],
            "last_name": merged["cst_lastname"],
            "country": merged["CNTRY"],
            "marital_status": merged["cst_marital_status"],
            "gender": [resolve_gender(crm, erp) for crm, erp in zip(merged["cst_gndr"], merged["GEN"])],
            "create_date": merged["cst_create_date"],
            "birth_date": merged["BDATE"],
        }
    )


def build_dim_products(products: pd.DataFrame, categories: pd.DataFrame) -> pd.DataFrame:
    """Product dimension restricted to rows whose validity range is still open."""
    active = products[products["prd_end_dt"].isna()]
    merged = active.merge(
        categories[["ID", "CAT", "SUBCAT", "MAINTENANCE"]],
        how="left",
        left_on="cat_id",
        right_on="ID",
    )

    return pd.DataFrame(
        {
            "product_key": _keys(merged["prd_key"]),
            "product_id": _int_key(merged["prd_id"]),
            "product_number": merged["prd_key"],
            "product_name": merged["prd_nm"],
            "category_id": merged["cat_id"],
            "category": merged["CAT"],
            "sub_category": merged["SUBCAT"],
            "maintenance": merged["MAINTENANCE"],
            "cost": merged["prd_cost"],
            "product_line": merged["prd_line"],
            "start_date": merged["prd_start_dt"],
        }
    )


def build_fact_sales(
    sales: pd.DataFrame,
    dim_products: pd.DataFrame,
    dim_customers: pd.DataFrame,
) -> pd.DataFrame:
    """Sales fact with dimension surrogate keys; orphans keep null keys."""
    lines = sales.assign(_cust_id=_int_key(sales["sls_cust_id"]))
    customers = dim_customers[["customer_id", "customer_key"]].assign(
        customer_id=_int_key(dim_customers["customer_id"])
    )

    merged = lines.merge(
        dim_products[["product_number", "product_key"]],
        how="left",
        left_on="sls_prd_key",
        right_on="product_number",
    ).merge(
        customers,
        how="left",
        left_on="_cust_id",
        right_on="customer_id",
    )

    return pd.DataFrame(
        {
            "order_number": merged["sls_ord_num"],
            "product_key": merged["product_key"].astype("Int64"),
            "customer_key": merged["customer_key"].astype("Int64"),
            "order_date": merged["sls_order_dt"],
            "ship_date": merged["sls_ship_dt"],
            "due_date": merged["sls_due_dt"],
            "sales_amount": merged["sls_sales"],
            "quantity": merged["sls_quantity"],
            "price": merged["sls_price"],
        }
    )


def build_gold(store, persist: bool = False) -> Dict[str, pd.DataFrame]:
    """Build the Gold frames from the Silver tables of ``store``.

    Args:
        store: WarehouseStore holding the Silver layer
        persist: Also replace the Gold tables in the store

    Returns:
        Mapping of ``dim_customers``, ``dim_products`` and ``fact_sales``.
    """
    dim_customers = build_dim_customers(
        store.read_table(Layer.SILVER, CRM_CUST_INFO),
        store.read_table(Layer.SILVER, ERP_CUST_AZ12),
        store.read_table(Layer.SILVER, ERP_LOC_A101),
    )
    dim_products = build_dim_products(
        store.read_table(Layer.SILVER, CRM_PRD_INFO),
        store.read_table(Layer.SILVER, ERP_PX_CAT_G1V2),
    )
    fact_sales = build_fact_sales(
        store.read_table(Layer.SILVER, CRM_SALES_DETAILS),
        dim_products,
        dim_customers,
    )
    gold = {DIM_CUSTOMERS: dim_customers, DIM_PRODUCTS: dim_products, FACT_SALES: fact_sales}

    if persist:
        for table_name, frame in gold.items():
            store.replace_table(Layer.GOLD, table_name, frame)

    logger.info("Gold layer built", extra={name: len(frame) for name, frame in gold.items()})
    return gold
