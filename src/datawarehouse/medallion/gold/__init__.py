"""Gold layer: star-schema dimensions and fact derived from Silver."""

from datawarehouse.medallion.gold.views import (
    DIM_CUSTOMERS,
    DIM_PRODUCTS,
    FACT_SALES,
    build_dim_customers,
    build_dim_products,
    build_fact_sales,
    build_gold,
    resolve_gender,
    surrogate_key,
)

__all__ = [
    "DIM_CUSTOMERS",
    "DIM_PRODUCTS",
    "FACT_SALES",
    "surrogate_key",
    "resolve_gender",
    "build_dim_customers",
    "build_dim_products",
    "build_fact_sales",
    "build_gold",
]
