"""Bronze input and Silver output column layouts for the six entities."""

from typing import Dict, Iterable, List

import pandas as pd

from datawarehouse.common.exceptions import missing_columns_error
from datawarehouse.constants import LOAD_TIMESTAMP_COLUMN

CRM_CUST_INFO = "crm_cust_info"
CRM_PRD_INFO = "crm_prd_info"
CRM_SALES_DETAILS = "crm_sales_details"
ERP_CUST_AZ12 = "erp_cust_az12"
ERP_LOC_A101 = "erp_loc_a101"
ERP_PX_CAT_G1V2 = "erp_px_cat_g1v2"

# Columns a Bronze extract must provide. Extra columns are ignored.
BRONZE_COLUMNS: Dict[str, List[str]] = {
    CRM_CUST_INFO: [
        "cst_id", "cst_key", "cst_firstname", "cst_lastname",
        "cst_marital_status", "cst_gndr", "cst_create_date",
    ],
    CRM_PRD_INFO: ["prd_id", "prd_key", "prd_nm", "prd_cost", "prd_line", "prd_start_dt"],
    CRM_SALES_DETAILS: [
        "sls_ord_num", "sls_prd_key", "sls_cust_id", "sls_order_dt", "sls_ship_dt",
        "sls_due_dt", "sls_sales", "sls_quantity", "sls_price",
    ],
    ERP_CUST_AZ12: ["CID", "BDATE", "GEN"],
    ERP_LOC_A101: ["CID", "CNTRY"],
    ERP_PX_CAT_G1V2: ["ID", "CAT", "SUBCAT", "MAINTENANCE"],
}

SILVER_COLUMNS: Dict[str, List[str]] = {
    CRM_CUST_INFO: BRONZE_COLUMNS[CRM_CUST_INFO] + [LOAD_TIMESTAMP_COLUMN],
    CRM_PRD_INFO: [
        "prd_id", "cat_id", "prd_key", "prd_nm", "prd_cost", "prd_line",
        "prd_start_dt", "prd_end_dt", LOAD_TIMESTAMP_COLUMN,
    ],
    CRM_SALES_DETAILS: BRONZE_COLUMNS[CRM_SALES_DETAILS] + [LOAD_TIMESTAMP_COLUMN],
    ERP_CUST_AZ12: BRONZE_COLUMNS[ERP_CUST_AZ12] + [LOAD_TIMESTAMP_COLUMN],
    ERP_LOC_A101: BRONZE_COLUMNS[ERP_LOC_A101] + [LOAD_TIMESTAMP_COLUMN],
    ERP_PX_CAT_G1V2: BRONZE_COLUMNS[ERP_PX_CAT_G1V2] + [LOAD_TIMESTAMP_COLUMN],
}


def require_columns(frame: pd.DataFrame, table_name: str, columns: Iterable[str]) -> None:
    """Raise MISSING_COLUMN if ``frame`` lacks any of ``columns``."""
    missing = set(columns) - set(frame.columns)
    if missing:
        raise missing_columns_error(table_name, missing)