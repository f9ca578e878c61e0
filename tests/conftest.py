import pandas as pd
import pytest

from datawarehouse.settings import ProcessingSettings, Settings, StorageSettings
from datawarehouse.storage import WarehouseStore


@pytest.fixture
def settings(tmp_path):
    return Settings(
        storage=StorageSettings(database_url=f"sqlite:///{tmp_path / 'warehouse.db'}"),
        processing=ProcessingSettings(time_zone="UTC"),
    )


@pytest.fixture
def store(settings):
    warehouse = WarehouseStore(settings.storage)
    yield warehouse
    warehouse.dispose()


@pytest.fixture
def bronze_frames():
    """Small raw extracts with the defects the Silver rules repair."""
    return {
        "crm_cust_info": pd.DataFrame(
            {
                "cst_id": [11000, 11000, 11001, 11002],
                "cst_key": ["AW00011000", "AW00011000", "AW00011001", "AW00011002"],
                "cst_firstname": [" Jon", "Jon", "Eugene", "Ruben "],
                "cst_lastname": ["Yang ", "Yang", " Huang", "Torres"],
                "cst_marital_status": ["M", "S", "s", None],
                "cst_gndr": ["M", "F", " f ", None],
                "cst_create_date": pd.to_datetime(["2025-10-06", "2024-01-01", "2025-10-06", "2025-10-07"]),
            }
        ),
        "crm_prd_info": pd.DataFrame(
            {
                "prd_id": [210, 211, 212, 213, 214],
                "prd_key": [
                    "CO-RF-FR-R92B-58",
                    "CO-RF-FR-R92R-58",
                    "AC-HE-HL-U509-R",
                    "AC-HE-HL-U509-R",
                    "AC-HE-HL-U509-R",
                ],
                "prd_nm": ["HL Road Frame - Black- 58", "HL Road Frame - Red- 58"] + ["Sport-100 Helmet- Red"] * 3,
                "prd_cost": [None, 1431, 12, 14, 13],
                "prd_line": ["R ", "r", "S", "S", "x"],
                "prd_start_dt": pd.to_datetime(
                    ["2003-07-01", "2003-07-01", "2013-07-01", "2011-07-01", "2012-07-01"]
                ),
                "prd_end_dt": [None] * 5,
            }
        ),
        "crm_sales_details": pd.DataFrame(
            {
                "sls_ord_num": ["SO43697", "SO43698", "SO43699", "SO43700"],
                "sls_prd_key": ["FR-R92B-58", "FR-R92R-58", "HL-U509-R", "BK-M82S-44"],
                "sls_cust_id": [11000, 11001, 11002, 99999],
                "sls_order_dt": [20101229, 0, 20231301, 20110101],
                "sls_ship_dt": [20110105, 20110105, 5489, 20110108],
                "sls_due_dt": [20110110, 20110110, 20110110, 20110113],
                "sls_sales": [3578, None, 100, -40],
                "sls_quantity": [1, 5, 2, 4],
                "sls_price": [3578, -10, None, 10],
            }
        ),
        "erp_cust_az12": pd.DataFrame(
            {
                "CID": ["NASAW00011000", "AW00011001", "nasAW00011002"],
                "BDATE": pd.to_datetime(["1971-10-06", "2099-01-01", "1980-01-01"]),
                "GEN": ["Male", "F", None],
            }
        ),
        "erp_loc_a101": pd.DataFrame(
            {
                "CID": ["AW-00011000", "AW-00011001", "AW-00011002", "AW-00011003", "AW-00011004"],
                "CNTRY": ["DE", " US ", "", None, "Australia "],
            }
        ),
        "erp_px_cat_g1v2": pd.DataFrame(
            {
                "ID": ["CO_RF", "AC_HE"],
                "CAT": ["Components", "Accessories"],
                "SUBCAT": ["Road Frames", "Helmets"],
                "MAINTENANCE": ["Yes", "Yes"],
            }
        ),
    }


@pytest.fixture
def loaded_store(store, bronze_frames):
    for table_name, frame in bronze_frames.items():
        store.write_bronze(table_name, frame)
    return store
