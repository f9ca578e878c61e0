"""Unit tests for the Silver and Gold data quality checks."""

from datetime import date

import pandas as pd
import pytest

from datawarehouse.api import check_gold_quality, check_silver_quality
from datawarehouse.medallion.silver import SilverProcessor
from datawarehouse.quality import run_gold_checks, run_silver_checks
from datawarehouse.quality.checks import blank_count, duplicate_groups, outside_domain

TODAY = date(2025, 1, 15)


@pytest.fixture
def silver_tables():
    """A clean Silver snapshot; tests inject one defect at a time."""
    return {
        "crm_cust_info": pd.DataFrame({
            "cst_id": [1, 2],
            "cst_key": ["AW1", "AW2"],
            "cst_marital_status": ["Married", "N/A"],
            "cst_gndr": ["Male", "Female"],
        }),
        "crm_prd_info": pd.DataFrame({
            "prd_key": ["HL-U509-R", "HL-U509-R"],
            "prd_line": ["Other Sales", "N/A"],
            "prd_start_dt": [date(2011, 7, 1), date(2012, 7, 1)],
            "prd_end_dt": [date(2012, 6, 30), None],
        }),
        "crm_sales_details": pd.DataFrame({
            "sls_ord_num": ["SO1"],
            "sls_prd_key": ["HL-U509-R"],
            "sls_cust_id": [1],
            "sls_order_dt": [date(2011, 1, 1)],
            "sls_sales": [26],
            "sls_quantity": [2],
            "sls_price": [13],
        }),
        "erp_cust_az12": pd.DataFrame({
            "CID": ["AW1"], "BDATE": [date(1971, 10, 6)], "GEN": ["Male"],
        }),
        "erp_loc_a101": pd.DataFrame({"CID": ["AW1"], "CNTRY": ["Germany"]}),
        "erp_px_cat_g1v2": pd.DataFrame({"ID": ["AC_HE"]}),
    }


class TestCheckHelpers:

    def test_duplicate_groups_counts_groups_not_rows(self):
        frame = pd.DataFrame({"k": [1, 1, 1, 2, 3, 3, None, None]})
        assert duplicate_groups(frame, ["k"]) == 3

    def test_blank_count(self):
        assert blank_count(pd.Series(["a", " ", "", None])) == 3

    def test_outside_domain(self):
        assert outside_domain(pd.Series(["Male", "M", None]), {"Male", "Female"}) == 2


class TestSilverChecks:

    def test_clean_snapshot_passes(self, silver_tables):
        report = run_silver_checks(silver_tables, today=TODAY)

        assert report.passed
        assert report.failures == []
        assert {r.layer for r in report.results} == {"silver"}

    def test_duplicate_customer_fails(self, silver_tables):
        customers = silver_tables["crm_cust_info"]
        silver_tables["crm_cust_info"] = pd.concat([customers, customers.iloc[[0]]], ignore_index=True)

        report = run_silver_checks(silver_tables, today=TODAY)

        assert not report.passed
        assert report.get("DUP crm_cust_info.cst_id").failed_count == 1

    def test_future_birth_date_fails(self, silver_tables):
        silver_tables["erp_cust_az12"]["BDATE"] = [date(2025, 1, 16)]

        report = run_silver_checks(silver_tables, today=TODAY)

        assert report.get("DATE erp_cust_az12.BDATE not in future").failed_count == 1

    def test_overlapping_history_fails(self, silver_tables):
        silver_tables["crm_prd_info"]["prd_end_dt"] = [None, None]

        report = run_silver_checks(silver_tables, today=TODAY)

        assert report.get("SCD crm_prd_info single open row per prd_key").failed_count == 1

    def test_end_before_start_fails(self, silver_tables):
        silver_tables["crm_prd_info"]["prd_end_dt"] = [date(2011, 6, 30), None]

        report = run_silver_checks(silver_tables, today=TODAY)

        assert report.get("DATE crm_prd_info.end_dt >= start_dt").failed_count == 1

    def test_orphans_only_warn(self, silver_tables):
        silver_tables["crm_sales_details"]["sls_cust_id"] = [99]

        report = run_silver_checks(silver_tables, today=TODAY)

        orphan = report.get("RI sales -> customers")
        assert orphan.failed_count == 1
        assert orphan.severity == "WARN"
        assert report.passed

    def test_summary_lists_failures_first(self, silver_tables):
        silver_tables["erp_loc_a101"]["CNTRY"] = [" "]

        summary = run_silver_checks(silver_tables, today=TODAY).summary()

        assert summary[0]["check_name"] == "DOMAIN erp_loc_a101.CNTRY not empty"
        assert summary[0]["status"] == "FAIL"
        assert all(row["status"] == "PASS" for row in summary[1:])


class TestKeyChecks:

    def test_every_declared_key_is_checked(self, silver_tables):
        names = {r.check_name for r in run_silver_checks(silver_tables, today=TODAY).results}

        assert {
            "DUP crm_cust_info.cst_id",
            "DUP crm_prd_info(prd_key, prd_start_dt)",
            "DUP crm_sales_details(sls_ord_num, sls_prd_key, sls_cust_id)",
            "DUP erp_cust_az12.CID",
            "DUP erp_loc_a101.CID",
            "DUP erp_px_cat_g1v2.ID",
            "NULL crm_sales_details.sls_ord_num",
            "NULL erp_cust_az12.CID",
        } <= names

    def test_repeated_sales_line_only_warns(self, silver_tables):
        sales = silver_tables["crm_sales_details"]
        silver_tables["crm_sales_details"] = pd.concat([sales, sales], ignore_index=True)

        report = run_silver_checks(silver_tables, today=TODAY)

        duplicate = report.get("DUP crm_sales_details(sls_ord_num, sls_prd_key, sls_cust_id)")
        assert duplicate.failed_count == 1
        assert duplicate.severity == "WARN"
        assert report.passed

    def test_blank_leading_key_fails(self, silver_tables):
        silver_tables["erp_cust_az12"]["CID"] = ["  "]

        report = run_silver_checks(silver_tables, today=TODAY)

        assert report.get("NULL erp_cust_az12.CID").failed_count == 1
        assert not report.passed


class TestRowCountChecks:

    def test_skipped_without_bronze_counts(self, silver_tables):
        report = run_silver_checks(silver_tables, today=TODAY)

        assert not [r for r in report.results if r.check_name.startswith("ROWCOUNT")]

    def test_matching_counts_pass(self, silver_tables):
        counts = {name: len(frame) for name, frame in silver_tables.items()}
        counts["crm_cust_info"] = 5

        report = run_silver_checks(silver_tables, today=TODAY, bronze_counts=counts)

        assert len([r for r in report.results if r.check_name.startswith("ROWCOUNT")]) == 6
        assert report.failures == []

    def test_lost_or_extra_rows_warn(self, silver_tables):
        counts = {name: len(frame) for name, frame in silver_tables.items()}
        counts["crm_prd_info"] = 5
        counts["crm_cust_info"] = 1

        report = run_silver_checks(silver_tables, today=TODAY, bronze_counts=counts)

        assert report.get("ROWCOUNT crm_prd_info").failed_count == 3
        assert report.get("ROWCOUNT crm_cust_info").failed_count == 1
        assert report.get("ROWCOUNT crm_cust_info").severity == "WARN"
        assert report.passed


class TestGoldChecks:

    def test_closed_product_rows_detected(self, silver_tables):
        gold = {
            "dim_customers": pd.DataFrame({
                "customer_key": [10], "customer_id": [1], "customer_number": ["AW1"],
                "gender": ["Male"], "birth_date": [date(1971, 10, 6)],
            }),
            "dim_products": pd.DataFrame({
                "product_key": [20, 21], "product_id": [1, 2],
                "product_number": ["HL-U509-R", "HL-U509-R"], "cost": [12, 13],
                "start_date": [date(2011, 7, 1), date(2012, 7, 1)],
            }),
            "fact_sales": pd.DataFrame({
                "order_number": ["SO1"], "product_key": [21], "customer_key": [10],
                "order_date": [date(2011, 1, 1)], "ship_date": [date(2011, 1, 8)],
                "due_date": [date(2011, 1, 13)], "sales_amount": [13], "quantity": [1], "price": [13],
            }),
        }

        report = run_gold_checks(gold, silver_products=silver_tables["crm_prd_info"], today=TODAY)

        assert report.get("SCD dim_products has no closed rows").failed_count == 1
        assert report.get("DUP dim_products.product_number").failed_count == 1
        assert not report.passed


class TestQualityOnLoadedWarehouse:

    def test_sample_warehouse(self, settings, loaded_store):
        SilverProcessor(settings=settings, store=loaded_store).run()

        silver = check_silver_quality(settings, loaded_store)
        gold = check_gold_quality(settings, loaded_store)

        assert silver.passed
        assert sorted(r.check_name for r in silver.failures) == ["RI sales -> customers", "RI sales -> products"]
        assert silver.get("ROWCOUNT crm_cust_info").passed
        assert gold.passed
        assert sorted(r.check_name for r in gold.failures) == [
            "RI fact_sales -> dim_customers",
            "RI fact_sales -> dim_products",
        ]
