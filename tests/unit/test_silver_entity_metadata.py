"""Unit tests for Silver entity registration and metadata."""

import pytest

from datawarehouse.medallion.silver import decorators
from datawarehouse.medallion.silver.decorators import get_metadata, registered_entities, silver_entity
from datawarehouse.types.metadata import SilverEntityMetadata


@pytest.fixture
def isolated_registry(monkeypatch):
    monkeypatch.setattr(decorators, "_registry", list(decorators._registry))


class TestSilverEntityMetadata:
    """Metadata model behaviour."""

    def test_disabled_defaults_false(self):
        metadata = SilverEntityMetadata(
            target_table="crm_cust_info",
            source_table="crm_cust_info",
            step_name="LOAD_CRM_CUSTOMERS",
        )
        assert metadata.disabled is False

    def test_key_defaults(self):
        metadata = SilverEntityMetadata(
            target_table="erp_loc_a101",
            source_table="erp_loc_a101",
            step_name="LOAD_ERP_LOC_A101",
        )
        assert metadata.business_key == []
        assert metadata.key_severity == "ERROR"

    def test_sales_key_is_the_line_grain(self):
        sales = next(
            get_metadata(func) for func in registered_entities()
            if get_metadata(func).target_table == "crm_sales_details"
        )
        assert sales.business_key == ["sls_ord_num", "sls_prd_key", "sls_cust_id"]
        assert sales.key_severity == "WARN"


class TestSilverEntityDecorator:
    """Decorator attaches metadata and registers transforms."""

    def test_builtin_entities_in_load_order(self):
        steps = [get_metadata(func).step_name for func in registered_entities()]
        assert steps == [
            "LOAD_CRM_CUSTOMERS",
            "LOAD_CRM_PRODUCTS",
            "LOAD_CRM_SALES",
            "LOAD_ERP_CUST_AZ12",
            "LOAD_ERP_LOC_A101",
            "LOAD_ERP_PX_CAT_G1V2",
        ]

    def test_decorator_attaches_metadata(self, isolated_registry):
        @silver_entity(target_table="crm_extra", step_name="LOAD_CRM_EXTRA", description="Extra")
        def load_extra(frame, context):
            return frame

        metadata = load_extra._silver_metadata
        assert metadata.source_table == "crm_extra"
        assert metadata.description == "Extra"
        assert metadata.disabled is False
        assert registered_entities()[-1] is load_extra

    def test_decorator_with_disabled_true(self, isolated_registry):
        @silver_entity(target_table="erp_extra", step_name="LOAD_ERP_EXTRA", disabled=True)
        def load_extra(frame, context):
            return frame

        assert get_metadata(load_extra).disabled is True

    def test_get_metadata_rejects_plain_function(self):
        def plain(frame, context):
            return frame

        with pytest.raises(ValueError):
            get_metadata(plain)
