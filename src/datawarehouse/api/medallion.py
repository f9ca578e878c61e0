from typing import Dict, Iterable, Optional

import pandas as pd

from datawarehouse.common.exceptions import data_quality_error, layer_processing_error
from datawarehouse.constants import CheckSeverity, Layer
from datawarehouse.logging import setup_logging
from datawarehouse.logging.filters import set_logging_context
from datawarehouse.medallion.gold import build_gold
from datawarehouse.medallion.silver import SilverProcessor
from datawarehouse.medallion.silver.schemas import CRM_PRD_INFO, SILVER_COLUMNS
from datawarehouse.monitoring.metrics import MetricsCollector
from datawarehouse.quality import run_gold_checks, run_silver_checks
from datawarehouse.settings import get_settings
from datawarehouse.settings.main import _Settings
from datawarehouse.storage import WarehouseStore
from datawarehouse.types.quality import QualityReport
from datawarehouse.types.run import RunReport
from datawarehouse.utils.datetime import get_current_date


_metrics_collector: Optional[MetricsCollector] = None


def _get_metrics() -> MetricsCollector:
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


def _resolve(settings: Optional[_Settings], store: Optional[WarehouseStore]):
    settings = settings or get_settings()
    return settings, store or WarehouseStore(settings.storage)


def configure_logging(settings: Optional[_Settings] = None) -> None:
    """Install JSON logging at the configured level, tagged with the environment."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    set_logging_context(environment=settings.environment)


def run_silver_load(
    settings: Optional[_Settings] = None,
    store: Optional[WarehouseStore] = None,
    *,
    entities: Optional[Iterable[str]] = None,
    raise_on_failure: bool = True,
) -> RunReport:
    """Run a full truncate-and-reload of the Silver layer from Bronze.

    Every selected entity is attempted even when another one fails.

    Args:
        settings: Settings override. Defaults to ``get_settings()``.
        store: Store override. Defaults to a store built from the settings.
        entities: Subset of target table or step names to load.
        raise_on_failure: Raise after the run if any entity failed.

    Returns:
        The run report.

    Raises:
        DWError: LAYER_PROCESSING_ERROR listing the failed steps, when
            ``raise_on_failure`` is set.
    """
    settings, store = _resolve(settings, store)
    report = SilverProcessor(settings=settings, store=store, metrics=_get_metrics()).run(entities=entities)
    if raise_on_failure and not report.succeeded:
        raise layer_processing_error(Layer.SILVER.value, report.failed_steps, details={"run_id": report.run_id})
    return report


def build_gold_layer(
    settings: Optional[_Settings] = None,
    store: Optional[WarehouseStore] = None,
    *,
    persist: bool = True,
) -> Dict[str, pd.DataFrame]:
    """Build dim_customers, dim_products and fact_sales from Silver."""
    _, store = _resolve(settings, store)
    return build_gold(store, persist=persist)


def _raise_for_failed_checks(report: QualityReport) -> None:
    failed = [r.check_name for r in report.failures if r.severity == CheckSeverity.ERROR.value]
    if failed:
        raise data_quality_error(report.layer, failed)


def check_silver_quality(
    settings: Optional[_Settings] = None,
    store: Optional[WarehouseStore] = None,
    *,
    raise_on_failure: bool = False,
) -> QualityReport:
    """Run the Silver quality checks against the stored Silver tables.

    Bronze tables that exist are counted for the ROWCOUNT checks.

    Raises:
        DWError: DATA_QUALITY_ERROR naming the failed ERROR-severity checks,
            when ``raise_on_failure`` is set.
    """
    settings, store = _resolve(settings, store)
    tables = {name: store.read_table(Layer.SILVER, name) for name in SILVER_COLUMNS}
    bronze_counts = {
        name: store.row_count(Layer.BRONZE, name) for name in SILVER_COLUMNS if store.table_exists(Layer.BRONZE, name)
    }
    report = run_silver_checks(
        tables, today=get_current_date(settings.processing.time_zone), bronze_counts=bronze_counts
    )
    if raise_on_failure:
        _raise_for_failed_checks(report)
    return report


def check_gold_quality(
    settings: Optional[_Settings] = None,
    store: Optional[WarehouseStore] = None,
    gold: Optional[Dict[str, pd.DataFrame]] = None,
    *,
    raise_on_failure: bool = False,
) -> QualityReport:
    """Run the Gold quality checks, building Gold from Silver unless given."""
    settings, store = _resolve(settings, store)
    gold = gold if gold is not None else build_gold(store)
    report = run_gold_checks(
        gold,
        silver_products=store.read_table(Layer.SILVER, CRM_PRD_INFO),
        today=get_current_date(settings.processing.time_zone),
    )
    if raise_on_failure:
        _raise_for_failed_checks(report)
    return report
