"""Silver layer processor.

This module provides the SilverProcessor class, which runs the registered
entity transforms as one full truncate-and-reload of the Silver layer.

Silver Load Flow (per entity):
    Source Reader -> entity transform (normalize, deduplicate, derive end
    dates, decode dates, reconcile measures as applicable) -> stamp
    ``dwh_load_ts`` -> Loader (transactional replace)

Entities are independent. A failing entity is recorded as FAILED in the run
log and leaves its Silver table untouched; the remaining entities still load.

Example:
    >>> from datawarehouse.medallion.silver import SilverProcessor
    >>>
    >>> report = SilverProcessor().run()
    >>> report.failed_steps
    []
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from datawarehouse.common.exceptions import DWError, ErrorCode, transformation_error, validation_error
from datawarehouse.constants import LOAD_TIMESTAMP_COLUMN, Layer, StepStatus, TOTAL_STEP
from datawarehouse.logging import get_logger
from datawarehouse.medallion.silver.decorators import EntityTransform, get_metadata, registered_entities
from datawarehouse.monitoring import LoadMetrics, MetricsCollector
from datawarehouse.observability import RunLog, StepHandle
from datawarehouse.settings.main import _Settings
from datawarehouse.storage import WarehouseStore
from datawarehouse.types.metadata import SilverEntityMetadata
from datawarehouse.types.run import EntityResult, RunReport, TransformContext
from datawarehouse.utils.datetime import get_current_timestamp

# Importing the module registers the built-in entity transforms.
import datawarehouse.medallion.silver.transformations  # noqa: F401

logger = get_logger(__name__)


class SilverProcessor:
    """Runs the Silver entity loads and records them in a run log.

    Attributes:
        settings: Application settings
        store: Warehouse store used for reads and writes
        metrics: Metrics collector fed one record per entity
    """

    def __init__(
        self,
        settings: Optional[_Settings] = None,
        store: Optional[WarehouseStore] = None,
        metrics: Optional[MetricsCollector] = None,
        transforms: Optional[List[EntityTransform]] = None,
    ):
        if settings is None:
            from datawarehouse.settings import get_settings
            settings = get_settings()
        self.settings = settings
        self.store = store or WarehouseStore(settings.storage)
        self.metrics = metrics or MetricsCollector()
        self._transforms = transforms if transforms is not None else registered_entities()

    @property
    def entities(self) -> List[SilverEntityMetadata]:
        return [get_metadata(func) for func in self._transforms]

    def _select(self, entities: Optional[Iterable[str]]) -> List[EntityTransform]:
        if entities is None:
            return list(self._transforms)

        wanted = set(entities)
        known = {name for meta in self.entities for name in (meta.target_table, meta.step_name)}
        unknown = wanted - known
        if unknown:
            raise validation_error(
                f"Unknown Silver entities: {', '.join(sorted(unknown))}",
                field="entities",
                value=sorted(unknown),
            )
        return [
            func for func in self._transforms
            if {get_metadata(func).target_table, get_metadata(func).step_name} & wanted
        ]

    def run(self, entities: Optional[Iterable[str]] = None, run_id: Optional[str] = None) -> RunReport:
        """Load every selected entity from Bronze into Silver.

        Args:
            entities: Target table or step names to load. Defaults to all.
            run_id: Explicit run id. Generated when omitted.

        Returns:
            RunReport with all step events and per-entity results.
        """
        selected = self._select(entities)
        processing = self.settings.processing
        run_log = RunLog(run_id=run_id, time_zone=processing.time_zone)
        load_ts = get_current_timestamp(processing.time_zone)
        context = TransformContext(run_id=run_log.run_id, load_ts=load_ts, today=load_ts.date())
        results: Dict[str, EntityResult] = {}

        logger.info(
            "Starting Silver load",
            extra={"run_id": run_log.run_id, "entities": [get_metadata(f).target_table for f in selected]},
        )

        with run_log.step(TOTAL_STEP, "Silver load (total)") as total:
            if processing.max_workers > 1 and len(selected) > 1:
                with ThreadPoolExecutor(max_workers=processing.max_workers, thread_name_prefix="silver") as pool:
                    outcomes = list(pool.map(lambda func: self._load_entity(func, context, run_log), selected))
            else:
                outcomes = [self._load_entity(func, context, run_log) for func in selected]

            for outcome in outcomes:
                results[outcome.entity] = outcome

            total.rows_read = sum(r.rows_read for r in outcomes)
            total.rows_written = sum(r.rows_written for r in outcomes)
            failed = [r.step for r in outcomes if r.status == StepStatus.FAILED.value]
            if failed:
                total.fail(
                    f"Silver load finished with {len(failed)} failed step(s): {', '.join(failed)}",
                    ErrorCode.LAYER_PROCESSING_ERROR.value,
                )
            else:
                total.message = "Silver load completed"

        if processing.persist_run_log:
            self._persist_run_log(run_log)

        report = RunReport(run_id=run_log.run_id, load_ts=load_ts, events=run_log.events, results=results)
        logger.info(
            "Silver load finished",
            extra={
                "run_id": report.run_id,
                "succeeded": report.succeeded,
                "results": {name: result.to_dict() for name, result in results.items()},
            },
        )
        return report

    def _load_entity(self, func: EntityTransform, context: TransformContext, run_log: RunLog) -> EntityResult:
        meta = get_metadata(func)
        started = time.perf_counter()
        handle: Optional[StepHandle] = None
        error = None

        try:
            with run_log.step(meta.step_name, meta.description) as step:
                handle = step
                if meta.disabled or self.settings.is_entity_disabled(meta.target_table, meta.step_name):
                    step.skip(f"{meta.step_name} disabled")
                else:
                    self._execute(func, meta, context, step)
        except DWError as exc:
            error = exc.to_dict()
        except Exception as exc:
            # Unexpected failures stay isolated to this entity.
            logger.exception("Unexpected error loading %s", meta.target_table)
            error = {"type": type(exc).__name__, "message": str(exc)}

        duration = time.perf_counter() - started
        if handle is None:
            handle = StepHandle(meta.step_name)
            handle.fail()
        result = EntityResult(
            entity=meta.target_table,
            step=meta.step_name,
            status=handle.status,
            rows_read=handle.rows_read or 0,
            rows_written=handle.rows_written or 0,
            duration_seconds=duration,
            error=error,
        )

        if result.status != StepStatus.SKIPPED.value:
            self.metrics.record_load(
                LoadMetrics(
                    step=meta.step_name,
                    layer=Layer.SILVER.value,
                    table_name=meta.target_table,
                    rows_read=result.rows_read,
                    rows_written=result.rows_written,
                    duration_seconds=duration,
                    success=result.status == StepStatus.OK.value,
                    error_code=(error or {}).get("error_code"),
                )
            )
        return result

    def _execute(
        self,
        func: EntityTransform,
        meta: SilverEntityMetadata,
        context: TransformContext,
        step: StepHandle,
    ) -> None:
        source = self.store.read_table(Layer.BRONZE, meta.source_table)
        step.rows_read = len(source)

        try:
            cleaned = func(source, context)
        except DWError:
            raise
        except Exception as exc:
            raise transformation_error(meta.target_table, exc)

        stamped = cleaned.assign(**{LOAD_TIMESTAMP_COLUMN: context.load_ts})
        step.rows_written = self.store.replace_table(Layer.SILVER, meta.target_table, stamped)
        step.message = f"Loaded {step.rows_written} rows into {self.store.display_name(Layer.SILVER, meta.target_table)}"

    def _persist_run_log(self, run_log: RunLog) -> None:
        table_name = self.settings.processing.run_log_table
        try:
            self.store.append_table(Layer.SILVER, table_name, run_log.to_frame())
        except DWError as exc:
            logger.warning(
                "Run log could not be persisted",
                extra={"table": table_name, "error_code": exc.error_code.value},
            )
