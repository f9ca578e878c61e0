import time
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd
from sqlalchemy import Date, DateTime, create_engine, delete, func, inspect, select, table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, NoSuchModuleError
from sqlalchemy.pool import StaticPool

from datawarehouse.common.exceptions import (
    DWError,
    configuration_error,
    load_error,
    resource_not_found_error,
    source_read_error,
)
from datawarehouse.constants import Layer
from datawarehouse.logging import get_logger
from datawarehouse.settings import StorageSettings
from datawarehouse.utils.decorators import traced

logger = get_logger(__name__)

LayerLike = Union[Layer, str]


def _layer_value(layer: LayerLike) -> str:
    return layer.value if isinstance(layer, Layer) else Layer(layer).value


def _temporal_column_types(inspector, name: str, schema: Optional[str], frame: pd.DataFrame) -> Dict[str, Any]:
    """Declared DATE and DATETIME types of an existing table, for the frame's columns.

    Binding through the declared type stores a ``datetime64`` value in a DATE
    column as a date rather than as a timestamp string.
    """
    return {
        column["name"]: column["type"]
        for column in inspector.get_columns(name, schema=schema)
        if column["name"] in frame.columns and isinstance(column["type"], (Date, DateTime))
    }


class WarehouseStore:
    """SQLAlchemy-backed storage for the Bronze, Silver and Gold layers.

    Tables are addressed by ``(layer, table)``. Depending on
    ``StorageSettings.use_schemas`` a table maps either to a schema-qualified
    name (``silver.crm_cust_info``) or to a layer-prefixed name in the
    default schema (``silver_crm_cust_info``), so the same pipeline runs on
    SQLite as well as on server databases.

    Reads return pandas DataFrames. Writes go through ``DataFrame.to_sql``
    inside a single transaction so a failed replace leaves the previous
    contents of the target in place.

    Example:
        >>> store = WarehouseStore(StorageSettings(database_url="sqlite:///dwh.db"))
        >>> store.write_bronze("crm_cust_info", frame)
        >>> df = store.read_table(Layer.BRONZE, "crm_cust_info")
    """

    def __init__(self, settings: Optional[StorageSettings] = None, engine: Optional[Engine] = None):
        """Initialize the store.

        Args:
            settings: Storage settings. Defaults to ``get_settings().storage``.
            engine: Pre-built SQLAlchemy engine, mostly for tests.
        """
        if settings is None:
            from datawarehouse.settings import get_settings
            settings = get_settings().storage
        self.settings = settings
        self._engine: Optional[Engine] = engine

    @property
    def engine(self) -> Engine:
        """Get or create SQLAlchemy engine with lazy initialization."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        url = self.settings.database_url
        try:
            if url in ("sqlite://", "sqlite:///:memory:"):
                # A private in-memory database exists per connection; share one.
                engine = create_engine(
                    url,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            else:
                engine = create_engine(url, pool_pre_ping=True)
        except (ArgumentError, NoSuchModuleError) as exc:
            raise configuration_error(
                f"Cannot create an engine for {url!r}: {exc}",
                config_key="storage.database_url",
                cause=exc,
            )
        logger.info("Created warehouse engine", extra={"db.system": engine.dialect.name})
        return engine

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def qualified_name(self, layer: LayerLike, table_name: str) -> Tuple[Optional[str], str]:
        """Map a layer table to ``(schema, physical_table_name)``."""
        prefix = self.settings.layer_schemas[_layer_value(layer)]
        if self.settings.use_schemas:
            return prefix, table_name
        return None, f"{prefix}_{table_name}"

    def display_name(self, layer: LayerLike, table_name: str) -> str:
        schema, name = self.qualified_name(layer, table_name)
        return f"{schema}.{name}" if schema else name

    def _span_attributes(self, layer: LayerLike, table_name: str, *, operation: str) -> Dict[str, Any]:
        return {
            "db.operation": operation,
            "db.sql.table": self.display_name(layer, table_name),
            "datawarehouse.layer": _layer_value(layer),
        }

    def table_exists(self, layer: LayerLike, table_name: str) -> bool:
        schema, name = self.qualified_name(layer, table_name)
        return inspect(self.engine).has_table(name, schema=schema)

    def list_tables(self, layer: LayerLike) -> List[str]:
        """Logical names of the tables present in a layer."""
        layer_name = _layer_value(layer)
        prefix = self.settings.layer_schemas[layer_name]
        inspector = inspect(self.engine)
        if self.settings.use_schemas:
            return sorted(inspector.get_table_names(schema=prefix))
        marker = f"{prefix}_"
        return sorted(
            name[len(marker):] for name in inspector.get_table_names() if name.startswith(marker)
        )

    @traced(
        span_name="datawarehouse.storage.read_table",
        record_rows=True,
        attribute_getter=lambda self, layer, table_name, columns=None: self._span_attributes(
            layer, table_name, operation="read"
        ),
    )
    def read_table(
        self,
        layer: LayerLike,
        table_name: str,
        columns: Optional[List[str]] = None,
    ) -> pd.DataFrame:
        """Read a whole table as a DataFrame snapshot.

        Raises:
            DWError: TABLE_NOT_FOUND if the table does not exist,
                SOURCE_READ_ERROR if the read itself fails.
        """
        display = self.display_name(layer, table_name)
        if not self.table_exists(layer, table_name):
            raise resource_not_found_error(
                f"Table {display} does not exist",
                resource_type="table",
                resource_name=display,
            )

        schema, name = self.qualified_name(layer, table_name)
        start_time = time.time()
        try:
            with self.engine.connect() as conn:
                df = pd.read_sql_table(name, conn, schema=schema, columns=columns)
        except Exception as exc:
            raise source_read_error(display, exc)

        logger.info(
            "Table read",
            extra={"table": display, "rows": len(df), "duration.seconds": f"{time.time() - start_time:.6f}"},
        )
        return df

    def row_count(self, layer: LayerLike, table_name: str) -> int:
        schema, name = self.qualified_name(layer, table_name)
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(table(name, schema=schema))).scalar_one()

    @traced(
        span_name="datawarehouse.storage.replace_table",
        record_rows=True,
        attribute_getter=lambda self, layer, table_name, frame: self._span_attributes(
            layer, table_name, operation="replace"
        ),
    )
    def replace_table(self, layer: LayerLike, table_name: str, frame: pd.DataFrame) -> int:
        """Replace the full contents of a table with ``frame``.

        The delete and the insert run in one transaction: readers see either
        the old rows or the new rows, and a failed insert rolls the delete
        back. The table is created from the frame's columns if missing.

        Returns:
            Number of rows written.

        Raises:
            DWError: LOAD_ERROR if the write fails.
        """
        return self._write(layer, table_name, frame, replace=True)

    @traced(
        span_name="datawarehouse.storage.append_table",
        record_rows=True,
        attribute_getter=lambda self, layer, table_name, frame: self._span_attributes(
            layer, table_name, operation="append"
        ),
    )
    def append_table(self, layer: LayerLike, table_name: str, frame: pd.DataFrame) -> int:
        """Append rows to a table, creating it if missing."""
        return self._write(layer, table_name, frame, replace=False)

    def write_bronze(self, table_name: str, frame: pd.DataFrame) -> int:
        """Land a raw source extract in the Bronze layer (full replace)."""
        return self.replace_table(Layer.BRONZE, table_name, frame)

    def _write(self, layer: LayerLike, table_name: str, frame: pd.DataFrame, *, replace: bool) -> int:
        schema, name = self.qualified_name(layer, table_name)
        display = self.display_name(layer, table_name)
        start_time = time.time()

        try:
            with self.engine.begin() as conn:
                inspector = inspect(conn)
                exists = inspector.has_table(name, schema=schema)
                if replace and exists:
                    conn.execute(delete(table(name, schema=schema)))
                frame.to_sql(
                    name,
                    conn,
                    schema=schema,
                    if_exists="append" if exists else "fail",
                    index=False,
                    chunksize=self.settings.chunk_size,
                    dtype=_temporal_column_types(inspector, name, schema, frame) if exists else None,
                )
        except DWError:
            raise
        except Exception as exc:
            raise load_error(display, exc)

        logger.info(
            "Table replaced" if replace else "Rows appended",
            extra={"table": display, "rows": len(frame), "duration.seconds": f"{time.time() - start_time:.6f}"},
        )
        return len(frame)
