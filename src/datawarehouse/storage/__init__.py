"""Warehouse storage backed by SQLAlchemy and pandas."""

from datawarehouse.storage.warehouse import WarehouseStore

__all__ = ["WarehouseStore"]
