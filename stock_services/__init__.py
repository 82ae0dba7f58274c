"""
Stock services: the StockLedger aggregate and its collaborators.

Services own state and orchestrate the pure FEFO engine; the snapshot
store persists ledger state between runs.
"""

from stock_services.catalog import MedicineCatalog, SupplierDirectory
from stock_services.movement_log import MovementLog
from stock_services.snapshot_store import JsonSnapshotStore
from stock_services.stock_ledger import LedgerState, StockLedger
from stock_services.warehouse_directory import WarehouseDirectory, coerce_warehouse_type

__all__ = [
    "JsonSnapshotStore",
    "LedgerState",
    "MedicineCatalog",
    "MovementLog",
    "StockLedger",
    "SupplierDirectory",
    "WarehouseDirectory",
    "coerce_warehouse_type",
]
