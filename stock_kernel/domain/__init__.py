"""Pure domain types for the stock kernel. Zero I/O."""

from stock_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from stock_kernel.domain.parsing import (
    parse_expiry_date,
    parse_quantity,
    parse_unit_price,
)
from stock_kernel.domain.records import (
    BatchDraw,
    ExportRecord,
    ImportRecord,
    Medicine,
    StockBatch,
    Supplier,
    TransferRecord,
    Warehouse,
    WarehouseType,
)
from stock_kernel.domain.sequence import IdSequence

__all__ = [
    "BatchDraw",
    "Clock",
    "DeterministicClock",
    "ExportRecord",
    "IdSequence",
    "ImportRecord",
    "Medicine",
    "StockBatch",
    "Supplier",
    "SystemClock",
    "TransferRecord",
    "Warehouse",
    "WarehouseType",
    "parse_expiry_date",
    "parse_quantity",
    "parse_unit_price",
]
