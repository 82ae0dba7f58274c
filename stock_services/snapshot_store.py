"""
stock_services.snapshot_store -- Whole-ledger JSON persistence.

Responsibility:
    Convert a LedgerState to and from one JSON document and keep that
    document on disk.  The ledger itself never touches the file system.

Architecture position:
    Services -- adapter between the in-memory StockLedger and a data file.
    The presentation layer calls ``save(ledger.snapshot())`` after each
    mutating command, outside the ledger lock.

Invariants enforced:
    - Atomic replace: the document is written to a temp file in the same
      directory and moved over the target with ``os.replace``, so a crash
      mid-write leaves the previous snapshot intact.
    - Decimals round-trip exactly (written as strings); datetimes are
      ISO-8601 with offset; timestamps without an offset are read as UTC.
    - Only documents of SCHEMA_VERSION (or without a version) are loaded.

Failure modes:
    - Missing file -> empty LedgerState, ``snapshot_missing`` warning.
    - Unreadable JSON, a structurally invalid document or an unknown
      ``schema_version`` -> empty LedgerState, ``snapshot_corrupt``
      warning.  Startup never fails because of the data file.
    - Errors writing the file propagate (OSError) to the caller.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from stock_kernel.domain.parsing import parse_expiry_date
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
from stock_kernel.exceptions import StockKernelError
from stock_kernel.logging_config import get_logger
from stock_services.stock_ledger import LedgerState

logger = get_logger("services.snapshot_store")

SCHEMA_VERSION = 1


# =============================================================================
# Serialization
# =============================================================================


def _ts(value: datetime) -> str:
    return value.isoformat()


def _parse_ts(value: str) -> datetime:
    # Naive values are read as UTC so they compare with the ledger clock.
    return parse_expiry_date(value)


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def state_to_dict(state: LedgerState) -> dict[str, Any]:
    """LedgerState -> JSON-ready dict."""
    return {
        "schema_version": SCHEMA_VERSION,
        "warehouses": [
            {"id": w.id, "name": w.name, "type": w.type.value}
            for w in state.warehouses
        ],
        "batches": [
            {
                "id": b.id,
                "medicine_id": b.medicine_id,
                "medicine_name": b.medicine_name,
                "warehouse_id": b.warehouse_id,
                "quantity": b.quantity,
                "unit_price": str(b.unit_price),
                "expiry_date": _ts(b.expiry_date),
                "import_date": _ts(b.import_date),
                "source_batch_id": b.source_batch_id,
            }
            for b in state.batches
        ],
        "import_log": [
            {
                "id": r.id,
                "batch_id": r.batch_id,
                "medicine_id": r.medicine_id,
                "medicine_name": r.medicine_name,
                "warehouse_id": r.warehouse_id,
                "quantity": r.quantity,
                "price": str(r.price),
                "timestamp": _ts(r.timestamp),
                "supplier_id": r.supplier_id,
            }
            for r in state.import_log
        ],
        "export_log": [
            {
                "id": r.id,
                "medicine_id": r.medicine_id,
                "medicine_name": r.medicine_name,
                "warehouse_id": r.warehouse_id,
                "amount": r.amount,
                "price": str(r.price),
                "timestamp": _ts(r.timestamp),
                "draws": [
                    {
                        "batch_id": d.batch_id,
                        "quantity": d.quantity,
                        "unit_price": str(d.unit_price),
                    }
                    for d in r.draws
                ],
            }
            for r in state.export_log
        ],
        "transfer_log": [
            {
                "id": r.id,
                "batch_id": r.batch_id,
                "new_batch_id": r.new_batch_id,
                "medicine_id": r.medicine_id,
                "medicine_name": r.medicine_name,
                "from_warehouse_id": r.from_warehouse_id,
                "to_warehouse_id": r.to_warehouse_id,
                "quantity": r.quantity,
                "price": str(r.price),
                "timestamp": _ts(r.timestamp),
            }
            for r in state.transfer_log
        ],
        "medicines": [{"id": m.id, "name": m.name} for m in state.medicines],
        "suppliers": [
            {"id": s.id, "name": s.name, "contact": s.contact}
            for s in state.suppliers
        ],
    }


def state_from_dict(data: dict[str, Any]) -> LedgerState:
    """
    JSON dict -> LedgerState.

    Missing collections are treated as empty, and a document without
    ``schema_version`` is read as the current version.  Raises KeyError,
    TypeError, ValueError (including InvalidOperation and an unknown
    ``schema_version``) or InvalidTimestampError on malformed entries.
    """
    if not isinstance(data, dict):
        raise TypeError(f"snapshot root must be an object, got {type(data).__name__}")
    version = data.get("schema_version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise ValueError(f"unsupported snapshot schema_version: {version!r}")

    return LedgerState(
        warehouses=tuple(
            Warehouse(id=int(w["id"]), name=w["name"], type=WarehouseType(w["type"]))
            for w in data.get("warehouses", [])
        ),
        batches=tuple(
            StockBatch(
                id=int(b["id"]),
                medicine_id=int(b["medicine_id"]),
                medicine_name=b["medicine_name"],
                warehouse_id=int(b["warehouse_id"]),
                quantity=int(b["quantity"]),
                unit_price=Decimal(b["unit_price"]),
                expiry_date=_parse_ts(b["expiry_date"]),
                import_date=_parse_ts(b["import_date"]),
                source_batch_id=_optional_int(b.get("source_batch_id")),
            )
            for b in data.get("batches", [])
        ),
        import_log=tuple(
            ImportRecord(
                id=int(r["id"]),
                batch_id=int(r["batch_id"]),
                medicine_id=int(r["medicine_id"]),
                medicine_name=r["medicine_name"],
                warehouse_id=int(r["warehouse_id"]),
                quantity=int(r["quantity"]),
                price=Decimal(r["price"]),
                timestamp=_parse_ts(r["timestamp"]),
                supplier_id=_optional_int(r.get("supplier_id")),
            )
            for r in data.get("import_log", [])
        ),
        export_log=tuple(
            ExportRecord(
                id=int(r["id"]),
                medicine_id=int(r["medicine_id"]),
                medicine_name=r["medicine_name"],
                warehouse_id=int(r["warehouse_id"]),
                amount=int(r["amount"]),
                price=Decimal(r["price"]),
                timestamp=_parse_ts(r["timestamp"]),
                draws=tuple(
                    BatchDraw(
                        batch_id=int(d["batch_id"]),
                        quantity=int(d["quantity"]),
                        unit_price=Decimal(d["unit_price"]),
                    )
                    for d in r.get("draws", [])
                ),
            )
            for r in data.get("export_log", [])
        ),
        transfer_log=tuple(
            TransferRecord(
                id=int(r["id"]),
                batch_id=int(r["batch_id"]),
                new_batch_id=int(r["new_batch_id"]),
                medicine_id=int(r["medicine_id"]),
                medicine_name=r["medicine_name"],
                from_warehouse_id=int(r["from_warehouse_id"]),
                to_warehouse_id=int(r["to_warehouse_id"]),
                quantity=int(r["quantity"]),
                price=Decimal(r["price"]),
                timestamp=_parse_ts(r["timestamp"]),
            )
            for r in data.get("transfer_log", [])
        ),
        medicines=tuple(
            Medicine(id=int(m["id"]), name=m["name"])
            for m in data.get("medicines", [])
        ),
        suppliers=tuple(
            Supplier(id=int(s["id"]), name=s["name"], contact=s.get("contact", ""))
            for s in data.get("suppliers", [])
        ),
    )


# =============================================================================
# Store
# =============================================================================


class JsonSnapshotStore:
    """Load and save a LedgerState as a single JSON file."""

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)

    def load(self) -> LedgerState:
        if not self.path.exists():
            logger.warning("snapshot_missing", extra={"path": str(self.path)})
            return LedgerState()

        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            state = state_from_dict(data)
        except (OSError, ValueError, KeyError, TypeError,
                InvalidOperation, StockKernelError) as exc:
            logger.warning("snapshot_corrupt", extra={
                "path": str(self.path),
                "error_type": type(exc).__name__,
                "error": str(exc),
            })
            return LedgerState()

        logger.info("snapshot_loaded", extra={
            "path": str(self.path),
            "batches": len(state.batches),
            "warehouses": len(state.warehouses),
        })
        return state

    def save(self, state: LedgerState) -> None:
        payload = json.dumps(state_to_dict(state), indent=2, ensure_ascii=False)
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=directory,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.debug("snapshot_saved", extra={
            "path": str(self.path),
            "bytes": len(payload),
        })
