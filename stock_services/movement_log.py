"""
stock_services.movement_log -- Append-only import/export/transfer audit trail.

Responsibility:
    Hold the three movement streams and build each record with its own
    sequential id.  Written only by the StockLedger as a side effect of a
    successful mutation.

Architecture position:
    Services -- in-memory collection owned by the StockLedger, which
    serializes every call.

Invariants enforced:
    - Append-only: there is no update or delete path.  Records are frozen
      dataclasses, so an appended entry cannot change afterwards.
    - Each stream has an independent IdSequence; ids are monotonic per
      stream and never reused.
    - Accessors return tuples, so callers cannot append behind the
      ledger's back.

Audit relevance:
    Batches are authoritative; the log is advisory.  The ledger stores a
    batch before appending the matching record, so an interrupted
    mutation can leave an orphan batch but never an orphan record.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from stock_kernel.domain.records import (
    BatchDraw,
    ExportRecord,
    ImportRecord,
    StockBatch,
    TransferRecord,
)
from stock_kernel.domain.sequence import IdSequence
from stock_kernel.logging_config import get_logger

logger = get_logger("services.movement_log")


class MovementLog:
    """Three append-only movement streams."""

    def __init__(
        self,
        imports: Iterable[ImportRecord] = (),
        exports: Iterable[ExportRecord] = (),
        transfers: Iterable[TransferRecord] = (),
    ):
        self._imports: list[ImportRecord] = sorted(imports, key=lambda r: r.id)
        self._exports: list[ExportRecord] = sorted(exports, key=lambda r: r.id)
        self._transfers: list[TransferRecord] = sorted(transfers, key=lambda r: r.id)
        self._import_ids = IdSequence.after(r.id for r in self._imports)
        self._export_ids = IdSequence.after(r.id for r in self._exports)
        self._transfer_ids = IdSequence.after(r.id for r in self._transfers)

    # =========================================================================
    # Appends
    # =========================================================================

    def append_import(
        self,
        batch: StockBatch,
        timestamp: datetime,
        supplier_id: int | None = None,
    ) -> ImportRecord:
        """Record the receipt of a freshly imported batch."""
        record = ImportRecord(
            id=self._import_ids.next(),
            batch_id=batch.id,
            medicine_id=batch.medicine_id,
            medicine_name=batch.medicine_name,
            warehouse_id=batch.warehouse_id,
            quantity=batch.quantity,
            price=batch.unit_price,
            timestamp=timestamp,
            supplier_id=supplier_id,
        )
        self._imports.append(record)
        logger.debug("movement_import_appended", extra={
            "record_id": record.id,
            "batch_id": record.batch_id,
        })
        return record

    def append_export(
        self,
        medicine_id: int,
        medicine_name: str,
        warehouse_id: int,
        amount: int,
        price: Decimal,
        timestamp: datetime,
        draws: Iterable[BatchDraw],
    ) -> ExportRecord:
        """Record one sale, blended price plus per-batch draws."""
        record = ExportRecord(
            id=self._export_ids.next(),
            medicine_id=medicine_id,
            medicine_name=medicine_name,
            warehouse_id=warehouse_id,
            amount=amount,
            price=price,
            timestamp=timestamp,
            draws=tuple(draws),
        )
        self._exports.append(record)
        logger.debug("movement_export_appended", extra={
            "record_id": record.id,
            "medicine_id": medicine_id,
            "draw_count": len(record.draws),
        })
        return record

    def append_transfer(
        self,
        source: StockBatch,
        destination: StockBatch,
        timestamp: datetime,
    ) -> TransferRecord:
        """Record the split of ``source`` into the new ``destination`` batch."""
        record = TransferRecord(
            id=self._transfer_ids.next(),
            batch_id=source.id,
            new_batch_id=destination.id,
            medicine_id=source.medicine_id,
            medicine_name=source.medicine_name,
            from_warehouse_id=source.warehouse_id,
            to_warehouse_id=destination.warehouse_id,
            quantity=destination.quantity,
            price=source.unit_price,
            timestamp=timestamp,
        )
        self._transfers.append(record)
        logger.debug("movement_transfer_appended", extra={
            "record_id": record.id,
            "batch_id": record.batch_id,
            "new_batch_id": record.new_batch_id,
        })
        return record

    # =========================================================================
    # Streams
    # =========================================================================

    def imports(self) -> tuple[ImportRecord, ...]:
        return tuple(self._imports)

    def exports(self) -> tuple[ExportRecord, ...]:
        return tuple(self._exports)

    def transfers(self) -> tuple[TransferRecord, ...]:
        return tuple(self._transfers)
