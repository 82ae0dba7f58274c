"""
stock_services.stock_ledger -- Batch ledger: import, transfer, FEFO sale.

Responsibility:
    Own every piece of stock state (warehouses, medicine and supplier
    master data, stock batches, the movement log and the id counters) and
    expose it only through the ledger operations:

    - ``import_stock``: create a batch and an ImportRecord.
    - ``transfer``: split part of a batch into a new batch in another
      warehouse and append a TransferRecord.
    - ``sell``: drain batches First-Expiry-First-Out in a point-of-sale
      warehouse and append one ExportRecord.
    - ``expiring_within``: available batches expiring inside a horizon.

Architecture position:
    Services -- stateful orchestration over the pure FEFO engine
    (stock_engines.fefo) and the kernel domain types.  The presentation
    layer (CLI, HTTP adapter) calls one operation and then asks the
    JsonSnapshotStore to persist ``snapshot()``.

Invariants enforced:
    - Single writer: one RLock covers the whole aggregate.  Every mutation
      and every read accessor holds it, so no reader observes a source
      batch drained without its paired destination batch.
    - Conservation: a transfer drains the source by exactly the amount the
      new batch receives; a sale drains exactly the sold amount.
    - All-or-nothing: validation and FEFO planning finish before the first
      batch is replaced; a rejected request leaves state untouched.
    - Batch ids come from an explicit counter and are never reused, even
      for drained batches.
    - Batch before record: the batch is stored before its movement record
      is appended.

Failure modes:
    - WarehouseNotFoundError, BatchNotFoundError, SupplierNotFoundError
      for unknown ids.
    - InvalidQuantityError / InvalidPriceError / InvalidTimestampError /
      InvalidNameError for malformed input.
    - InsufficientQuantityError(available) when a transfer exceeds the
      source batch.
    - InsufficientStockError(short_by) when a sale exceeds FEFO candidates.
    - NoPointOfSaleWarehouseError / NotPointOfSaleError when a sale has no
      valid point of sale.
    - SameWarehouseTransferError when a transfer targets the batch's own
      warehouse.

Audit relevance:
    Every accepted mutation logs a completion record with ids and
    quantities; every rejection logs a warning with the structured error
    data.  Movement records snapshot medicine name and price at the
    instant of the movement.

Usage:
    from stock_services.stock_ledger import StockLedger

    ledger = StockLedger()
    hub = ledger.add_warehouse("Central", "hub")
    shop = ledger.add_warehouse("Counter", "point_of_sale")
    batch_id = ledger.import_stock(1, "Paracetamol 500mg", hub.id, 100, "2.50", "2027-03-01")
    ledger.transfer(batch_id, shop.id, 40)
    record = ledger.sell(1, 12)
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from stock_engines.fefo import plan_fefo
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.parsing import (
    parse_expiry_date,
    parse_quantity,
    parse_unit_price,
)
from stock_kernel.domain.records import (
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
from stock_kernel.exceptions import (
    BatchNotFoundError,
    InsufficientQuantityError,
    InsufficientStockError,
    InvalidNameError,
    InvalidQuantityError,
    SameWarehouseTransferError,
    StockKernelError,
    SupplierNotFoundError,
    WarehouseNotFoundError,
)
from stock_kernel.logging_config import get_logger
from stock_services.catalog import MedicineCatalog, SupplierDirectory
from stock_services.movement_log import MovementLog
from stock_services.warehouse_directory import WarehouseDirectory

logger = get_logger("services.stock_ledger")


@dataclass(frozen=True, slots=True)
class LedgerState:
    """
    Whole-ledger snapshot, as persisted by the snapshot store.

    Every collection is a tuple of frozen records, so a LedgerState is
    safe to hand to another thread or serialize outside the ledger lock.
    """

    warehouses: tuple[Warehouse, ...] = ()
    batches: tuple[StockBatch, ...] = ()
    import_log: tuple[ImportRecord, ...] = ()
    export_log: tuple[ExportRecord, ...] = ()
    transfer_log: tuple[TransferRecord, ...] = ()
    medicines: tuple[Medicine, ...] = ()
    suppliers: tuple[Supplier, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.warehouses or self.batches or self.import_log
            or self.export_log or self.transfer_log
            or self.medicines or self.suppliers
        )


class StockLedger:
    """
    The single owned aggregate for stock state.

    Contract:
        Receives a Clock via constructor injection (SystemClock when
        omitted) and an optional LedgerState to resume from.

    Guarantees:
        - Every public method runs under one exclusive lock.
        - Read accessors return tuples/dicts built under the lock; callers
          can never mutate ledger-owned state through them.

    Non-goals:
        - Does not persist anything; see JsonSnapshotStore.
        - Does not reserve or lock individual batches.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        default_point_of_sale: int | None = None,
        state: LedgerState | None = None,
    ):
        state = state or LedgerState()
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()

        self._warehouses = WarehouseDirectory(state.warehouses, default_point_of_sale)
        self._medicines = MedicineCatalog(state.medicines)
        self._suppliers = SupplierDirectory(state.suppliers)
        self._movements = MovementLog(state.import_log, state.export_log, state.transfer_log)
        self._batches: dict[int, StockBatch] = {
            b.id: b for b in sorted(state.batches, key=lambda b: b.id)
        }
        self._batch_ids = IdSequence.after(self._batches)

    @classmethod
    def from_state(
        cls,
        state: LedgerState,
        clock: Clock | None = None,
        default_point_of_sale: int | None = None,
    ) -> StockLedger:
        """Rebuild a ledger from a snapshot, seeding every id counter from it."""
        ledger = cls(clock=clock, default_point_of_sale=default_point_of_sale, state=state)
        logger.info("stock_ledger_restored", extra={
            "warehouses": len(state.warehouses),
            "batches": len(state.batches),
            "imports": len(state.import_log),
            "exports": len(state.export_log),
            "transfers": len(state.transfer_log),
        })
        return ledger

    # =========================================================================
    # Import
    # =========================================================================

    def import_stock(
        self,
        medicine_id: int,
        medicine_name: str,
        warehouse_id: int,
        quantity: int,
        unit_price: Decimal | float | str,
        expiry_date: object,
        supplier_id: int | None = None,
    ) -> int:
        """
        Receive stock into a warehouse as a new batch.

        Args:
            medicine_id: Logical medicine id (not checked against the catalog).
            medicine_name: Name snapshot stored on the batch and the record.
            warehouse_id: Receiving warehouse; must exist.
            quantity: Units received, > 0.
            unit_price: Price per unit, > 0.
            expiry_date: datetime, date or ISO-8601 string.
            supplier_id: Optional supplier; must exist when given.

        Returns:
            The new batch id.
        """
        try:
            qty = parse_quantity(quantity)
            price = parse_unit_price(unit_price)
            expiry = parse_expiry_date(expiry_date)
            name = (medicine_name or "").strip()
            if not name:
                raise InvalidNameError("medicine", medicine_name)

            with self._lock:
                if not self._warehouses.exists(warehouse_id):
                    raise WarehouseNotFoundError(warehouse_id)
                if supplier_id is not None and not self._suppliers.exists(supplier_id):
                    raise SupplierNotFoundError(supplier_id)

                now = self._clock.now()
                batch = StockBatch(
                    id=self._batch_ids.next(),
                    medicine_id=medicine_id,
                    medicine_name=name,
                    warehouse_id=warehouse_id,
                    quantity=qty,
                    unit_price=price,
                    expiry_date=expiry,
                    import_date=now,
                )
                self._batches[batch.id] = batch
                record = self._movements.append_import(batch, now, supplier_id)
        except StockKernelError as exc:
            self._log_rejection("import", exc)
            raise

        logger.info("stock_imported", extra={
            "batch_id": batch.id,
            "import_record_id": record.id,
            "medicine_id": medicine_id,
            "warehouse_id": warehouse_id,
            "quantity": qty,
            "unit_price": str(price),
            "expiry_date": expiry.isoformat(),
        })
        return batch.id

    # =========================================================================
    # Transfer
    # =========================================================================

    def transfer(self, batch_id: int, to_warehouse_id: int, quantity: int) -> int:
        """
        Move ``quantity`` units of a batch into another warehouse.

        The source batch is drained and a new batch with the same medicine,
        price and expiry is created at the destination.  Transfers never
        merge into an existing batch.

        Returns:
            The id of the new destination batch.
        """
        try:
            with self._lock:
                source = self._get_batch(batch_id)
                if not self._warehouses.exists(to_warehouse_id):
                    raise WarehouseNotFoundError(to_warehouse_id)
                if to_warehouse_id == source.warehouse_id:
                    raise SameWarehouseTransferError(batch_id, to_warehouse_id)
                qty = parse_quantity(quantity)
                if qty > source.quantity:
                    raise InsufficientQuantityError(
                        batch_id=batch_id,
                        requested=qty,
                        available=source.quantity,
                    )

                now = self._clock.now()
                destination = StockBatch(
                    id=self._batch_ids.next(),
                    medicine_id=source.medicine_id,
                    medicine_name=source.medicine_name,
                    warehouse_id=to_warehouse_id,
                    quantity=qty,
                    unit_price=source.unit_price,
                    expiry_date=source.expiry_date,
                    import_date=now,
                    source_batch_id=source.id,
                )
                self._batches[source.id] = source.drained(qty)
                self._batches[destination.id] = destination
                record = self._movements.append_transfer(source, destination, now)
        except StockKernelError as exc:
            self._log_rejection("transfer", exc)
            raise

        logger.info("stock_transferred", extra={
            "batch_id": batch_id,
            "new_batch_id": destination.id,
            "transfer_record_id": record.id,
            "from_warehouse_id": source.warehouse_id,
            "to_warehouse_id": to_warehouse_id,
            "quantity": qty,
            "source_remaining": source.quantity - qty,
        })
        return destination.id

    # =========================================================================
    # FEFO sale
    # =========================================================================

    def sell(
        self,
        medicine_id: int,
        quantity: int,
        pos_warehouse: int | None = None,
    ) -> ExportRecord:
        """
        Sell ``quantity`` units of a medicine, soonest-expiring stock first.

        Args:
            medicine_id: Medicine to sell.
            quantity: Units sold, > 0.
            pos_warehouse: Point-of-sale warehouse; defaults to the
                configured (or first) point of sale.

        Returns:
            The ExportRecord appended for this sale.
        """
        t0 = time.monotonic()
        try:
            qty = parse_quantity(quantity)

            with self._lock:
                warehouse = self._warehouses.point_of_sale(pos_warehouse)
                plan = plan_fefo(
                    batches=self._batches.values(),
                    medicine_id=medicine_id,
                    warehouse_id=warehouse.id,
                    quantity=qty,
                )

                now = self._clock.now()
                for draw in plan.draws:
                    self._batches[draw.batch_id] = self._batches[draw.batch_id].drained(draw.quantity)

                record = self._movements.append_export(
                    medicine_id=medicine_id,
                    medicine_name=self._batches[plan.draws[0].batch_id].medicine_name,
                    warehouse_id=warehouse.id,
                    amount=qty,
                    price=plan.average_price,
                    timestamp=now,
                    draws=plan.draws,
                )
        except InsufficientStockError as exc:
            logger.warning("fefo_sale_insufficient_stock", extra={
                "medicine_id": exc.medicine_id,
                "warehouse_id": exc.warehouse_id,
                "requested": exc.requested,
                "available": exc.available,
                "short_by": exc.short_by,
            })
            raise
        except StockKernelError as exc:
            self._log_rejection("sell", exc)
            raise

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("fefo_sale_completed", extra={
            "export_record_id": record.id,
            "medicine_id": medicine_id,
            "warehouse_id": warehouse.id,
            "quantity": qty,
            "batches_drained": [d.batch_id for d in record.draws],
            "average_price": str(record.price),
            "duration_ms": duration_ms,
        })
        return record

    # =========================================================================
    # Queries
    # =========================================================================

    def expiring_within(self, days: int) -> tuple[StockBatch, ...]:
        """
        Available batches, in any warehouse, expiring on or before now + days.

        Ordered by (expiry_date, id).
        """
        if isinstance(days, bool) or not isinstance(days, int) or days < 0:
            raise InvalidQuantityError("days", days, "must be a non-negative integer")

        with self._lock:
            horizon = self._clock.now() + timedelta(days=days)
            expiring = [
                b for b in self._batches.values()
                if b.quantity > 0 and b.expiry_date <= horizon
            ]

        logger.debug("expiring_batches_queried", extra={
            "days": days,
            "horizon": horizon.isoformat(),
            "count": len(expiring),
        })
        return tuple(sorted(expiring, key=lambda b: (b.expiry_date, b.id)))

    def get_batch(self, batch_id: int) -> StockBatch:
        with self._lock:
            return self._get_batch(batch_id)

    def batches(
        self,
        warehouse_id: int | None = None,
        medicine_id: int | None = None,
        include_depleted: bool = True,
    ) -> tuple[StockBatch, ...]:
        """Batches in id order, optionally filtered."""
        with self._lock:
            selected = [
                b for b in self._batches.values()
                if (warehouse_id is None or b.warehouse_id == warehouse_id)
                and (medicine_id is None or b.medicine_id == medicine_id)
                and (include_depleted or b.quantity > 0)
            ]
        return tuple(sorted(selected, key=lambda b: b.id))

    def total_quantity(self, medicine_id: int, warehouse_id: int | None = None) -> int:
        """Units of a medicine on hand, across all warehouses or in one."""
        return sum(b.quantity for b in self.batches(warehouse_id, medicine_id))

    def stock_summary(self) -> dict[tuple[int, int], int]:
        """Available units keyed by (medicine_id, warehouse_id)."""
        summary: dict[tuple[int, int], int] = {}
        for b in self.batches(include_depleted=False):
            key = (b.medicine_id, b.warehouse_id)
            summary[key] = summary.get(key, 0) + b.quantity
        return summary

    def import_log(self) -> tuple[ImportRecord, ...]:
        with self._lock:
            return self._movements.imports()

    def export_log(self) -> tuple[ExportRecord, ...]:
        with self._lock:
            return self._movements.exports()

    def transfer_log(self) -> tuple[TransferRecord, ...]:
        with self._lock:
            return self._movements.transfers()

    def snapshot(self) -> LedgerState:
        """Consistent copy of the whole ledger."""
        with self._lock:
            return LedgerState(
                warehouses=self._warehouses.list(),
                batches=tuple(sorted(self._batches.values(), key=lambda b: b.id)),
                import_log=self._movements.imports(),
                export_log=self._movements.exports(),
                transfer_log=self._movements.transfers(),
                medicines=self._medicines.list(),
                suppliers=self._suppliers.list(),
            )

    # =========================================================================
    # Master data
    # =========================================================================

    def add_warehouse(self, name: str, type: WarehouseType | str = WarehouseType.HUB) -> Warehouse:
        with self._lock:
            return self._warehouses.add(name, type)

    def edit_warehouse(
        self,
        warehouse_id: int,
        name: str | None = None,
        type: WarehouseType | str | None = None,
    ) -> Warehouse:
        with self._lock:
            return self._warehouses.edit(warehouse_id, name=name, type=type)

    def get_warehouse(self, warehouse_id: int) -> Warehouse:
        with self._lock:
            return self._warehouses.get(warehouse_id)

    def warehouses(self) -> tuple[Warehouse, ...]:
        with self._lock:
            return self._warehouses.list()

    def warehouse_exists(self, warehouse_id: int) -> bool:
        with self._lock:
            return self._warehouses.exists(warehouse_id)

    def add_medicine(self, name: str) -> Medicine:
        with self._lock:
            return self._medicines.add(name)

    def rename_medicine(self, medicine_id: int, name: str) -> Medicine:
        with self._lock:
            return self._medicines.rename(medicine_id, name)

    def delete_medicine(self, medicine_id: int) -> Medicine:
        with self._lock:
            return self._medicines.delete(medicine_id)

    def get_medicine(self, medicine_id: int) -> Medicine:
        with self._lock:
            return self._medicines.get(medicine_id)

    def medicines(self) -> tuple[Medicine, ...]:
        with self._lock:
            return self._medicines.list()

    def add_supplier(self, name: str, contact: str = "") -> Supplier:
        with self._lock:
            return self._suppliers.add(name, contact)

    def suppliers(self) -> tuple[Supplier, ...]:
        with self._lock:
            return self._suppliers.list()

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _get_batch(self, batch_id: int) -> StockBatch:
        try:
            return self._batches[batch_id]
        except KeyError:
            raise BatchNotFoundError(batch_id) from None

    @staticmethod
    def _log_rejection(operation: str, exc: StockKernelError) -> None:
        fields = {k: v for k, v in vars(exc).items() if not k.startswith("_")}
        logger.warning(f"{operation}_rejected", extra={
            "operation": operation,
            "error_code": exc.code,
            **{f"error_{k}": v for k, v in fields.items()},
        })
