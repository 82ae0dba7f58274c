"""
Records -- immutable stock batches, movement records and master data.

Responsibility:
    Define the frozen value objects the ledger stores: warehouses, stock
    batches, the three movement record variants (import, export, transfer)
    and the catalog entries for medicines and suppliers.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.  The StockLedger in
    stock_services owns the collections; these types carry no identity
    beyond their integer id.

Invariants enforced:
    - StockBatch.quantity >= 0 (InvariantViolationError on construction).
    - StockBatch identity fields (medicine, price, expiry) are fixed: the
      only way to change a batch is ``drained()``, which returns a new
      value with a smaller quantity and everything else copied.
    - Movement records are frozen and snapshot the medicine name and
      price at the instant of the movement, so a later catalog rename
      never rewrites history.

Audit relevance:
    Batches are authoritative; the movement log is the audit trail.
    ``StockBatch.source_batch_id`` and ``TransferRecord.batch_id`` let an
    auditor walk any transferred lot back to the import that created it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum

from stock_kernel.exceptions import InvariantViolationError
from stock_kernel.logging_config import get_logger

logger = get_logger("domain.records")


class WarehouseType(str, Enum):
    """Role of a physical location."""

    HUB = "hub"                      # Distribution hub, receives imports
    POINT_OF_SALE = "point_of_sale"  # Pharmacy counter, FEFO sales happen here


@dataclass(frozen=True, slots=True)
class Warehouse:
    """A named location that holds stock batches."""

    id: int
    name: str
    type: WarehouseType

    @property
    def is_point_of_sale(self) -> bool:
        return self.type is WarehouseType.POINT_OF_SALE


@dataclass(frozen=True, slots=True)
class StockBatch:
    """
    Quantity of one medicine received in one import or transfer event.

    The remaining ``quantity`` only ever decreases.  A drained batch
    (quantity 0) is kept as a historical record and is skipped by FEFO
    allocation and expiry queries.
    """

    id: int
    medicine_id: int
    medicine_name: str
    warehouse_id: int
    quantity: int
    unit_price: Decimal
    expiry_date: datetime
    import_date: datetime
    source_batch_id: int | None = None

    def __post_init__(self) -> None:
        if self.quantity < 0:
            logger.error("stock_batch_negative_quantity", extra={
                "batch_id": self.id,
                "quantity": self.quantity,
            })
            raise InvariantViolationError(
                "non_negative_quantity",
                f"batch {self.id} would hold {self.quantity}",
            )

    @property
    def is_available(self) -> bool:
        """True if the batch still holds stock."""
        return self.quantity > 0

    @property
    def is_depleted(self) -> bool:
        return self.quantity == 0

    @property
    def value(self) -> Decimal:
        """Remaining stock valued at the batch's unit price."""
        return self.unit_price * self.quantity

    def drained(self, amount: int) -> StockBatch:
        """Return a copy of this batch with ``amount`` fewer units."""
        return replace(self, quantity=self.quantity - amount)


@dataclass(frozen=True, slots=True)
class BatchDraw:
    """Units taken from a single batch by one sale."""

    batch_id: int
    quantity: int
    unit_price: Decimal

    @property
    def cost(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class ImportRecord:
    """Audit entry written when stock is received into a warehouse."""

    id: int
    batch_id: int
    medicine_id: int
    medicine_name: str
    warehouse_id: int
    quantity: int
    price: Decimal
    timestamp: datetime
    supplier_id: int | None = None


@dataclass(frozen=True, slots=True)
class ExportRecord:
    """
    Audit entry written once per FEFO sale.

    ``price`` is the quantity-weighted average unit price of the drained
    batches; ``draws`` keeps the per-batch detail behind that average.
    """

    id: int
    medicine_id: int
    medicine_name: str
    warehouse_id: int
    amount: int
    price: Decimal
    timestamp: datetime
    draws: tuple[BatchDraw, ...] = ()

    @property
    def total(self) -> Decimal:
        """Sale value at batch prices."""
        return sum((d.cost for d in self.draws), Decimal("0"))


@dataclass(frozen=True, slots=True)
class TransferRecord:
    """Audit entry written when part of a batch moves to another warehouse."""

    id: int
    batch_id: int
    new_batch_id: int
    medicine_id: int
    medicine_name: str
    from_warehouse_id: int
    to_warehouse_id: int
    quantity: int
    price: Decimal
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class Medicine:
    """Catalog entry. Batches copy the name; they never join back to it."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Supplier:
    """Vendor an import may be attributed to."""

    id: int
    name: str
    contact: str = ""
