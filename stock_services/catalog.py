"""
stock_services.catalog -- Medicine and supplier master data.

Responsibility:
    Simple keyed collections for the medicines a pharmacy stocks and the
    suppliers it imports from.  The front end uses the medicine catalog to
    fill the denormalized medicine name on import; the ledger validates an
    optional supplier id against the supplier directory.

Architecture position:
    Services -- in-memory collections owned by the StockLedger, which
    serializes every call.

Invariants enforced:
    - Ids come from an explicit IdSequence per collection.
    - Deleting or renaming a medicine never touches batches or movement
      records: those snapshot the name at creation time.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from stock_kernel.domain.records import Medicine, Supplier
from stock_kernel.domain.sequence import IdSequence
from stock_kernel.exceptions import (
    InvalidNameError,
    MedicineNotFoundError,
    SupplierNotFoundError,
)
from stock_kernel.logging_config import get_logger

logger = get_logger("services.catalog")


def _require_name(entity: str, name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidNameError(entity, name)
    return cleaned


class MedicineCatalog:
    """Medicines by id."""

    def __init__(self, medicines: Iterable[Medicine] = ()):
        self._medicines: dict[int, Medicine] = {m.id: m for m in medicines}
        self._ids = IdSequence.after(self._medicines)

    def add(self, name: str) -> Medicine:
        cleaned = _require_name("medicine", name)
        medicine = Medicine(id=self._ids.next(), name=cleaned)
        self._medicines[medicine.id] = medicine
        logger.info("medicine_added", extra={
            "medicine_id": medicine.id,
            "medicine_name": medicine.name,
        })
        return medicine

    def rename(self, medicine_id: int, name: str) -> Medicine:
        updated = replace(self.get(medicine_id), name=_require_name("medicine", name))
        self._medicines[medicine_id] = updated
        logger.info("medicine_renamed", extra={
            "medicine_id": medicine_id,
            "medicine_name": updated.name,
        })
        return updated

    def delete(self, medicine_id: int) -> Medicine:
        """Remove a medicine from the catalog. Existing batches are unaffected."""
        medicine = self.get(medicine_id)
        del self._medicines[medicine_id]
        logger.info("medicine_deleted", extra={"medicine_id": medicine_id})
        return medicine

    def get(self, medicine_id: int) -> Medicine:
        try:
            return self._medicines[medicine_id]
        except KeyError:
            raise MedicineNotFoundError(medicine_id) from None

    def list(self) -> tuple[Medicine, ...]:
        return tuple(sorted(self._medicines.values(), key=lambda m: m.id))


class SupplierDirectory:
    """Suppliers by id."""

    def __init__(self, suppliers: Iterable[Supplier] = ()):
        self._suppliers: dict[int, Supplier] = {s.id: s for s in suppliers}
        self._ids = IdSequence.after(self._suppliers)

    def add(self, name: str, contact: str = "") -> Supplier:
        cleaned = _require_name("supplier", name)
        supplier = Supplier(
            id=self._ids.next(),
            name=cleaned,
            contact=(contact or "").strip(),
        )
        self._suppliers[supplier.id] = supplier
        logger.info("supplier_added", extra={
            "supplier_id": supplier.id,
            "supplier_name": supplier.name,
        })
        return supplier

    def get(self, supplier_id: int) -> Supplier:
        try:
            return self._suppliers[supplier_id]
        except KeyError:
            raise SupplierNotFoundError(supplier_id) from None

    def exists(self, supplier_id: int) -> bool:
        return supplier_id in self._suppliers

    def list(self) -> tuple[Supplier, ...]:
        return tuple(sorted(self._suppliers.values(), key=lambda s: s.id))
