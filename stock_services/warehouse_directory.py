"""
stock_services.warehouse_directory -- Named stock locations.

Responsibility:
    Keep the set of warehouses (distribution hubs and points of sale),
    answer existence checks for the ledger, and resolve which warehouse a
    sale should draw from when the caller does not name one.

Architecture position:
    Services -- in-memory collection owned by the StockLedger.  Holds no
    lock of its own: the ledger serializes every call.

Invariants enforced:
    - Ids come from an explicit IdSequence and are never reused.
    - Warehouses are never deleted; only name and type are editable.
    - Names are non-empty after stripping whitespace.

Failure modes:
    - WarehouseNotFoundError for unknown ids.
    - InvalidNameError for empty names.
    - InvalidWarehouseError for unknown type strings.
    - NoPointOfSaleWarehouseError when no point of sale can be resolved.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from stock_kernel.domain.records import Warehouse, WarehouseType
from stock_kernel.domain.sequence import IdSequence
from stock_kernel.exceptions import (
    InvalidNameError,
    InvalidWarehouseError,
    NoPointOfSaleWarehouseError,
    NotPointOfSaleError,
    WarehouseNotFoundError,
)
from stock_kernel.logging_config import get_logger

logger = get_logger("services.warehouse_directory")


def coerce_warehouse_type(value: WarehouseType | str) -> WarehouseType:
    """Accept a WarehouseType or its string value ("hub", "point_of_sale", "pos")."""
    if isinstance(value, WarehouseType):
        return value
    text = str(value).strip().lower()
    if text == "pos":
        return WarehouseType.POINT_OF_SALE
    try:
        return WarehouseType(text)
    except ValueError:
        raise InvalidWarehouseError("type", value) from None


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidNameError("warehouse", name)
    return cleaned


class WarehouseDirectory:
    """
    Keyed collection of warehouses.

    Contract:
        ``exists()`` is the only thing the ledger needs for import and
        transfer validation; ``point_of_sale()`` resolves the sale location.
    """

    def __init__(
        self,
        warehouses: Iterable[Warehouse] = (),
        default_point_of_sale: int | None = None,
    ):
        self._warehouses: dict[int, Warehouse] = {w.id: w for w in warehouses}
        self._ids = IdSequence.after(self._warehouses)
        self.default_point_of_sale = default_point_of_sale

    def add(self, name: str, type: WarehouseType | str = WarehouseType.HUB) -> Warehouse:
        """Create a warehouse with the next id."""
        cleaned = _clean_name(name)
        warehouse_type = coerce_warehouse_type(type)
        warehouse = Warehouse(id=self._ids.next(), name=cleaned, type=warehouse_type)
        self._warehouses[warehouse.id] = warehouse
        logger.info("warehouse_added", extra={
            "warehouse_id": warehouse.id,
            "warehouse_name": warehouse.name,
            "warehouse_type": warehouse.type.value,
        })
        return warehouse

    def edit(
        self,
        warehouse_id: int,
        name: str | None = None,
        type: WarehouseType | str | None = None,
    ) -> Warehouse:
        """Change a warehouse's name and/or type. The id never changes."""
        current = self.get(warehouse_id)
        updated = replace(
            current,
            name=_clean_name(name) if name is not None else current.name,
            type=coerce_warehouse_type(type) if type is not None else current.type,
        )
        self._warehouses[warehouse_id] = updated
        logger.info("warehouse_edited", extra={
            "warehouse_id": warehouse_id,
            "warehouse_name": updated.name,
            "warehouse_type": updated.type.value,
        })
        return updated

    def get(self, warehouse_id: int) -> Warehouse:
        try:
            return self._warehouses[warehouse_id]
        except KeyError:
            raise WarehouseNotFoundError(warehouse_id) from None

    def exists(self, warehouse_id: int) -> bool:
        return warehouse_id in self._warehouses

    def list(self) -> tuple[Warehouse, ...]:
        return tuple(sorted(self._warehouses.values(), key=lambda w: w.id))

    def point_of_sale(self, preferred_id: int | None = None) -> Warehouse:
        """
        Resolve the warehouse a sale draws from.

        An explicit ``preferred_id`` must exist and be a point of sale.
        Otherwise the configured default is used, falling back to the
        lowest-id point-of-sale warehouse.

        Raises:
            WarehouseNotFoundError: explicit or configured id is unknown.
            NotPointOfSaleError: explicit or configured id is a hub.
            NoPointOfSaleWarehouseError: nothing to fall back to.
        """
        target = preferred_id if preferred_id is not None else self.default_point_of_sale
        if target is not None:
            warehouse = self.get(target)
            if not warehouse.is_point_of_sale:
                raise NotPointOfSaleError(warehouse.id, warehouse.type.value)
            return warehouse

        for warehouse in self.list():
            if warehouse.is_point_of_sale:
                return warehouse
        raise NoPointOfSaleWarehouseError()
