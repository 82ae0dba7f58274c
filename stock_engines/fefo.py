"""
Module: stock_engines.fefo
Responsibility:
    Plan a First-Expiry-First-Out sale: choose which batches of a medicine
    in one warehouse to drain, and by how much, and compute the blended
    export price of the result.

Architecture position:
    Engines -- pure calculation layer, zero I/O, no clock access.
    Takes batches by value and returns a frozen FefoPlan; applying the
    plan is the StockLedger's job.

Invariants enforced:
    - Candidates are batches of the requested medicine, in the requested
      warehouse, with quantity > 0.
    - Order is ascending expiry date, ties broken by ascending batch id, so
      identical inputs always yield identical draws.
    - Each draw is min(remaining_to_fulfil, batch.quantity); the draws sum
      to exactly the requested quantity.
    - Feasibility is decided before any draw is returned: a shortfall
      raises instead of producing a partial plan.

Failure modes:
    - InsufficientStockError(short_by) when candidates cannot cover the
      requested quantity.

Usage:
    from stock_engines.fefo import plan_fefo

    plan = plan_fefo(
        batches=ledger_batches,
        medicine_id=7,
        warehouse_id=2,
        quantity=12,
    )
    for draw in plan.draws:
        ...
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from stock_engines.tracer import traced_engine
from stock_kernel.domain.records import BatchDraw, StockBatch
from stock_kernel.exceptions import InsufficientStockError
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.fefo")


@dataclass(frozen=True, slots=True)
class FefoPlan:
    """
    Draws chosen for one sale.

    Guarantees:
        - ``sum(d.quantity for d in draws) == quantity``.
        - ``draws`` are in FEFO order.
    """

    medicine_id: int
    warehouse_id: int
    quantity: int
    draws: tuple[BatchDraw, ...]

    @property
    def batch_count(self) -> int:
        return len(self.draws)

    @property
    def average_price(self) -> Decimal:
        """Quantity-weighted average unit price of the draws."""
        return weighted_average_price(self.draws)


def weighted_average_price(draws: Sequence[BatchDraw]) -> Decimal:
    """
    Return ``sum(price_i * qty_i) / sum(qty_i)``.

    Returns Decimal("0") for an empty sequence.
    """
    total_quantity = sum(d.quantity for d in draws)
    if total_quantity == 0:
        return Decimal("0")
    total_cost = sum((d.cost for d in draws), Decimal("0"))
    return total_cost / total_quantity


def fefo_candidates(
    batches: Iterable[StockBatch],
    medicine_id: int,
    warehouse_id: int,
) -> list[StockBatch]:
    """Available batches of one medicine in one warehouse, in FEFO order."""
    eligible = [
        b for b in batches
        if b.medicine_id == medicine_id
        and b.warehouse_id == warehouse_id
        and b.quantity > 0
    ]
    return sorted(eligible, key=lambda b: (b.expiry_date, b.id))


@traced_engine("fefo", "1.0", fingerprint_fields=("medicine_id", "warehouse_id", "quantity"))
def plan_fefo(
    *,
    batches: Iterable[StockBatch],
    medicine_id: int,
    warehouse_id: int,
    quantity: int,
) -> FefoPlan:
    """
    Compute the FEFO draws for selling ``quantity`` units.

    Preconditions:
        quantity > 0 (validated by the caller).

    Postconditions:
        Returns a FefoPlan whose draws cover ``quantity`` exactly.

    Raises:
        InsufficientStockError: if the candidates hold less than ``quantity``.
    """
    candidates = fefo_candidates(batches, medicine_id, warehouse_id)

    available = sum(b.quantity for b in candidates)
    if available < quantity:
        logger.warning("fefo_plan_insufficient_stock", extra={
            "medicine_id": medicine_id,
            "warehouse_id": warehouse_id,
            "requested": quantity,
            "available": available,
        })
        raise InsufficientStockError(
            medicine_id=medicine_id,
            warehouse_id=warehouse_id,
            requested=quantity,
            available=available,
        )

    draws: list[BatchDraw] = []
    remaining = quantity
    for batch in candidates:
        if remaining == 0:
            break
        take = min(remaining, batch.quantity)
        draws.append(BatchDraw(batch_id=batch.id, quantity=take, unit_price=batch.unit_price))
        remaining -= take

    return FefoPlan(
        medicine_id=medicine_id,
        warehouse_id=warehouse_id,
        quantity=quantity,
        draws=tuple(draws),
    )
