"""
Stock Engines - pure calculation layer.

Engines take ledger values by argument and return frozen results.
They never touch the clock, the lock or the movement log.
"""

from stock_engines.fefo import (
    FefoPlan,
    fefo_candidates,
    plan_fefo,
    weighted_average_price,
)

__all__ = [
    "FefoPlan",
    "fefo_candidates",
    "plan_fefo",
    "weighted_average_price",
]
