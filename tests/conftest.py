"""
Pytest fixtures for the stock ledger test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- A DeterministicClock so timestamps and expiry horizons are reproducible
- Ledgers ranging from empty to a seeded hub + point-of-sale topology
"""

import json
import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from io import StringIO

import pytest

from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from stock_services.stock_ledger import StockLedger

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.sell(1, 5)
            logs = captured_logs()
            assert any(r["message"] == "fefo_sale_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(NOW)


# =============================================================================
# Ledger fixtures
# =============================================================================


@pytest.fixture
def empty_ledger(deterministic_clock) -> StockLedger:
    return StockLedger(clock=deterministic_clock)


@pytest.fixture
def ledger(deterministic_clock) -> StockLedger:
    """
    Ledger with three warehouses and no stock.

    Warehouse 1: "Central Hub" (hub)
    Warehouse 2: "Main Street Pharmacy" (point of sale)
    Warehouse 3: "Airport Kiosk" (point of sale)
    """
    ledger = StockLedger(clock=deterministic_clock)
    ledger.add_warehouse("Central Hub", "hub")
    ledger.add_warehouse("Main Street Pharmacy", "point_of_sale")
    ledger.add_warehouse("Airport Kiosk", "point_of_sale")
    return ledger


@pytest.fixture
def hub_id() -> int:
    return 1


@pytest.fixture
def pos_id() -> int:
    return 2


@pytest.fixture
def second_pos_id() -> int:
    return 3


@pytest.fixture
def import_batch(ledger, hub_id):
    """
    Factory: import a batch with sensible defaults.

    Expiry defaults to 180 days after the clock's now.
    """

    def _import(
        medicine_id: int = 1,
        quantity: int = 100,
        unit_price="10.00",
        expiry_days: int = 180,
        warehouse_id: int | None = None,
        medicine_name: str = "Paracetamol 500mg",
        supplier_id: int | None = None,
    ) -> int:
        return ledger.import_stock(
            medicine_id=medicine_id,
            medicine_name=medicine_name,
            warehouse_id=hub_id if warehouse_id is None else warehouse_id,
            quantity=quantity,
            unit_price=Decimal(str(unit_price)),
            expiry_date=NOW + timedelta(days=expiry_days),
            supplier_id=supplier_id,
        )

    return _import


@pytest.fixture
def stocked_pos(ledger, pos_id, import_batch):
    """
    Point of sale holding two batches of medicine 1:

    batch 1: 10 units @ 10.00, expires 2025-03-01
    batch 2: 5 units  @ 20.00, expires 2025-02-01
    """
    ledger.import_stock(1, "Amoxicillin 250mg", pos_id, 10, Decimal("10.00"), "2025-03-01")
    ledger.import_stock(1, "Amoxicillin 250mg", pos_id, 5, Decimal("20.00"), "2025-02-01")
    return ledger
