"""CLI configuration: settings resolution, data file, ledger construction."""

from dataclasses import replace
from pathlib import Path

from stock_config import LedgerSettings, load_settings
from stock_kernel.domain.clock import Clock
from stock_services.snapshot_store import JsonSnapshotStore
from stock_services.stock_ledger import StockLedger


def resolve_settings(
    config_path: str | None = None,
    data_file: str | None = None,
    log_level: str | None = None,
) -> LedgerSettings:
    """Settings file + environment, then command-line flags on top."""
    settings = load_settings(config_path)
    overrides = {}
    if data_file:
        overrides["data_file"] = data_file
    if log_level:
        overrides["log_level"] = log_level.upper()
    return replace(settings, **overrides) if overrides else settings


def open_ledger(
    settings: LedgerSettings,
    clock: Clock | None = None,
) -> tuple[StockLedger, JsonSnapshotStore]:
    """Load the snapshot named by ``settings.data_file`` into a ledger."""
    store = JsonSnapshotStore(Path(settings.data_file))
    ledger = StockLedger.from_state(
        store.load(),
        clock=clock,
        default_point_of_sale=settings.default_point_of_sale,
    )
    return ledger, store
