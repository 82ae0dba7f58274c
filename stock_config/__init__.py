"""
Ledger settings.

``load_settings()`` is the one entry point the front end uses; it reads
the YAML settings file and the ``STOCK_LEDGER_*`` environment overrides.
"""

from stock_config.loader import load_settings, parse_settings, save_settings
from stock_config.schema import LedgerSettings

__all__ = ["LedgerSettings", "load_settings", "parse_settings", "save_settings"]
