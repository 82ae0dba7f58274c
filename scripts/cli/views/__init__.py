"""CLI views: master data, stock, movement logs, settings."""

from scripts.cli.views.logs import show_export_log, show_import_log, show_transfer_log
from scripts.cli.views.master import show_medicines, show_suppliers, show_warehouses
from scripts.cli.views.settings import show_settings
from scripts.cli.views.stock import show_batches, show_expiring, show_sale, show_summary

__all__ = [
    "show_batches",
    "show_expiring",
    "show_export_log",
    "show_import_log",
    "show_medicines",
    "show_sale",
    "show_settings",
    "show_summary",
    "show_suppliers",
    "show_transfer_log",
    "show_warehouses",
]
