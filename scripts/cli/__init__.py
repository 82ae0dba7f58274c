"""
Stock ledger CLI: the command-line front end for the pharmacy stock ledger.

Each invocation loads settings and the data file, runs one command (or an
interactive shell session) and saves the snapshot after any change.

Entry point: ``stock-ledger`` or ``python -m scripts.cli``
"""

from scripts.cli.main import main

__all__ = ["main"]
