"""
Stock Kernel

Batch-level pharmaceutical stock ledger with:
- Lot tracking per warehouse (import, transfer, FEFO sale)
- Quantity conservation across transfers and sales
- Append-only movement log for audit
- Typed, coded exceptions and structured JSON logging
"""

__version__ = "0.1.0"
