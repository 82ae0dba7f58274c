"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the CLI, an HTTP adapter, tests) must react to ledger failures
precisely. Every failure therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, transport-safe)
  3. Structured DATA as attributes (not just a message string)

Example - WRONG way to handle errors:
    try:
        ledger.sell(medicine_id, 10)
    except Exception as e:
        if "short by" in str(e):  # FRAGILE - message might change
            ...

Example - RIGHT way:
    try:
        ledger.sell(medicine_id, 10)
    except InsufficientStockError as e:
        reply(code=e.code, short_by=e.short_by)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockKernelError (base)
    |
    +-- NotFoundError
    |   +-- WarehouseNotFoundError
    |   +-- BatchNotFoundError
    |   +-- MedicineNotFoundError
    |   +-- SupplierNotFoundError
    |
    +-- InvalidQuantityError
    |   +-- InsufficientQuantityError
    |   +-- InsufficientStockError
    |
    +-- InvalidPriceError
    +-- InvalidTimestampError
    +-- InvalidNameError
    |
    +-- WarehouseError
    |   +-- InvalidWarehouseError
    |   +-- NoPointOfSaleWarehouseError
    |   +-- NotPointOfSaleError
    |   +-- SameWarehouseTransferError
    |
    +-- InvariantViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                      | When Raised
-----------|---------------------------|------------------------------------------
Not found  | WAREHOUSE_NOT_FOUND       | Warehouse id unknown
           | BATCH_NOT_FOUND           | Batch id unknown
           | MEDICINE_NOT_FOUND        | Medicine id unknown in the catalog
           | SUPPLIER_NOT_FOUND        | Supplier id unknown
-----------|---------------------------|------------------------------------------
Quantity   | INVALID_QUANTITY          | Zero, negative or non-integer amount
           | INSUFFICIENT_QUANTITY     | Transfer exceeds the source batch
           | INSUFFICIENT_STOCK        | Sale exceeds all FEFO candidates
-----------|---------------------------|------------------------------------------
Price      | INVALID_PRICE             | Unit price missing, zero or negative
Timestamp  | INVALID_TIMESTAMP         | Expiry date cannot be parsed
Name       | INVALID_NAME              | Empty warehouse, medicine or supplier name
-----------|---------------------------|------------------------------------------
Warehouse  | INVALID_WAREHOUSE         | Unknown warehouse type
           | NO_POINT_OF_SALE          | Sale with no point-of-sale configured
           | NOT_POINT_OF_SALE         | Sale targeted at a hub warehouse
           | SAME_WAREHOUSE_TRANSFER   | Transfer into the batch's own warehouse
-----------|---------------------------|------------------------------------------
Internal   | INVARIANT_VIOLATION       | Ledger state would break an invariant

The ledger never aborts the process on bad input. INVARIANT_VIOLATION is the
only error that signals a defect rather than a rejected request.
"""


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Not-found exceptions


class NotFoundError(StockKernelError):
    """Base exception for references to unknown ids."""

    code: str = "NOT_FOUND"
    entity: str = "entity"

    def __init__(self, entity_id: int):
        self.entity_id = entity_id
        super().__init__(f"{self.entity.capitalize()} not found: {entity_id}")


class WarehouseNotFoundError(NotFoundError):
    """Warehouse with given id does not exist."""

    code: str = "WAREHOUSE_NOT_FOUND"
    entity: str = "warehouse"


class BatchNotFoundError(NotFoundError):
    """Stock batch with given id does not exist."""

    code: str = "BATCH_NOT_FOUND"
    entity: str = "batch"


class MedicineNotFoundError(NotFoundError):
    """Medicine with given id is not in the catalog."""

    code: str = "MEDICINE_NOT_FOUND"
    entity: str = "medicine"


class SupplierNotFoundError(NotFoundError):
    """Supplier with given id does not exist."""

    code: str = "SUPPLIER_NOT_FOUND"
    entity: str = "supplier"


# Quantity exceptions


class InvalidQuantityError(StockKernelError):
    """Amount is zero, negative, or not a whole number."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, field: str, value: object, reason: str = "must be a positive integer"):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class InsufficientQuantityError(InvalidQuantityError):
    """
    Transfer asks for more than the source batch holds.

    Transfers are strict: nothing is moved when this is raised.
    """

    code: str = "INSUFFICIENT_QUANTITY"

    def __init__(self, batch_id: int, requested: int, available: int):
        self.batch_id = batch_id
        self.requested = requested
        self.available = available
        super().__init__(
            "quantity",
            requested,
            f"batch {batch_id} has only {available} available",
        )


class InsufficientStockError(InvalidQuantityError):
    """
    FEFO candidates cannot cover a sale.

    The sale is all-or-nothing: no batch is drained when this is raised.
    """

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        medicine_id: int,
        warehouse_id: int,
        requested: int,
        available: int,
    ):
        self.medicine_id = medicine_id
        self.warehouse_id = warehouse_id
        self.requested = requested
        self.available = available
        self.short_by = requested - available
        super().__init__(
            "quantity",
            requested,
            f"medicine {medicine_id} in warehouse {warehouse_id} "
            f"is short by {self.short_by} (available: {available})",
        )


# Attribute parsing exceptions


class InvalidPriceError(StockKernelError):
    """Unit price is missing, non-numeric, zero or negative."""

    code: str = "INVALID_PRICE"

    def __init__(self, value: object, reason: str = "must be greater than zero"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid unit price {value!r}: {reason}")


class InvalidTimestampError(StockKernelError):
    """Expiry date could not be parsed as a timestamp."""

    code: str = "INVALID_TIMESTAMP"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid timestamp: {value!r}")


class InvalidNameError(StockKernelError):
    """Warehouse, medicine or supplier name is empty."""

    code: str = "INVALID_NAME"

    def __init__(self, entity: str, value: object):
        self.entity = entity
        self.value = value
        super().__init__(f"Invalid {entity} name: {value!r}")


# Warehouse-related exceptions


class WarehouseError(StockKernelError):
    """Base exception for warehouse topology errors."""

    code: str = "WAREHOUSE_ERROR"


class InvalidWarehouseError(WarehouseError):
    """Warehouse type is not one of the known kinds."""

    code: str = "INVALID_WAREHOUSE"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Invalid warehouse {field}: {value!r}")


class NoPointOfSaleWarehouseError(WarehouseError):
    """A sale was requested but no point-of-sale warehouse is configured."""

    code: str = "NO_POINT_OF_SALE"

    def __init__(self) -> None:
        super().__init__("No point-of-sale warehouse is configured")


class NotPointOfSaleError(WarehouseError):
    """A sale was targeted at a warehouse that is not a point of sale."""

    code: str = "NOT_POINT_OF_SALE"

    def __init__(self, warehouse_id: int, warehouse_type: str):
        self.warehouse_id = warehouse_id
        self.warehouse_type = warehouse_type
        super().__init__(
            f"Warehouse {warehouse_id} is a {warehouse_type} warehouse, "
            "sales are only allowed from a point of sale"
        )


class SameWarehouseTransferError(WarehouseError):
    """Transfer destination is the warehouse the batch already sits in."""

    code: str = "SAME_WAREHOUSE_TRANSFER"

    def __init__(self, batch_id: int, warehouse_id: int):
        self.batch_id = batch_id
        self.warehouse_id = warehouse_id
        super().__init__(
            f"Batch {batch_id} is already in warehouse {warehouse_id}"
        )


# Internal consistency


class InvariantViolationError(StockKernelError):
    """
    Ledger state would break an invariant.

    Never expected under correct use of the ledger operations; seeing one
    means a defect in the ledger itself.
    """

    code: str = "INVARIANT_VIOLATION"

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.detail = detail
        super().__init__(f"Invariant '{invariant}' violated: {detail}")
