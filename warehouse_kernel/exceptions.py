"""
Typed Exception Hierarchy for the Warehouse Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (a request layer, a CLI, a batch job) must react to failures
precisely: a missing warehouse is a 404, a full warehouse is a conflict the
user can fix by moving stock, a store outage is an opaque 500. Parsing
message strings to tell these apart is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Every exception has a KIND (the coarse failure taxonomy)
  4. Exceptions carry structured DATA (ids, available quantities)

Example - WRONG way to handle errors:
    try:
        ops.add_item(warehouse_id, draft)
    except Exception as e:
        if "capacity" in str(e):  # FRAGILE - message might change
            ...

Example - RIGHT way (what this module enables):
    try:
        ops.add_item(warehouse_id, draft)
    except InsufficientCapacityError as e:
        respond(409, code=e.code, available=e.available)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    WarehouseKernelError (base)
    |
    +-- NotFoundError                       kind=NOT_FOUND
    |   +-- WarehouseNotFoundError
    |   +-- ItemNotFoundError
    |   +-- ItemWarehouseMismatchError
    |
    +-- ValidationError                     kind=VALIDATION
    |   +-- InvalidQuantityError
    |   +-- InvalidCapacityError
    |   +-- InvalidTransferError
    |   +-- InvalidWarehouseError
    |   +-- InvalidItemError
    |   +-- DuplicateNameError
    |   +-- DuplicateSkuError
    |
    +-- CapacityConflictError               kind=CAPACITY_CONFLICT
    |   +-- InsufficientCapacityError
    |   +-- InsufficientStockError
    |   +-- NegativeCapacityError
    |
    +-- PreconditionFailedError             kind=PRECONDITION_FAILED
    |   +-- WarehouseNotEmptyError
    |
    +-- ConcurrencyError                    kind=CONFLICT (retryable)
    |   +-- OptimisticLockError
    |   +-- ConcurrentInsertError
    |   +-- TransactionConflictError
    |
    +-- InfrastructureError                 kind=INFRASTRUCTURE
        +-- StoreUnavailableError
        +-- RetryExhaustedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Kind               | Code                       | When Raised
-------------------|----------------------------|-------------------------------------
NOT_FOUND          | WAREHOUSE_NOT_FOUND        | Warehouse id doesn't exist
                   | ITEM_NOT_FOUND             | Item id (or source SKU) doesn't exist
                   | ITEM_WAREHOUSE_MISMATCH    | Item is owned by another warehouse
-------------------|----------------------------|-------------------------------------
VALIDATION         | INVALID_QUANTITY           | Quantity <= 0
                   | INVALID_CAPACITY           | Capacity negative or current > max
                   | INVALID_TRANSFER           | Source and destination identical
                   | INVALID_WAREHOUSE          | Blank warehouse name
                   | INVALID_ITEM               | Blank item name or SKU
                   | DUPLICATE_NAME             | Warehouse name already taken
                   | DUPLICATE_SKU              | SKU already held in that warehouse
-------------------|----------------------------|-------------------------------------
CAPACITY_CONFLICT  | INSUFFICIENT_CAPACITY      | Not enough headroom (reports available)
                   | INSUFFICIENT_STOCK         | Not enough source stock (reports available)
                   | NEGATIVE_CAPACITY          | Delta would drive capacity below zero
-------------------|----------------------------|-------------------------------------
PRECONDITION_FAILED| WAREHOUSE_NOT_EMPTY        | Deleting a warehouse that owns items
-------------------|----------------------------|-------------------------------------
CONFLICT           | OPTIMISTIC_LOCK_CONFLICT   | Row changed by another transaction
                   | CONCURRENT_INSERT          | Racing insert hit a unique constraint
                   | TRANSACTION_CONFLICT       | Deadlock / serialization failure
-------------------|----------------------------|-------------------------------------
INFRASTRUCTURE     | STORE_UNAVAILABLE          | Database unreachable or failed
                   | RETRY_EXHAUSTED            | Conflicts persisted past max attempts

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CATCH SPECIFIC EXCEPTIONS, FALL BACK TO KIND:

    try:
        orchestrator.transfer(...)
    except InsufficientStockError as e:
        notify_user(f"Only {e.available} left in source")
    except WarehouseKernelError as e:
        respond(STATUS_BY_KIND[e.kind], public_error(e))

2. CONCURRENCY ERRORS ARE RETRYABLE AS A WHOLE UNIT:

    The kernel never retries.  The unit-of-work runner in
    warehouse_services re-runs the complete operation when it sees a
    ConcurrencyError, and gives up with RetryExhaustedError.

3. NEVER LEAK INFRASTRUCTURE DETAIL:

    public_error() replaces the message of InfrastructureError and of any
    non-kernel exception with a generic text.
===============================================================================
"""

from enum import Enum
from typing import Any
from uuid import UUID


class ErrorKind(str, Enum):
    """Coarse failure taxonomy used by request layers to pick a response."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CAPACITY_CONFLICT = "capacity_conflict"
    PRECONDITION_FAILED = "precondition_failed"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"
    INTERNAL = "internal"


class WarehouseKernelError(Exception):
    """
    Base exception for all warehouse kernel errors.

    All subclasses have a `code` class attribute for machine-readable
    identification and a `kind` placing them in the failure taxonomy.
    """

    code: str = "WAREHOUSE_KERNEL_ERROR"
    kind: ErrorKind = ErrorKind.INTERNAL
    retryable: bool = False


# Not-found exceptions


class NotFoundError(WarehouseKernelError):
    """Base exception for references to records that do not exist."""

    code: str = "NOT_FOUND"
    kind: ErrorKind = ErrorKind.NOT_FOUND


class WarehouseNotFoundError(NotFoundError):
    """Warehouse with given ID was not found."""

    code: str = "WAREHOUSE_NOT_FOUND"

    def __init__(self, warehouse_id: UUID | str):
        self.warehouse_id = str(warehouse_id)
        super().__init__(f"Warehouse not found: {warehouse_id}")


class ItemNotFoundError(NotFoundError):
    """
    Inventory item was not found.

    Raised either for an unknown item id, or during a transfer for a SKU
    that the source warehouse does not hold (then `sku` is set).
    """

    code: str = "ITEM_NOT_FOUND"

    def __init__(
        self,
        item_id: UUID | str | None = None,
        *,
        warehouse_id: UUID | str | None = None,
        sku: str | None = None,
    ):
        self.item_id = str(item_id) if item_id is not None else None
        self.warehouse_id = str(warehouse_id) if warehouse_id is not None else None
        self.sku = sku
        if sku is not None:
            message = f"Item with SKU {sku} not found in warehouse {warehouse_id}"
        else:
            message = f"Item not found: {item_id}"
        super().__init__(message)


class ItemWarehouseMismatchError(NotFoundError):
    """Item exists but is owned by a different warehouse than the one stated."""

    code: str = "ITEM_WAREHOUSE_MISMATCH"

    def __init__(
        self,
        item_id: UUID | str,
        warehouse_id: UUID | str,
        owner_warehouse_id: UUID | str,
    ):
        self.item_id = str(item_id)
        self.warehouse_id = str(warehouse_id)
        self.owner_warehouse_id = str(owner_warehouse_id)
        super().__init__(
            f"Item {item_id} does not belong to warehouse {warehouse_id}"
        )


# Validation exceptions


class ValidationError(WarehouseKernelError):
    """Base exception for input rejected before any store write."""

    code: str = "VALIDATION_ERROR"
    kind: ErrorKind = ErrorKind.VALIDATION


class InvalidQuantityError(ValidationError):
    """Quantity must be a strictly positive integer."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: Any):
        self.quantity = quantity
        super().__init__(f"Quantity must be > 0, got {quantity}")


class InvalidCapacityError(ValidationError):
    """Capacity values violate 0 <= current_capacity <= max_capacity."""

    code: str = "INVALID_CAPACITY"

    def __init__(self, max_capacity: Any, current_capacity: Any, reason: str):
        self.max_capacity = max_capacity
        self.current_capacity = current_capacity
        self.reason = reason
        super().__init__(reason)


class InvalidTransferError(ValidationError):
    """Transfer request is structurally invalid."""

    code: str = "INVALID_TRANSFER"

    def __init__(self, source_id: UUID | str, destination_id: UUID | str, reason: str):
        self.source_id = str(source_id)
        self.destination_id = str(destination_id)
        self.reason = reason
        super().__init__(f"Invalid transfer: {reason}")


class InvalidWarehouseError(ValidationError):
    """Warehouse attributes are invalid (e.g., blank name)."""

    code: str = "INVALID_WAREHOUSE"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid warehouse {field}: {reason}")


class InvalidItemError(ValidationError):
    """Item attributes are invalid (e.g., blank name or SKU)."""

    code: str = "INVALID_ITEM"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid item {field}: {reason}")


class DuplicateNameError(ValidationError):
    """Another warehouse already uses this name."""

    code: str = "DUPLICATE_NAME"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Warehouse name already exists: {name}")


class DuplicateSkuError(ValidationError):
    """Another item in the same warehouse already uses this SKU."""

    code: str = "DUPLICATE_SKU"

    def __init__(self, warehouse_id: UUID | str, sku: str):
        self.warehouse_id = str(warehouse_id)
        self.sku = sku
        super().__init__(f"SKU {sku} already exists in warehouse {warehouse_id}")


# Capacity conflict exceptions


class CapacityConflictError(WarehouseKernelError):
    """Base exception for requests that do not fit the available quantity."""

    code: str = "CAPACITY_CONFLICT"
    kind: ErrorKind = ErrorKind.CAPACITY_CONFLICT


class InsufficientCapacityError(CapacityConflictError):
    """Target warehouse does not have enough headroom for the requested quantity."""

    code: str = "INSUFFICIENT_CAPACITY"

    def __init__(self, warehouse_id: UUID | str, requested: int, available: int):
        self.warehouse_id = str(warehouse_id)
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough capacity in warehouse {warehouse_id}. "
            f"Requested: {requested}, available: {available}"
        )


class InsufficientStockError(CapacityConflictError):
    """Source item holds less stock than the requested quantity."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, warehouse_id: UUID | str, sku: str, requested: int, available: int):
        self.warehouse_id = str(warehouse_id)
        self.sku = sku
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough quantity of {sku} in warehouse {warehouse_id}. "
            f"Requested: {requested}, available: {available}"
        )


class NegativeCapacityError(CapacityConflictError):
    """A delta would drive current capacity below zero."""

    code: str = "NEGATIVE_CAPACITY"

    def __init__(self, warehouse_id: UUID | str, current_capacity: int, delta: int):
        self.warehouse_id = str(warehouse_id)
        self.current_capacity = current_capacity
        self.delta = delta
        super().__init__(
            f"Capacity of warehouse {warehouse_id} would become negative: "
            f"{current_capacity} + ({delta})"
        )


# Precondition exceptions


class PreconditionFailedError(WarehouseKernelError):
    """Base exception for operations blocked by the current record state."""

    code: str = "PRECONDITION_FAILED"
    kind: ErrorKind = ErrorKind.PRECONDITION_FAILED


class WarehouseNotEmptyError(PreconditionFailedError):
    """Warehouse still owns inventory items and cannot be deleted."""

    code: str = "WAREHOUSE_NOT_EMPTY"

    def __init__(self, warehouse_id: UUID | str, item_count: int):
        self.warehouse_id = str(warehouse_id)
        self.item_count = item_count
        super().__init__(
            "Cannot delete warehouse that still has inventory items "
            f"({item_count} remaining)"
        )


# Concurrency exceptions


class ConcurrencyError(WarehouseKernelError):
    """Base exception for conflicts with a concurrent transaction."""

    code: str = "CONCURRENCY_ERROR"
    kind: ErrorKind = ErrorKind.CONFLICT
    retryable: bool = True


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: UUID | str | None = None):
        self.entity_type = entity_type
        self.entity_id = str(entity_id) if entity_id is not None else None
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )


class ConcurrentInsertError(ConcurrencyError):
    """A concurrent transaction inserted a conflicting row first."""

    code: str = "CONCURRENT_INSERT"

    def __init__(self, entity_type: str, key: str):
        self.entity_type = entity_type
        self.key = key
        super().__init__(f"Concurrent insert conflict on {entity_type} {key}")


class TransactionConflictError(ConcurrencyError):
    """The store aborted the transaction (deadlock or serialization failure)."""

    code: str = "TRANSACTION_CONFLICT"

    def __init__(self, sqlstate: str | None = None):
        self.sqlstate = sqlstate
        super().__init__(f"Transaction aborted by the store (sqlstate={sqlstate})")


# Infrastructure exceptions


class InfrastructureError(WarehouseKernelError):
    """Base exception for store failures that are not domain errors."""

    code: str = "INFRASTRUCTURE_ERROR"
    kind: ErrorKind = ErrorKind.INFRASTRUCTURE


class StoreUnavailableError(InfrastructureError):
    """The backing store could not complete the operation."""

    code: str = "STORE_UNAVAILABLE"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Store failure during {operation}: {detail}")


class RetryExhaustedError(InfrastructureError):
    """Concurrency conflicts persisted for every allowed attempt."""

    code: str = "RETRY_EXHAUSTED"

    def __init__(self, operation: str, attempts: int):
        self.operation = operation
        self.attempts = attempts
        super().__init__(
            f"Operation {operation} still conflicting after {attempts} attempts"
        )


# Request-layer helpers

_GENERIC_MESSAGE = "Unexpected server error. Please try again."


def classify(exc: BaseException) -> ErrorKind:
    """Map any exception to its ErrorKind; non-kernel errors are INTERNAL."""
    if isinstance(exc, WarehouseKernelError):
        return exc.kind
    return ErrorKind.INTERNAL


def public_error(exc: BaseException) -> dict[str, Any]:
    """
    Build a response-safe payload for an exception.

    Domain errors expose their code, message and structured attributes.
    Infrastructure and unclassified errors expose only a generic message.
    """
    kind = classify(exc)
    if kind in (ErrorKind.INFRASTRUCTURE, ErrorKind.INTERNAL):
        code = exc.code if isinstance(exc, WarehouseKernelError) else "INTERNAL_ERROR"
        return {"code": code, "kind": kind.value, "message": _GENERIC_MESSAGE}

    payload: dict[str, Any] = {
        "code": exc.code,
        "kind": kind.value,
        "message": str(exc),
    }
    for key, value in vars(exc).items():
        if not key.startswith("_") and key not in payload:
            payload[key] = value
    return payload
