"""
CapacityLedger -- admissibility of capacity deltas.

Responsibility:
    Given a warehouse's capacity figures and a proposed quantity delta,
    decide whether the change is admissible and produce the new current
    capacity.  Every quantity change in the kernel (add, update, delete,
    both legs of a transfer) passes through reserve().

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Reads warehouse state only; the calling service persists the result
    together with the item write that caused it.

Invariants enforced:
    - 0 <= current_capacity <= max_capacity after any approved delta.
    - Non-positive deltas are never blocked by the upper bound: a warehouse
      whose max_capacity was lowered below current stock can still shed it.

Failure modes:
    - InsufficientCapacityError (available = max - current) when a positive
      delta overshoots max_capacity.
    - NegativeCapacityError when the delta would go below zero.
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from warehouse_kernel.exceptions import InsufficientCapacityError, NegativeCapacityError


class CapacityHolder(Protocol):
    """Anything exposing a warehouse's identity and capacity figures."""

    id: UUID
    max_capacity: int
    current_capacity: int


@dataclass(frozen=True)
class WarehouseCapacity:
    """Detached snapshot of a warehouse's capacity figures."""

    id: UUID
    max_capacity: int
    current_capacity: int

    @property
    def headroom(self) -> int:
        return self.max_capacity - self.current_capacity


def headroom(warehouse: CapacityHolder) -> int:
    """Capacity still available in ``warehouse``."""
    return warehouse.max_capacity - warehouse.current_capacity


def reserve(warehouse: CapacityHolder, delta: int) -> int:
    """
    Check a capacity delta and return the resulting current capacity.

    Pure and idempotent: the same (state, delta) always yields the same
    result, and nothing is written.

    Args:
        warehouse: Current capacity figures.
        delta: Signed quantity change.

    Returns:
        current_capacity + delta.

    Raises:
        InsufficientCapacityError: delta > 0 and the result exceeds max_capacity.
        NegativeCapacityError: the result would be below zero.
    """
    candidate = warehouse.current_capacity + delta
    if delta > 0 and candidate > warehouse.max_capacity:
        raise InsufficientCapacityError(
            warehouse_id=warehouse.id,
            requested=delta,
            available=headroom(warehouse),
        )
    if candidate < 0:
        raise NegativeCapacityError(
            warehouse_id=warehouse.id,
            current_capacity=warehouse.current_capacity,
            delta=delta,
        )
    return candidate
