"""
Stock merge decision.

Adding stock of a SKU to a warehouse either merges into the item that
already holds that SKU there, or creates a new item.  decide_merge() makes
that choice from the existing item (if any) and the incoming draft, and
returns a tagged result that a single persistence step consumes.

Pure: no store access.  The lookup lives in services.stock_merge_policy.

Attribute rules on merge:
    - quantity becomes existing + incoming.
    - name, description, category and storage_location are replaced by the
      incoming values.
    - expiration_date is replaced only when the incoming value is set.
"""

from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from warehouse_kernel.domain.dtos import ItemAttributes, ItemDraft


class ExistingStock(Protocol):
    id: UUID
    quantity: int
    expiration_date: date | None


@dataclass(frozen=True)
class MergeInto:
    """Merge the incoming stock into an existing item."""

    item_id: UUID
    new_quantity: int
    attributes: ItemAttributes
    delta: int


@dataclass(frozen=True)
class CreateNew:
    """Create a new item owned by ``warehouse_id``."""

    warehouse_id: UUID
    draft: ItemDraft

    @property
    def delta(self) -> int:
        return self.draft.quantity


MergeDecision = MergeInto | CreateNew


def merged_attributes(
    existing: ExistingStock,
    incoming: ItemAttributes,
) -> ItemAttributes:
    """Incoming attributes, keeping the existing expiration date when none is given."""
    expiration = incoming.expiration_date
    if expiration is None:
        expiration = existing.expiration_date
    return ItemAttributes(
        name=incoming.name,
        description=incoming.description,
        category=incoming.category,
        storage_location=incoming.storage_location,
        expiration_date=expiration,
    )


def decide_merge(
    existing: ExistingStock | None,
    incoming: ItemDraft,
    warehouse_id: UUID,
) -> MergeDecision:
    """
    Decide between merging and creating.

    Args:
        existing: The item already holding incoming.sku in the target
            warehouse, or None.
        incoming: The stock being added.
        warehouse_id: The target warehouse.

    Returns:
        MergeInto when ``existing`` is given, CreateNew otherwise.  In both
        cases ``decision.delta == incoming.quantity``.
    """
    if existing is None:
        return CreateNew(warehouse_id=warehouse_id, draft=incoming)

    return MergeInto(
        item_id=existing.id,
        new_quantity=existing.quantity + incoming.quantity,
        attributes=merged_attributes(existing, incoming.attributes),
        delta=incoming.quantity,
    )
