"""
StockMergePolicy -- merge-or-create resolution against the item store.

Responsibility:
    Looks up the item holding a SKU in a target warehouse, delegates the
    decision to the pure ``decide_merge`` and applies a decision to the
    session.  apply() is the only place where merged or created items are
    written, for both add_item and the destination leg of a transfer.

Architecture position:
    Kernel > Services.  Depends on ItemStore for lookup and on
    domain.stock_merge for the decision.

Invariants enforced:
    - At most one item per (warehouse, SKU): an existing item is always
      merged into, never duplicated.
    - decision.delta == +incoming.quantity on both branches; the existing
      quantity is never re-counted against capacity.

Failure modes:
    - ConcurrentInsertError (raised by callers on flush) when another
      transaction created the same (warehouse, SKU) between lookup and
      insert.  A retry of the whole unit takes the merge branch.
"""

from dataclasses import replace
from uuid import UUID

from warehouse_kernel.domain.dtos import ItemDraft
from warehouse_kernel.domain.stock_merge import MergeDecision, MergeInto, decide_merge
from warehouse_kernel.logging_config import get_logger
from warehouse_kernel.models.inventory_item import InventoryItem
from warehouse_kernel.stores.item_store import ItemStore

logger = get_logger("services.stock_merge")


class StockMergePolicy:
    """Resolve and apply merge-or-create decisions for one session."""

    def __init__(self, items: ItemStore):
        self._items = items

    def resolve(self, warehouse_id: UUID, sku: str, incoming: ItemDraft) -> MergeDecision:
        """
        Decide how ``incoming`` lands in ``warehouse_id``.

        The existing item, if any, is row-locked so that the merge applies
        to the quantity read here.
        """
        if incoming.sku != sku:
            incoming = replace(incoming, sku=sku)
        existing = self._items.find_by_sku(warehouse_id, sku, for_update=True)
        decision = decide_merge(existing, incoming, warehouse_id)
        logger.debug(
            "merge_resolved",
            extra={
                "warehouse_id": str(warehouse_id),
                "sku": sku,
                "merge": isinstance(decision, MergeInto),
                "delta": decision.delta,
            },
        )
        return decision

    def apply(self, decision: MergeDecision) -> InventoryItem:
        """Write a decision into the session and return the affected item."""
        if isinstance(decision, MergeInto):
            item = self._items.get(decision.item_id)
            # Locked by resolve() in the same session.
            assert item is not None
            attributes = decision.attributes
            item.quantity = decision.new_quantity
            item.name = attributes.name
            item.description = attributes.description
            item.category = attributes.category
            item.storage_location = attributes.storage_location
            item.expiration_date = attributes.expiration_date
            return item

        draft = decision.draft
        return self._items.add(
            InventoryItem(
                warehouse_id=decision.warehouse_id,
                name=draft.name,
                sku=draft.sku,
                quantity=draft.quantity,
                description=draft.description,
                category=draft.category,
                storage_location=draft.storage_location,
                expiration_date=draft.expiration_date,
            )
        )
