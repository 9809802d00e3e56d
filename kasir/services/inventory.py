"""
Inventory ledger: the authoritative item and stock collection.
"""
import logging
import secrets
import string
from decimal import Decimal
from typing import List, Optional, Tuple

from kasir.core.config import Settings, get_settings
from kasir.core.errors import ConflictError, InsufficientStockError, NotFoundError, ValidationError
from kasir.schemas.items import DEFAULT_CATEGORY, Item, ItemCreate, ItemUpdate
from kasir.services.action_log import ActionLog
from kasir.services.document_store import ITEMS, DocumentStore

logger = logging.getLogger(__name__)

ITEM_ID_ALPHABET = string.ascii_uppercase + string.digits
ITEM_ID_LENGTH = 6


def normalize_name(name: str) -> str:
    return name.strip().lower()


def new_item_id(taken: set) -> str:
    """Random opaque token not already used by another item."""
    while True:
        candidate = "".join(secrets.choice(ITEM_ID_ALPHABET) for _ in range(ITEM_ID_LENGTH))
        if candidate not in taken:
            return candidate


class InventoryLedger:
    """
    Working copy of the ``items`` document.

    Mutations only touch this copy; ``save`` stages it in the caller's unit
    of work.
    """

    def __init__(self, items: List[Item]):
        self.items = items

    @classmethod
    def load(cls, store: DocumentStore) -> "InventoryLedger":
        return cls([Item.model_validate(raw) for raw in store.read(ITEMS, [])])

    def save(self, store: DocumentStore) -> None:
        store.write(ITEMS, [item.to_document() for item in self.items])

    def find_by_id(self, item_id: str) -> Optional[Item]:
        return next((item for item in self.items if item.id == item_id), None)

    def find_by_name(self, name: str) -> Optional[Item]:
        wanted = normalize_name(name)
        return next((item for item in self.items if normalize_name(item.name) == wanted), None)

    def get(self, item_id: str) -> Item:
        item = self.find_by_id(item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found", {"item_id": item_id})
        return item

    def upsert_restock(
        self,
        name: str,
        delta_stock: int,
        price: Optional[Decimal] = None,
        category: Optional[str] = None,
    ) -> Tuple[Item, bool]:
        """
        Add stock to the item with this name, or create it.

        Returns (item, created). Price and category only apply to a new item.
        """
        if delta_stock < 0:
            raise ValidationError("Restock quantity cannot be negative", {"stock": delta_stock})

        existing = self.find_by_name(name)
        if existing is not None:
            existing.stock += delta_stock
            return existing, False

        clean_name = name.strip()
        if not clean_name:
            raise ValidationError("Item name is required")
        if price is None:
            raise ValidationError(f"Price is required to create item {clean_name}", {"name": clean_name})

        item = Item(
            id=new_item_id({i.id for i in self.items}),
            name=clean_name,
            category=(category or "").strip() or DEFAULT_CATEGORY,
            price=price,
            discount=Decimal("0"),
            stock=delta_stock,
        )
        self.items.append(item)
        return item, True

    def check_rename(self, item_id: str, new_name: str) -> None:
        """Raise ConflictError if another item already uses ``new_name``."""
        wanted = normalize_name(new_name)
        for other in self.items:
            if other.id != item_id and normalize_name(other.name) == wanted:
                raise ConflictError(
                    f"Item name already exists: {other.name}",
                    {"name": new_name.strip(), "conflicting_id": other.id},
                )

    def update(self, item_id: str, changes: ItemUpdate) -> Item:
        item = self.get(item_id)

        fields = {}
        for field, value in changes.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    continue
            fields[field] = value

        if "name" in fields:
            self.check_rename(item_id, fields["name"])

        for field, value in fields.items():
            setattr(item, field, value)
        return item

    def debit(self, item_id: str, quantity: int) -> Item:
        item = self.get(item_id)
        if item.stock < quantity:
            raise InsufficientStockError(item.name, quantity, item.stock)
        item.stock -= quantity
        return item

    def remove(self, item_id: str) -> Item:
        item = self.get(item_id)
        self.items = [i for i in self.items if i.id != item_id]
        return item

    def by_stock(self, category: Optional[str] = None) -> List[Item]:
        """Items with the lowest stock first, optionally within one category."""
        items = self.items
        if category is not None:
            wanted = category.strip().lower()
            items = [i for i in items if i.category and i.category.lower() == wanted]
        return sorted(items, key=lambda i: i.stock)


class InventoryService:
    """Item operations, each committed as its own unit and then audited."""

    def __init__(self, store: DocumentStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()
        self.action_log = ActionLog(store, self.settings)

    def _run(self, work, label: str):
        return self.store.run(work, retries=self.settings.COMMIT_RETRIES, label=label)

    def list_items(self) -> List[Item]:
        return InventoryLedger.load(self.store).items

    def get_item(self, item_id: str) -> Item:
        return InventoryLedger.load(self.store).get(item_id)

    def stock(self, category: Optional[str] = None) -> List[Item]:
        return InventoryLedger.load(self.store).by_stock(category)

    def create_or_restock(self, data: ItemCreate, user: str) -> Tuple[Item, bool]:
        def _work(store: DocumentStore) -> Tuple[Item, bool]:
            ledger = InventoryLedger.load(store)
            item, created = ledger.upsert_restock(data.name, data.stock, data.price, data.category)
            ledger.save(store)
            return item, created

        item, created = self._run(_work, "item upsert")
        if created:
            logger.info(f"Created item {item.id} '{item.name}' with stock {item.stock}")
            self.action_log.append(user, f"New item created: {item.name}")
        else:
            logger.info(f"Restocked '{item.name}' by {data.stock} to {item.stock}")
            self.action_log.append(user, f"Stock updated for {item.name}")
        return item, created

    def update_item(self, item_id: str, changes: ItemUpdate, user: str) -> Item:
        def _work(store: DocumentStore) -> Item:
            ledger = InventoryLedger.load(store)
            item = ledger.update(item_id, changes)
            ledger.save(store)
            return item

        item = self._run(_work, "item update")
        self.action_log.append(user, f"Item updated: {item.name}")
        return item

    def attach_photo(self, item_id: str, photo_ref: str, user: str) -> Item:
        def _work(store: DocumentStore) -> Item:
            ledger = InventoryLedger.load(store)
            item = ledger.get(item_id)
            item.photo_ref = photo_ref
            ledger.save(store)
            return item

        item = self._run(_work, "item photo")
        self.action_log.append(user, f"Photo updated for {item.name}")
        return item

    def delete_item(self, item_id: str, user: str) -> Item:
        """
        Delete an item. Always allowed for a known id: sold lines keep their
        own name and price snapshot, so reports are unaffected.
        """
        def _work(store: DocumentStore) -> Item:
            ledger = InventoryLedger.load(store)
            item = ledger.remove(item_id)
            ledger.save(store)
            return item

        item = self._run(_work, "item delete")
        logger.info(f"Deleted item {item.id} '{item.name}'")
        self.action_log.append(user, f"Item deleted: {item.id}")
        return item
