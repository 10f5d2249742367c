# src/services/cart_service.py
import logging
from decimal import Decimal
from typing import List, Optional
from pydantic import ValidationError
from ..catalog.pricing import money
from ..database.cart_storage import CartStorage
from ..models.cart import CartItem, CartKey, make_key
from ..models.order import OrderItem
from ..utils.parsing import to_int

class CartLedger:
    """Cart line items keyed by (product, size, variant, image).

    Mutations apply in memory first and then save the whole collection. A
    failed save is logged and the in-memory cart stays as it is. Quantities
    are not checked against stock here; callers clamp with
    catalog.stock.clamp_quantity first.
    """

    def __init__(self, storage: Optional[CartStorage] = None):
        self.storage = storage
        self.logger = logging.getLogger(__name__)
        self._items: List[CartItem] = []
        self.reload()

    def reload(self):
        """Re-read persisted entries (last writer wins)"""
        self._items = []
        if self.storage is None:
            return
        try:
            rows = self.storage.load()
        except Exception as e:
            self.logger.error(f"Failed to load cart: {e}")
            return
        for row in rows:
            try:
                item = CartItem.model_validate(row)
            except ValidationError as e:
                self.logger.warning(f"Dropping invalid cart row {row!r}: {e}")
                continue
            self._merge(item)

    @property
    def items(self) -> List[CartItem]:
        return [item.model_copy() for item in self._items]

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def subtotal(self) -> Decimal:
        return money(sum((item.line_total for item in self._items), Decimal(0)))

    def __len__(self) -> int:
        return len(self._items)

    def _index(self, key: CartKey) -> Optional[int]:
        for i, item in enumerate(self._items):
            if item.key == key:
                return i
        return None

    def _merge(self, item: CartItem) -> CartItem:
        idx = self._index(item.key)
        if idx is None:
            self._items.append(item)
            return item
        existing = self._items[idx]
        existing.quantity += item.quantity
        return existing

    def add_item(self, item: CartItem) -> CartItem:
        """Add a line, or bump the quantity of the identical line"""
        merged = self._merge(item.model_copy())
        self._persist()
        return merged.model_copy()

    def update_quantity(self, product_id: str, size: Optional[str], new_quantity: int,
                        variant_index: Optional[int] = None,
                        image: Optional[str] = None) -> Optional[CartItem]:
        """Set a line's quantity, floored to a whole count; below one removes it"""
        idx = self._index(make_key(product_id, size, variant_index, image))
        if idx is None:
            return None
        quantity = to_int(new_quantity)
        if quantity <= 0:
            del self._items[idx]
            self._persist()
            return None
        self._items[idx].quantity = quantity
        self._persist()
        return self._items[idx].model_copy()

    def remove_item(self, product_id: str, size: Optional[str],
                    variant_index: Optional[int] = None, image: Optional[str] = None) -> bool:
        idx = self._index(make_key(product_id, size, variant_index, image))
        if idx is None:
            return False
        del self._items[idx]
        self._persist()
        return True

    def clear(self):
        self._items = []
        self._persist()

    def to_order_items(self) -> List[OrderItem]:
        return [OrderItem.from_cart_item(item) for item in self._items]

    def _persist(self):
        if self.storage is None:
            return
        try:
            self.storage.save([item.model_dump(mode="json") for item in self._items])
        except Exception as e:
            self.logger.error(f"Failed to save cart: {e}")
