# src/catalog/selector.py
import logging
from typing import Optional
from ..models.cart import CartItem
from ..models.product import Product
from .image_meta import index_of, meta_for
from .pricing import base_price, unit_price
from .stock import has_any_stock, pick_first_in_stock, quantity_for

logger = logging.getLogger(__name__)

def build_cart_item(product: Product, size: Optional[str], variant_index: Optional[int],
                    image: Optional[str] = None, quantity: int = 1) -> CartItem:
    """Snapshot a product selection into a cart line"""
    url = image or product.image
    meta = meta_for(product, index_of(product, url))
    return CartItem(
        product_id=product.id,
        name=product.name,
        price=base_price(product),
        unit_price=unit_price(product),
        size=size or None,
        variant_index=variant_index,
        image=url,
        image_name=meta.name,
        image_description=meta.description,
        image_index=meta.index,
        quantity=quantity,
    )

def quick_add_item(product: Product, quantity: int = 1) -> Optional[CartItem]:
    """One-tap add: auto-pick a size/variant, or None when sold out"""
    if not has_any_stock(product):
        return None
    pick = pick_first_in_stock(product)
    return build_cart_item(product, pick.size, pick.variant_index, pick.image, quantity)

class VariantSelector:
    """Active image and size of one product view, kept consistent with stock.

    In per-image mode the active image decides the variant, and a size that is
    sold out for the new variant is dropped so the shopper has to pick again.
    """

    def __init__(self, product: Product):
        self.product = product
        self.selected_size: Optional[str] = None
        self.active_image: str = ""
        self.variant_index: Optional[int] = None
        self.size_required = False
        self._sync()

    @property
    def sizes(self):
        return self.product.sizes

    @property
    def per_image(self) -> bool:
        return self.product.stock.is_per_image

    def set_product(self, product: Product):
        """Swap in a reloaded product, keeping choices that still apply"""
        self.product = product
        self._sync()

    def _sync(self):
        sizes = self.sizes
        if not sizes:
            self.selected_size = None
        elif len(sizes) == 1:
            self.selected_size = sizes[0]
        elif self.selected_size not in sizes:
            self.selected_size = None

        images = self.product.images
        if self.active_image not in images:
            self.active_image = images[0] if images else ""
        self._sync_variant()

    def _sync_variant(self):
        if not self.per_image:
            self.variant_index = None
            return
        self.variant_index = index_of(self.product, self.active_image)

    def select_image(self, image_url: str):
        self.active_image = image_url or self.product.image
        self._sync_variant()
        if self.variant_index is None or self.selected_size is None:
            return
        if quantity_for(self.product, self.selected_size, self.variant_index) <= 0:
            logger.debug(
                f"Size {self.selected_size} sold out for variant {self.variant_index} "
                f"of {self.product.id}, clearing selection"
            )
            self.selected_size = None

    def select_size(self, size: str) -> bool:
        s = str(size or "").strip()
        if s not in self.sizes:
            logger.debug(f"Ignoring unknown size {s!r} for product {self.product.id}")
            return False
        self.selected_size = s
        self.size_required = False
        return True

    def clear_size(self):
        self.selected_size = None

    def is_size_out_of_stock(self, size: str) -> bool:
        return quantity_for(self.product, size, self.variant_index) <= 0

    @property
    def is_out_of_stock(self) -> bool:
        if not self.sizes:
            return False
        if not self.selected_size:
            return not has_any_stock(self.product)
        return self.is_size_out_of_stock(self.selected_size)

    @property
    def needs_size(self) -> bool:
        return len(self.sizes) > 1 and not self.selected_size

    @property
    def can_add(self) -> bool:
        return not self.needs_size and not self.is_out_of_stock

    def confirm(self, quantity: int = 1) -> Optional[CartItem]:
        """Build the cart line for the current selection"""
        if self.needs_size:
            self.size_required = True
            return None
        if len(self.sizes) == 1:
            size = self.sizes[0]
        else:
            size = self.selected_size or None
        return build_cart_item(
            self.product, size, self.variant_index,
            self.active_image or self.product.image, quantity,
        )
