# src/models/cart.py
from decimal import Decimal
from typing import Any, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

CartKey = Tuple[str, Optional[str], Optional[int], str]

def make_key(product_id: Any, size: Optional[str], variant_index: Optional[int],
             image: Optional[str]) -> CartKey:
    """Composite identity of a cart line"""
    return (
        str(product_id),
        size or None,
        None if variant_index is None else int(variant_index),
        image or "",
    )

class CartItem(BaseModel):
    """Line item in the cart, with display fields captured when it was added"""
    product_id: str
    name: str = ""
    price: Decimal = Decimal(0)
    unit_price: Decimal = Decimal(0)
    size: Optional[str] = None
    variant_index: Optional[int] = None
    image: str = ""
    image_name: str = ""
    image_description: str = ""
    image_index: int = 0
    quantity: int = Field(1, ge=1)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("size", mode="before")
    @classmethod
    def _size(cls, value: Any) -> Optional[str]:
        return value or None

    @field_validator("image", "image_name", "image_description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return value or ""

    @property
    def key(self) -> CartKey:
        return make_key(self.product_id, self.size, self.variant_index, self.image)

    @property
    def has_discount(self) -> bool:
        return self.unit_price < self.price

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity
