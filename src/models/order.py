# src/models/order.py
import uuid
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from .base import TimeStampedModel
from .cart import CartItem
from ..utils.parsing import json_number, to_price, to_text

class OrderStatus(str, Enum):
    NEW = "new"
    PREPARING = "preparing"
    DELIVERED = "delivered"
    CANCELED = "canceled"

class Customer(BaseModel):
    """Contact details typed in at checkout (all optional)"""
    name: str = ""
    phone: str = ""
    address: str = ""
    notes: str = ""

    @field_validator("name", "phone", "address", "notes", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return to_text(value).strip()

class OrderItem(BaseModel):
    """Individual item in an order, frozen at submission time"""
    product_id: str
    name: str = ""
    price: Decimal
    quantity: int
    size: Optional[str] = None
    variant_index: Optional[int] = Field(None, alias="variantIndex")
    image: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def total_price(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_cart_item(cls, item: CartItem) -> "OrderItem":
        return cls(
            product_id=item.product_id,
            name=item.name,
            price=item.unit_price,
            quantity=item.quantity,
            size=item.size or None,
            variant_index=item.variant_index,
            image=item.image or None,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": json_number(self.price),
            "quantity": self.quantity,
            "size": self.size,
            "variantIndex": self.variant_index,
            "image": self.image,
        }

class Order(TimeStampedModel):
    """Order model for checkouts"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    status: OrderStatus = OrderStatus.NEW
    customer: Customer = Field(default_factory=Customer)
    items: List[OrderItem] = Field(default_factory=list)
    promo_code: Optional[str] = None
    delivery_method: Optional[str] = None
    notes: str = ""
    subtotal: Decimal = Decimal(0)
    discount: Decimal = Decimal(0)
    shipping: Decimal = Decimal(0)
    total: Decimal = Decimal(0)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> OrderStatus:
        try:
            return OrderStatus(value or OrderStatus.NEW)
        except ValueError:
            return OrderStatus.NEW

    @field_validator("customer", mode="before")
    @classmethod
    def _customer(cls, value: Any) -> Any:
        return value if value else {}

    @field_validator("subtotal", "discount", "shipping", "total", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Decimal:
        return to_price(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, value: Any) -> str:
        return to_text(value)

    @property
    def items_count(self) -> int:
        return len(self.items)

    def to_row(self) -> Dict[str, Any]:
        """JSON-friendly row for the orders table / demo store"""
        return {
            "id": self.id,
            "status": self.status.value,
            "customer": self.customer.model_dump(),
            "items": [item.to_payload() for item in self.items],
            "promo_code": self.promo_code,
            "delivery_method": self.delivery_method,
            "notes": self.notes,
            "subtotal": json_number(self.subtotal),
            "discount": json_number(self.discount),
            "shipping": json_number(self.shipping),
            "total": json_number(self.total),
            "created_at": self.created_at.isoformat(),
        }
