# src/models/shipping.py
from decimal import Decimal
from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator
from ..utils.parsing import to_decimal, to_price

class ShippingMethod(BaseModel):
    code: str
    label: str = ""
    fee: Decimal = Decimal(0)
    active: bool = True

    @field_validator("fee", mode="before")
    @classmethod
    def _fee(cls, value: Any) -> Decimal:
        return to_price(value)

    @field_validator("active", mode="before")
    @classmethod
    def _active(cls, value: Any) -> bool:
        return value is not False

class ShippingSettings(BaseModel):
    """Delivery methods plus an optional free-delivery threshold"""
    methods: List[ShippingMethod] = Field(default_factory=list)
    free_threshold: Optional[Decimal] = None

    @field_validator("methods", mode="before")
    @classmethod
    def _methods(cls, value: Any) -> list:
        return value if isinstance(value, list) else []

    @field_validator("free_threshold", mode="before")
    @classmethod
    def _threshold(cls, value: Any) -> Optional[Decimal]:
        return to_decimal(value)
