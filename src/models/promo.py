# src/models/promo.py
from decimal import Decimal
from enum import Enum
from typing import Any
from pydantic import BaseModel, field_validator
from ..utils.parsing import to_price

class PromoType(str, Enum):
    PERCENT = "percent"
    FIXED = "fixed"

class PromoCode(BaseModel):
    """Promo code applied to the cart subtotal"""
    code: str
    type: PromoType = PromoType.PERCENT
    value: Decimal
    active: bool = True

    @field_validator("code", mode="before")
    @classmethod
    def _code(cls, value: Any) -> str:
        return str(value or "").strip().upper()

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> PromoType:
        return PromoType.FIXED if value == PromoType.FIXED.value else PromoType.PERCENT

    @field_validator("value", mode="before")
    @classmethod
    def _value(cls, value: Any) -> Decimal:
        return to_price(value)

    @field_validator("active", mode="before")
    @classmethod
    def _active(cls, value: Any) -> bool:
        return value is not False
