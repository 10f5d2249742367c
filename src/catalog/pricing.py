# src/catalog/pricing.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from ..models.product import Product

CENT = Decimal("0.01")

def money(value: Decimal) -> Decimal:
    """Round to cents"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)

def base_price(product: Optional[Product]) -> Decimal:
    if product is None:
        return Decimal(0)
    return product.price

def discount_price(product: Optional[Product]) -> Optional[Decimal]:
    """Sale price override, only when it undercuts the base price"""
    if product is None:
        return None
    override = product.stock.overrides.discount_price
    if override is None or override <= 0:
        return None
    if override >= base_price(product):
        return None
    return override

def has_discount(product: Optional[Product]) -> bool:
    return discount_price(product) is not None

def unit_price(product: Optional[Product]) -> Decimal:
    discounted = discount_price(product)
    return discounted if discounted is not None else base_price(product)

def line_total(price: Decimal, quantity: int) -> Decimal:
    return money(price * quantity)
