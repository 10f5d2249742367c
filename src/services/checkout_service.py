# src/services/checkout_service.py
import logging
from decimal import Decimal
from typing import List, Optional
from urllib.parse import quote
from pydantic import BaseModel
from ..catalog.pricing import money
from ..config import Config
from ..models.cart import CartItem
from ..models.order import Customer, Order, OrderItem, OrderStatus
from ..models.promo import PromoCode
from ..models.shipping import ShippingSettings
from ..utils.formatters import whatsapp_digits
from ..utils.messages import Messages
from .cart_service import CartLedger
from .order_service import OrderService
from .promo_service import compute_discount
from .shipping_service import find_method, shipping_fee

class CheckoutError(Exception):
    """Checkout cannot produce a WhatsApp link"""

class CheckoutSummary(BaseModel):
    subtotal: Decimal = Decimal(0)
    discount: Decimal = Decimal(0)
    shipping: Decimal = Decimal(0)
    total: Decimal = Decimal(0)

class CheckoutResult(BaseModel):
    order: Order
    order_id: Optional[str] = None
    message: str
    url: str
    summary: CheckoutSummary

def summarize(items: List[CartItem], promo: Optional[PromoCode] = None,
              settings: Optional[ShippingSettings] = None,
              method_code: Optional[str] = None) -> CheckoutSummary:
    """Totals shown in the cart and written into the order"""
    subtotal = money(sum((item.line_total for item in items), Decimal(0)))
    discount = compute_discount(promo, subtotal)
    base_total = max(Decimal(0), subtotal - discount)
    shipping = money(shipping_fee(settings, method_code, base_total))
    total = money(max(Decimal(0), base_total + shipping))
    return CheckoutSummary(subtotal=subtotal, discount=discount, shipping=shipping, total=total)

def whatsapp_url(phone: str, message: str) -> str:
    text = quote(message, safe="-_.!~*'()")
    return f"https://wa.me/{whatsapp_digits(phone)}?text={text}"

class CheckoutService:
    """Turns the cart into an order row and a pre-filled WhatsApp link"""

    def __init__(self, order_service: OrderService, store_name: Optional[str] = None,
                 whatsapp_number: Optional[str] = None):
        self.order_service = order_service
        self.store_name = store_name or Config.SITE_NAME
        self.whatsapp_number = whatsapp_number if whatsapp_number is not None else Config.WHATSAPP_NUMBER
        self.logger = logging.getLogger(__name__)

    def build_order(self, items: List[CartItem], customer: Customer, summary: CheckoutSummary,
                    promo: Optional[PromoCode] = None, method_code: Optional[str] = None) -> Order:
        return Order(
            status=OrderStatus.NEW,
            customer=customer,
            items=[OrderItem.from_cart_item(item) for item in items],
            promo_code=promo.code if promo else None,
            delivery_method=method_code or None,
            notes=customer.notes,
            subtotal=summary.subtotal,
            discount=summary.discount,
            shipping=summary.shipping,
            total=summary.total,
        )

    async def checkout(self, ledger: CartLedger, customer: Optional[Customer] = None,
                       promo: Optional[PromoCode] = None,
                       settings: Optional[ShippingSettings] = None,
                       method_code: Optional[str] = None) -> CheckoutResult:
        """Record the order and build the WhatsApp link.

        A failed order insert is logged and the link is still produced, without
        an order id, so the shopper can finish on WhatsApp.
        """
        phone = whatsapp_digits(self.whatsapp_number)
        if not phone:
            raise CheckoutError("WhatsApp number is not set")
        items = ledger.items
        if not items:
            raise CheckoutError("Cart is empty")

        customer = customer or Customer()
        summary = summarize(items, promo, settings, method_code)
        order = self.build_order(items, customer, summary, promo, method_code)

        result = await self.order_service.create_order(order)
        order_id = None
        if result.get("ok") and result.get("id"):
            order_id = str(result["id"])
        else:
            self.logger.warning(f"Order insert failed: {result.get('error')}")

        method = find_method(settings, method_code) if settings else None
        method_label = (method.label if method and method.label else None) or method_code or "Delivery"
        message = Messages.format_order_message(
            self.store_name, items, customer, summary, method_label, promo, order_id
        )
        return CheckoutResult(
            order=order,
            order_id=order_id,
            message=message,
            url=whatsapp_url(phone, message),
            summary=summary,
        )
