# src/utils/messages.py
from typing import List, Optional
from ..models.cart import CartItem
from ..models.order import Customer
from ..models.promo import PromoCode
from .formatters import format_price

RULE = "—" * 10

class Messages:
    @staticmethod
    def format_cart_item(item: CartItem) -> str:
        """One bullet of the order message"""
        label = item.name
        if item.size:
            label += f" ({item.size})"
        if item.variant_index is not None:
            label += f" (v{item.variant_index + 1})"
        unit = format_price(item.unit_price)
        total = format_price(item.line_total)
        if item.has_discount:
            price_part = f"Qty: {item.quantity} × {unit} (was {format_price(item.price)}) = {total}"
        else:
            price_part = f"Qty: {item.quantity} × {unit} = {total}"
        return f"• {label}\n  {price_part}"

    @staticmethod
    def format_customer(customer: Customer) -> List[str]:
        lines = []
        if customer.name:
            lines.append(f"Name: *{customer.name}*")
        if customer.phone:
            lines.append(f"Phone: *{customer.phone}*")
        if customer.address:
            lines.append(f"Address: *{customer.address}*")
        if customer.notes:
            lines.append(f"Notes: {customer.notes}")
        return lines

    @staticmethod
    def format_order_message(store_name: str, items: List[CartItem], customer: Customer,
                             summary, method_label: str, promo: Optional[PromoCode] = None,
                             order_id: Optional[str] = None) -> str:
        """Pre-filled WhatsApp text for a checkout"""
        header = f"🛍️ *New Order — {store_name}*"
        if order_id:
            header += f"\nOrder ID: *{order_id}*"

        customer_lines = Messages.format_customer(customer)
        customer_block = "\n".join(customer_lines) + "\n\n" if customer_lines else ""
        items_text = "\n\n".join(Messages.format_cart_item(item) for item in items)

        promo_line = ""
        if promo is not None:
            promo_line = f"\nPromo: *{promo.code}* (-{format_price(summary.discount)})"

        return (
            f"{header}\n\n"
            f"{customer_block}{items_text}\n\n"
            f"{RULE}\n"
            f"Subtotal: *{format_price(summary.subtotal)}*{promo_line}\n"
            f"Delivery: *{method_label}* (+{format_price(summary.shipping)})\n"
            f"Total: *{format_price(summary.total)}*\n"
            f"{RULE}\n\n"
            f"Please confirm availability."
        )
