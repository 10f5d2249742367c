from decimal import Decimal
from urllib.parse import unquote
import pytest
from src.catalog.selector import build_cart_item
from src.database.cart_storage import MemoryCartStorage
from src.models.order import Customer
from src.models.promo import PromoCode
from src.models.shipping import ShippingMethod, ShippingSettings
from src.services.cart_service import CartLedger
from src.services.checkout_service import (
    CheckoutError, CheckoutService, summarize, whatsapp_url
)
from src.services.order_service import OrderService

SETTINGS = ShippingSettings(
    methods=[ShippingMethod(code="delivery", label="Home delivery", fee=5)],
    free_threshold=150,
)

class FailingOrderService:
    async def create_order(self, order):
        return {"ok": False, "error": "connection refused"}

@pytest.fixture
def ledger(legacy_product, per_image_product, images):
    ledger = CartLedger(MemoryCartStorage())
    ledger.add_item(build_cart_item(legacy_product, "S", None, quantity=2))
    ledger.add_item(build_cart_item(per_image_product, "M", 1, images[1]))
    return ledger

def test_summarize(ledger):
    promo = PromoCode(code="TEN", value=10)
    summary = summarize(ledger.items, promo, SETTINGS, "delivery")
    # 2 x 40 (discounted) + 1 x 50
    assert summary.subtotal == Decimal("130.00")
    assert summary.discount == Decimal("13.00")
    assert summary.shipping == Decimal("5.00")
    assert summary.total == Decimal("122.00")

def test_summarize_free_shipping_over_threshold(ledger):
    summary = summarize(ledger.items * 2, None, SETTINGS, "delivery")
    assert summary.subtotal == Decimal("260.00")
    assert summary.shipping == Decimal(0)
    assert summary.total == Decimal("260.00")

def test_whatsapp_url():
    url = whatsapp_url("+1 (555) 010-0000", "Hi there & more")
    assert url == "https://wa.me/15550100000?text=Hi%20there%20%26%20more"

async def test_checkout_records_order(ledger, store):
    orders = OrderService(local=store)
    service = CheckoutService(orders, store_name="Baggo", whatsapp_number="+1 555 010 0000")
    customer = Customer(name="Ana", phone="555-1234", address="1 Main St")
    promo = PromoCode(code="TEN", value=10)

    result = await service.checkout(ledger, customer, promo, SETTINGS, "delivery")

    assert result.order_id == result.order.id
    assert result.url.startswith("https://wa.me/15550100000?text=")
    message = unquote(result.url.split("?text=", 1)[1])
    assert message == result.message
    assert f"Order ID: *{result.order_id}*" in message
    assert "Name: *Ana*" in message
    assert "Crossbody (S)" in message
    assert "(was $50)" in message
    assert "Crossbody (M) (v2)" in message
    assert "Promo: *TEN* (-$13)" in message
    assert "Delivery: *Home delivery* (+$5)" in message
    assert "Total: *$122*" in message

    stored = (await orders.fetch_orders())["orders"]
    assert len(stored) == 1
    order = stored[0]
    assert order.promo_code == "TEN"
    assert order.delivery_method == "delivery"
    assert order.total == Decimal(122)
    assert [(i.size, i.variant_index, i.price) for i in order.items] == [
        ("S", None, Decimal(40)),
        ("M", 1, Decimal(50)),
    ]

async def test_checkout_continues_when_order_insert_fails(ledger):
    service = CheckoutService(FailingOrderService(), whatsapp_number="15550100000")
    result = await service.checkout(ledger)
    assert result.order_id is None
    assert "Order ID" not in result.message
    assert "Delivery: *Delivery* (+$0)" in result.message

async def test_checkout_needs_whatsapp_number(ledger, store):
    service = CheckoutService(OrderService(local=store), whatsapp_number="")
    with pytest.raises(CheckoutError):
        await service.checkout(ledger)

async def test_checkout_needs_items(store):
    service = CheckoutService(OrderService(local=store), whatsapp_number="15550100000")
    with pytest.raises(CheckoutError):
        await service.checkout(CartLedger())
