import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from src.catalog.selector import build_cart_item
from src.models.order import Customer, Order, OrderItem, OrderStatus
from src.services.order_service import OrderService

def test_snapshot_captures_discounted_price(legacy_product, make_product, images):
    item = build_cart_item(legacy_product, "S", None)
    payload = OrderItem.from_cart_item(item).to_payload()
    assert payload == {
        "product_id": "p1",
        "name": "Crossbody",
        "price": 40,
        "quantity": 1,
        "size": "S",
        "variantIndex": None,
        "image": images[0],
    }

    # The catalog moves on; the snapshot does not
    make_product(price=80, stock={"S": 3})
    assert OrderItem.from_cart_item(item).to_payload()["price"] == 40

def test_order_item_accepts_wire_key():
    item = OrderItem.model_validate({
        "product_id": "p1", "price": "12.5", "quantity": 2, "variantIndex": 1,
    })
    assert item.variant_index == 1
    assert item.total_price == Decimal(25)

def test_unknown_status_reads_as_new():
    assert Order(status="shipped").status == OrderStatus.NEW
    assert Order(status="delivered").status == OrderStatus.DELIVERED

def test_order_row_roundtrip():
    order = Order(
        customer=Customer(name=" Ana ", phone="+1 555"),
        items=[OrderItem(product_id="p1", price=Decimal("19.5"), quantity=2)],
        subtotal="39", total=39,
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )
    restored = Order.model_validate(order.to_row())
    assert restored.id == order.id
    assert restored.customer.name == "Ana"
    assert restored.items[0].price == Decimal("19.5")
    assert restored.total == Decimal(39)
    assert restored.created_at == order.created_at
    assert restored.items_count == 1

async def test_local_order_lifecycle(store):
    service = OrderService(local=store)
    first = Order(customer=Customer(name="First"))
    second = Order(customer=Customer(name="Second"))
    assert (await service.create_order(first))["ok"]
    result = await service.create_order(second)
    assert result == {"ok": True, "id": second.id, "local": True}

    orders = (await service.fetch_orders())["orders"]
    assert [o.customer.name for o in orders] == ["Second", "First"]

    assert (await service.update_order_status(first.id, "preparing"))["ok"]
    assert not (await service.update_order_status("missing", OrderStatus.CANCELED))["ok"]
    orders = (await service.fetch_orders())["orders"]
    assert orders[1].status == OrderStatus.PREPARING

    await service.delete_order(second.id)
    orders = (await service.fetch_orders())["orders"]
    assert [o.id for o in orders] == [first.id]

async def test_malformed_orders_are_skipped(store):
    await store.set(OrderService.ORDERS_KEY, [{"id": "x", "items": "nope"}, "junk"])
    result = await OrderService(local=store).fetch_orders()
    assert result["ok"]
    assert result["orders"] == []

async def test_concurrent_orders_are_all_kept(store):
    service = OrderService(local=store)
    orders = [Order(customer=Customer(name=f"C{i}")) for i in range(5)]
    results = await asyncio.gather(*(service.create_order(o) for o in orders))
    assert all(r["ok"] for r in results)

    stored = (await service.fetch_orders())["orders"]
    assert sorted(o.id for o in stored) == sorted(o.id for o in orders)

async def test_concurrent_status_updates_and_deletes(store):
    service = OrderService(local=store)
    orders = [Order() for _ in range(4)]
    for order in orders:
        await service.create_order(order)

    await asyncio.gather(
        service.update_order_status(orders[0].id, OrderStatus.DELIVERED),
        service.update_order_status(orders[1].id, OrderStatus.CANCELED),
        service.delete_order(orders[2].id),
        service.delete_order(orders[3].id),
    )
    stored = {o.id: o.status for o in (await service.fetch_orders())["orders"]}
    assert stored == {
        orders[0].id: OrderStatus.DELIVERED,
        orders[1].id: OrderStatus.CANCELED,
    }
