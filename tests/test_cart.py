import json
from decimal import Decimal
import pytest
from src.catalog.selector import build_cart_item
from src.database.cart_storage import JsonFileCartStorage, MemoryCartStorage
from src.services.cart_service import CartLedger

class BrokenStorage(MemoryCartStorage):
    def save(self, items):
        raise OSError("disk full")

@pytest.fixture
def ledger():
    return CartLedger(MemoryCartStorage())

def test_identical_adds_merge(ledger, legacy_product):
    ledger.add_item(build_cart_item(legacy_product, "S", None))
    ledger.add_item(build_cart_item(legacy_product, "S", None))
    assert len(ledger) == 1
    assert ledger.items[0].quantity == 2
    assert ledger.total_quantity == 2
    assert ledger.storage.saves == 2

def test_different_image_is_a_new_line(ledger, per_image_product, images):
    ledger.add_item(build_cart_item(per_image_product, "M", 0, images[0]))
    ledger.add_item(build_cart_item(per_image_product, "M", 1, images[1]))
    assert len(ledger) == 2

def test_different_size_is_a_new_line(ledger, legacy_product):
    ledger.add_item(build_cart_item(legacy_product, "S", None))
    ledger.add_item(build_cart_item(legacy_product, "M", None))
    assert len(ledger) == 2

def test_add_with_quantity(ledger, legacy_product):
    ledger.add_item(build_cart_item(legacy_product, "S", None, quantity=2))
    merged = ledger.add_item(build_cart_item(legacy_product, "S", None, quantity=3))
    assert merged.quantity == 5

def test_update_quantity_sets_directly(ledger, legacy_product, images):
    ledger.add_item(build_cart_item(legacy_product, "S", None, quantity=2))
    item = ledger.update_quantity("p1", "S", 7, None, images[0])
    assert item.quantity == 7
    assert ledger.total_quantity == 7

@pytest.mark.parametrize("quantity", [0, -1])
def test_update_to_zero_removes(ledger, legacy_product, images, quantity):
    ledger.add_item(build_cart_item(legacy_product, "S", None))
    assert ledger.update_quantity("p1", "S", quantity, None, images[0]) is None
    assert ledger.items == []

def test_update_unknown_line(ledger):
    assert ledger.update_quantity("missing", "S", 3) is None
    assert ledger.storage.saves == 0

def test_remove_item(ledger, legacy_product, images):
    ledger.add_item(build_cart_item(legacy_product, "S", None))
    assert not ledger.remove_item("p1", "M", None, images[0])
    assert ledger.remove_item("p1", "S", None, images[0])
    assert len(ledger) == 0

def test_items_are_copies(ledger, legacy_product):
    ledger.add_item(build_cart_item(legacy_product, "S", None))
    ledger.items[0].quantity = 99
    assert ledger.total_quantity == 1

def test_subtotal_uses_unit_price(ledger, legacy_product):
    ledger.add_item(build_cart_item(legacy_product, "S", None, quantity=3))
    assert ledger.subtotal == Decimal("120.00")

def test_clear(ledger, legacy_product):
    ledger.add_item(build_cart_item(legacy_product, "S", None))
    ledger.clear()
    assert len(ledger) == 0
    assert ledger.storage.items == []

def test_failed_save_keeps_memory_state(legacy_product):
    ledger = CartLedger(BrokenStorage())
    ledger.add_item(build_cart_item(legacy_product, "S", None))
    assert ledger.total_quantity == 1

def test_cart_survives_reload(tmp_path, per_image_product, images):
    path = tmp_path / "cart.json"
    first = CartLedger(JsonFileCartStorage(path))
    first.add_item(build_cart_item(per_image_product, "M", 1, images[1], quantity=2))

    second = CartLedger(JsonFileCartStorage(path))
    item = second.items[0]
    assert item.quantity == 2
    assert item.variant_index == 1
    assert item.image == images[1]
    assert item.image_name == "Tan"
    assert list(tmp_path.glob("*.tmp")) == []

def test_unreadable_cart_file_loads_empty(tmp_path):
    path = tmp_path / "cart.json"
    path.write_text("{not json", encoding="utf-8")
    assert len(CartLedger(JsonFileCartStorage(path))) == 0

def test_invalid_rows_are_dropped(tmp_path):
    path = tmp_path / "cart.json"
    path.write_text(json.dumps([
        {"product_id": "p1", "size": "S", "quantity": 0},
        {"product_id": "p1", "size": "S", "quantity": 2},
        "junk",
    ]), encoding="utf-8")
    ledger = CartLedger(JsonFileCartStorage(path))
    assert len(ledger) == 1
    assert ledger.total_quantity == 2

def test_to_order_items(ledger, legacy_product):
    ledger.add_item(build_cart_item(legacy_product, "S", None, quantity=2))
    order_item = ledger.to_order_items()[0]
    assert order_item.price == Decimal(40)
    assert order_item.quantity == 2

@pytest.mark.parametrize("quantity", [0.5, "0", "abc"])
def test_update_below_one_removes(ledger, legacy_product, images, quantity):
    ledger.add_item(build_cart_item(legacy_product, "S", None, quantity=2))
    assert ledger.update_quantity("p1", "S", quantity, None, images[0]) is None
    assert ledger.items == []

def test_update_quantity_floors_fractions(ledger, legacy_product, images):
    ledger.add_item(build_cart_item(legacy_product, "S", None))
    assert ledger.update_quantity("p1", "S", 2.9, None, images[0]).quantity == 2
