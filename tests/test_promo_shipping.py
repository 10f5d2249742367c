import asyncio
from decimal import Decimal
import pytest
from src.models.promo import PromoCode, PromoType
from src.models.shipping import ShippingMethod, ShippingSettings
from src.services.promo_service import PromoService, compute_discount
from src.services.shipping_service import (
    DEFAULT_SETTINGS, ShippingService, default_method, find_method, shipping_fee
)

@pytest.mark.parametrize("promo, subtotal, expected", [
    (PromoCode(code="ten", value=10), Decimal(80), Decimal("8.00")),
    (PromoCode(code="third", value="33.333"), Decimal(10), Decimal("3.33")),
    (PromoCode(code="big", type="fixed", value=100), Decimal(30), Decimal(30)),
    (PromoCode(code="five", type="fixed", value=5), Decimal(30), Decimal(5)),
    (None, Decimal(30), Decimal(0)),
])
def test_compute_discount(promo, subtotal, expected):
    assert compute_discount(promo, subtotal) == expected

def test_promo_code_normalization():
    promo = PromoCode(code=" spring ", type="bogus", value=-2)
    assert promo.code == "SPRING"
    assert promo.type == PromoType.PERCENT
    assert promo.value == Decimal(0)

async def test_promo_lifecycle(store):
    service = PromoService(local=store)
    saved = await service.save_promo_code("spring", "percent", "15")
    assert saved.code == "SPRING"

    result = await service.validate_promo_code(" spring ", Decimal(200))
    assert result["ok"]
    assert result["promo"].code == "SPRING"
    assert result["discount"] == Decimal(30)

    await service.save_promo_code("SPRING", "fixed", 10, active=False)
    assert len(await service.list_promo_codes()) == 1
    result = await service.validate_promo_code("spring", Decimal(200))
    assert result == {"ok": False, "error": "Invalid promo code"}

    assert await service.delete_promo_code("spring")
    assert not await service.delete_promo_code("spring")
    assert await service.get_promo_code("spring") is None

async def test_promo_validation_errors(store):
    service = PromoService(local=store)
    assert (await service.validate_promo_code("  ", Decimal(10)))["error"] == "Enter a promo code"
    assert (await service.validate_promo_code("nope", Decimal(10)))["error"] == "Invalid promo code"
    with pytest.raises(ValueError):
        await service.save_promo_code("zero", "percent", 0)
    with pytest.raises(ValueError):
        await service.save_promo_code("   ", "percent", 10)

SETTINGS = ShippingSettings(
    methods=[
        ShippingMethod(code="pickup", label="Pickup", fee=0, active=False),
        ShippingMethod(code="courier", label="Courier", fee="7.5"),
    ],
    free_threshold=100,
)

def test_shipping_fee():
    assert shipping_fee(SETTINGS, "courier", Decimal(50)) == Decimal("7.5")
    assert shipping_fee(SETTINGS, "courier", Decimal(100)) == Decimal(0)
    assert shipping_fee(SETTINGS, "unknown", Decimal(50)) == Decimal(0)
    assert shipping_fee(None, "courier", Decimal(50)) == Decimal(0)

def test_method_lookup():
    assert default_method(SETTINGS).code == "courier"
    assert find_method(SETTINGS, "pickup").label == "Pickup"
    assert find_method(SETTINGS, "drone") is None
    assert default_method(ShippingSettings()) is None

async def test_shipping_settings_roundtrip(store):
    service = ShippingService(local=store)
    result = await service.fetch_settings()
    assert result["settings"] == DEFAULT_SETTINGS

    assert (await service.save_settings(SETTINGS))["ok"]
    settings = (await service.fetch_settings())["settings"]
    assert settings.free_threshold == Decimal(100)
    assert [m.code for m in settings.methods] == ["pickup", "courier"]
    assert settings.methods[1].fee == Decimal("7.5")

async def test_concurrent_promo_saves_are_all_kept(store):
    service = PromoService(local=store)
    await asyncio.gather(*(service.save_promo_code(f"code{i}", "fixed", i + 1) for i in range(5)))
    codes = sorted(p.code for p in await service.list_promo_codes())
    assert codes == [f"CODE{i}" for i in range(5)]
