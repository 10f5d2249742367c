# src/services/shipping_service.py
import logging
from decimal import Decimal
from typing import Any, Dict, Optional
from ..database.local_store import LocalStore
from ..models.shipping import ShippingMethod, ShippingSettings

DEFAULT_SETTINGS = ShippingSettings(
    methods=[
        ShippingMethod(code="pickup", label="Store pickup", fee=0),
        ShippingMethod(code="delivery", label="Home delivery", fee=5),
    ],
    free_threshold=None,
)

def default_method(settings: ShippingSettings) -> Optional[ShippingMethod]:
    """First active method, preselected at checkout"""
    for method in settings.methods:
        if method.active:
            return method
    return None

def find_method(settings: ShippingSettings, code: Optional[str]) -> Optional[ShippingMethod]:
    for method in settings.methods:
        if str(method.code) == str(code):
            return method
    return None

def shipping_fee(settings: Optional[ShippingSettings], method_code: Optional[str],
                 base_total: Decimal) -> Decimal:
    """Fee of the chosen method; free once the total reaches the threshold"""
    if settings is None:
        return Decimal(0)
    threshold = settings.free_threshold
    if threshold is not None and base_total >= threshold:
        return Decimal(0)
    method = find_method(settings, method_code)
    if method is None:
        return Decimal(0)
    return max(Decimal(0), method.fee)

class ShippingService:
    """Delivery methods and free-delivery threshold"""

    SHIPPING_KEY = "shipping_settings"

    def __init__(self, db=None, local: Optional[LocalStore] = None):
        self.db = db
        self.local = local or LocalStore()
        self.logger = logging.getLogger(__name__)

    @property
    def cloud(self) -> bool:
        return self.db is not None

    async def fetch_settings(self) -> Dict[str, Any]:
        if not self.cloud:
            raw = await self.local.get(self.SHIPPING_KEY)
            if not isinstance(raw, dict):
                return {"ok": True, "settings": DEFAULT_SETTINGS.model_copy(deep=True), "local": True}
            return {"ok": True, "settings": ShippingSettings.model_validate(raw), "local": True}

        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT methods, free_threshold
                    FROM shipping_settings
                    WHERE id = 1
                """)
            if row is None:
                return {"ok": True, "settings": ShippingSettings()}
            return {"ok": True, "settings": ShippingSettings.model_validate(dict(row))}
        except Exception as e:
            self.logger.error(f"Failed to load shipping settings: {e}")
            return {"ok": False, "error": str(e) or "Failed to load shipping settings"}

    async def save_settings(self, settings: ShippingSettings) -> Dict[str, Any]:
        payload = settings.model_dump(mode="json")
        if not self.cloud:
            await self.local.set(self.SHIPPING_KEY, payload)
            return {"ok": True, "local": True}

        try:
            async with self.db.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO shipping_settings (id, methods, free_threshold)
                    VALUES (1, $1, $2)
                    ON CONFLICT (id)
                    DO UPDATE SET methods = $1, free_threshold = $2
                """, payload["methods"], settings.free_threshold)
            return {"ok": True}
        except Exception as e:
            self.logger.error(f"Failed to save shipping settings: {e}")
            return {"ok": False, "error": str(e) or "Failed to save shipping settings"}
