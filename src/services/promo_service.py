# src/services/promo_service.py
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional
from ..catalog.pricing import money
from ..database.local_store import LocalStore
from ..models.promo import PromoCode, PromoType
from ..utils.parsing import to_decimal

def compute_discount(promo: Optional[PromoCode], subtotal: Decimal) -> Decimal:
    """Promo amount off the subtotal, never more than the subtotal itself"""
    if promo is None:
        return Decimal(0)
    if promo.type == PromoType.FIXED:
        amount = promo.value
    else:
        amount = subtotal * promo.value / 100
    return money(max(Decimal(0), min(subtotal, amount)))

class PromoService:
    """Promo codes (cloud table, or a list in the demo store)"""

    PROMOS_KEY = "promo_codes"

    def __init__(self, db=None, local: Optional[LocalStore] = None):
        self.db = db
        self.local = local or LocalStore()
        self.logger = logging.getLogger(__name__)

    @property
    def cloud(self) -> bool:
        return self.db is not None

    async def list_promo_codes(self) -> List[PromoCode]:
        if self.cloud:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT code, type, value, active
                    FROM promo_codes
                    ORDER BY code
                """)
            return [PromoCode.model_validate(dict(r)) for r in rows]
        return self._parse(await self.local.get(self.PROMOS_KEY, []))

    @staticmethod
    def _parse(rows: Any) -> List[PromoCode]:
        if not isinstance(rows, list):
            return []
        return [PromoCode.model_validate(r) for r in rows if isinstance(r, dict)]

    async def get_promo_code(self, code: str) -> Optional[PromoCode]:
        wanted = str(code or "").strip().upper()
        if self.cloud:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT code, type, value, active
                    FROM promo_codes
                    WHERE code = $1
                """, wanted)
            return PromoCode.model_validate(dict(row)) if row else None
        for promo in await self.list_promo_codes():
            if promo.code == wanted:
                return promo
        return None

    async def save_promo_code(self, code: str, type: str = PromoType.PERCENT.value,
                              value: Any = 10, active: bool = True) -> PromoCode:
        """Create or replace a promo code"""
        amount = to_decimal(value)
        if amount is None or amount <= 0:
            raise ValueError("Promo value must be a positive number")
        promo = PromoCode(code=code, type=type, value=amount, active=active)
        if not promo.code:
            raise ValueError("Promo code is required")

        if self.cloud:
            async with self.db.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO promo_codes (code, type, value, active)
                    VALUES ($1, $2, $3, $4)
                    ON CONFLICT (code)
                    DO UPDATE SET type = $2, value = $3, active = $4
                """, promo.code, promo.type.value, promo.value, promo.active)
            return promo

        def apply(rows):
            promos = [p for p in self._parse(rows) if p.code != promo.code]
            promos.append(promo)
            return [p.model_dump(mode="json") for p in promos]

        await self.local.update(self.PROMOS_KEY, apply, [])
        return promo

    async def delete_promo_code(self, code: str) -> bool:
        wanted = str(code or "").strip().upper()
        if self.cloud:
            async with self.db.pool.acquire() as conn:
                result = await conn.execute("DELETE FROM promo_codes WHERE code = $1", wanted)
            return result == "DELETE 1"
        removed = False

        def apply(rows):
            nonlocal removed
            promos = self._parse(rows)
            kept = [p for p in promos if p.code != wanted]
            removed = len(kept) < len(promos)
            return [p.model_dump(mode="json") for p in kept]

        await self.local.update(self.PROMOS_KEY, apply, [])
        return removed

    async def validate_promo_code(self, code: str, subtotal: Decimal) -> Dict[str, Any]:
        """Look up a code typed at checkout"""
        wanted = str(code or "").strip()
        if not wanted:
            return {"ok": False, "error": "Enter a promo code"}
        try:
            promo = await self.get_promo_code(wanted)
        except Exception as e:
            self.logger.error(f"Promo lookup failed: {e}")
            return {"ok": False, "error": "Failed to apply code"}
        if promo is None or not promo.active:
            return {"ok": False, "error": "Invalid promo code"}
        return {"ok": True, "promo": promo, "discount": compute_discount(promo, subtotal)}
