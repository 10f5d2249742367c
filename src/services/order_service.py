# src/services/order_service.py
import logging
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from ..database.local_store import LocalStore
from ..models.order import Order, OrderStatus

class OrderService:
    """Orders written at checkout and managed from the admin"""

    ORDERS_KEY = "orders"

    def __init__(self, db=None, local: Optional[LocalStore] = None):
        self.db = db
        self.local = local or LocalStore()
        self.logger = logging.getLogger(__name__)

    @property
    def cloud(self) -> bool:
        return self.db is not None

    @staticmethod
    def _rows(value: Any) -> List[Dict[str, Any]]:
        return [r for r in value if isinstance(r, dict)] if isinstance(value, list) else []

    async def _read_local(self) -> List[Dict[str, Any]]:
        return self._rows(await self.local.get(self.ORDERS_KEY, []))

    async def create_order(self, order: Order) -> Dict[str, Any]:
        """Persist a new order; the id is generated client-side so no read-back is needed"""
        if not self.cloud:
            try:
                row = order.to_row()
                await self.local.update(
                    self.ORDERS_KEY, lambda rows: [row] + self._rows(rows), []
                )
            except OSError as e:
                self.logger.error(f"createOrder failed: {e}")
                return {"ok": False, "error": str(e) or "Failed to create order", "local": True}
            return {"ok": True, "id": order.id, "local": True}

        try:
            row = order.to_row()
            async with self.db.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO orders (
                        id, status, customer, items, promo_code, delivery_method,
                        notes, subtotal, discount, shipping, total
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                """,
                    order.id,
                    row['status'],
                    row['customer'],
                    row['items'],
                    order.promo_code,
                    order.delivery_method,
                    order.notes,
                    order.subtotal,
                    order.discount,
                    order.shipping,
                    order.total
                )
            self.logger.info(f"Order {order.id} created")
            return {"ok": True, "id": order.id}
        except Exception as e:
            self.logger.error(f"createOrder failed: {e}", exc_info=True)
            return {"ok": False, "error": str(e) or "Failed to create order"}

    async def fetch_orders(self) -> Dict[str, Any]:
        """All orders, newest first"""
        if not self.cloud:
            return {"ok": True, "orders": self._parse(await self._read_local()), "local": True}

        try:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT *
                    FROM orders
                    ORDER BY created_at DESC
                """)
            return {"ok": True, "orders": self._parse([dict(r) for r in rows])}
        except Exception as e:
            self.logger.error(f"Failed to load orders: {e}")
            return {"ok": False, "error": str(e) or "Failed to load orders", "orders": []}

    def _parse(self, rows: List[Dict[str, Any]]) -> List[Order]:
        orders = []
        for row in rows:
            data = dict(row)
            if data.get("id") is not None:
                data["id"] = str(data["id"])
            try:
                orders.append(Order.model_validate(data))
            except ValidationError as e:
                self.logger.warning(f"Skipping malformed order {data.get('id')}: {e}")
        return orders

    async def update_order_status(self, order_id: str, status: OrderStatus) -> Dict[str, Any]:
        status = OrderStatus(status)
        if not self.cloud:
            found = False

            def apply(value):
                nonlocal found
                rows = self._rows(value)
                for row in rows:
                    if str(row.get("id")) == str(order_id):
                        row["status"] = status.value
                        found = True
                return rows

            await self.local.update(self.ORDERS_KEY, apply, [])
            if not found:
                return {"ok": False, "error": "Order not found", "local": True}
            return {"ok": True, "local": True}

        try:
            async with self.db.pool.acquire() as conn:
                result = await conn.execute("""
                    UPDATE orders
                    SET status = $1
                    WHERE id = $2
                """, status.value, str(order_id))
            if result != "UPDATE 1":
                return {"ok": False, "error": "Order not found"}
            return {"ok": True}
        except Exception as e:
            self.logger.error(f"Failed to update order {order_id}: {e}")
            return {"ok": False, "error": str(e) or "Failed to update order"}

    async def delete_order(self, order_id: str) -> Dict[str, Any]:
        if not self.cloud:
            await self.local.update(
                self.ORDERS_KEY,
                lambda rows: [r for r in self._rows(rows) if str(r.get("id")) != str(order_id)],
                [],
            )
            return {"ok": True, "local": True}

        try:
            async with self.db.pool.acquire() as conn:
                await conn.execute("DELETE FROM orders WHERE id = $1", str(order_id))
            return {"ok": True}
        except Exception as e:
            self.logger.error(f"Failed to delete order {order_id}: {e}")
            return {"ok": False, "error": str(e) or "Failed to delete order"}
