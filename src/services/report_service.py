# src/services/report_service.py
from typing import Any, Dict, List, Optional
from datetime import datetime, timedelta
import io
import pytz
import pandas as pd
from ..catalog.stock import list_entries
from ..config import Config
from ..models.order import Order, OrderStatus
from ..models.product import Product

EXPORT_COLUMNS = [
    "id", "status", "created_at", "customer_name", "customer_phone",
    "delivery_method", "promo_code", "subtotal", "discount", "shipping",
    "total", "items_count",
]

class ReportService:
    """Admin reports: low stock, order filters and exports"""

    PERIODS = ("all", "today", "week", "month")

    def __init__(self, timezone: Optional[str] = None):
        self.tz = pytz.timezone(timezone or Config.TIMEZONE)

    @staticmethod
    def low_stock_rows(products: List[Product], threshold: int = 0) -> List[Dict[str, Any]]:
        """Inventory rows at or under the threshold, lowest first"""
        rows = []
        for product in products:
            for entry in list_entries(product):
                if entry.qty <= threshold:
                    rows.append({
                        "product_id": product.id,
                        "product_name": product.name,
                        "category": product.category,
                        "image": entry.image,
                        "variant_index": entry.variant_index,
                        "variant_name": entry.variant_name,
                        "size": entry.size,
                        "qty": entry.qty,
                    })
        rows.sort(key=lambda r: r["qty"])
        return rows

    @staticmethod
    def order_status_counts(orders: List[Order]) -> Dict[str, int]:
        counts = {"all": 0}
        counts.update({status.value: 0 for status in OrderStatus})
        for order in orders:
            counts["all"] += 1
            counts[order.status.value] += 1
        return counts

    def _period_start(self, period: str, now: datetime) -> Optional[datetime]:
        midnight = now.astimezone(self.tz).replace(
            hour=0, minute=0, second=0, microsecond=0, tzinfo=None
        )
        if period == "today":
            start = midnight
        elif period == "week":
            start = midnight - timedelta(days=6)
        elif period == "month":
            start = midnight.replace(day=1)
        else:
            return None
        return self.tz.localize(start)

    def filter_orders(self, orders: List[Order], status: str = "all", period: str = "all",
                      query: str = "", now: Optional[datetime] = None) -> List[Order]:
        """Orders matching a status, a time window and a free-text query"""
        q = str(query or "").strip().lower()
        now = now or datetime.now(pytz.utc)
        start = self._period_start(period, now)

        result = []
        for order in orders:
            if status != "all" and order.status.value != status:
                continue
            if start is not None:
                created = order.created_at
                if created.tzinfo is None:
                    created = pytz.utc.localize(created)
                if created < start:
                    continue
            if q:
                haystack = " ".join(
                    str(v) for v in (
                        order.id,
                        order.status.value,
                        order.promo_code,
                        order.delivery_method,
                        order.customer.name,
                        order.customer.phone,
                        order.customer.address,
                    ) if v
                ).lower()
                if q not in haystack:
                    continue
            result.append(order)
        return result

    @staticmethod
    def _orders_frame(orders: List[Order]) -> pd.DataFrame:
        records = [{
            "id": order.id,
            "status": order.status.value,
            "created_at": order.created_at.isoformat(),
            "customer_name": order.customer.name,
            "customer_phone": order.customer.phone,
            "delivery_method": order.delivery_method,
            "promo_code": order.promo_code,
            "subtotal": float(order.subtotal),
            "discount": float(order.discount),
            "shipping": float(order.shipping),
            "total": float(order.total),
            "items_count": order.items_count,
        } for order in orders]
        return pd.DataFrame(records, columns=EXPORT_COLUMNS)

    def export_orders_csv(self, orders: List[Order]) -> str:
        return self._orders_frame(orders).to_csv(index=False)

    def export_orders_excel(self, orders: List[Order]) -> bytes:
        """Orders sheet plus a status summary sheet"""
        output = io.BytesIO()
        counts = self.order_status_counts(orders)
        with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
            self._orders_frame(orders).to_excel(writer, sheet_name='Orders', index=False)
            summary = pd.DataFrame({
                'Status': list(counts.keys()),
                'Orders': list(counts.values()),
            })
            summary.to_excel(writer, sheet_name='Summary', index=False)
        return output.getvalue()
