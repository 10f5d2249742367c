# main.py
import argparse
import asyncio
import logging
from pathlib import Path
from src.catalog.stock import list_entries
from src.config import Config, setup_logging
from src.database.database import Database
from src.database.local_store import LocalStore
from src.services.catalog_service import CatalogService
from src.services.order_service import OrderService
from src.services.report_service import ReportService
from src.utils.formatters import format_datetime, format_price

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="baggo", description=f"{Config.SITE_NAME} store tools")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("inventory", help="List stock per product, size and variant")

    low = sub.add_parser("low-stock", help="List inventory rows at or under a threshold")
    low.add_argument("--threshold", type=int, default=0)

    orders = sub.add_parser("orders", help="List orders, newest first")
    orders.add_argument("--status", default="all")
    orders.add_argument("--period", default="all", choices=ReportService.PERIODS)
    orders.add_argument("--query", default="")

    export = sub.add_parser("export-orders", help="Export orders to .csv or .xlsx")
    export.add_argument("path")
    return parser

async def run(args, catalog: CatalogService, orders: OrderService):
    reports = ReportService()

    if args.command == "inventory":
        for product in await catalog.list_products(include_hidden=True):
            print(f"{product.name} ({product.id}) {format_price(product.price)}")
            for entry in list_entries(product):
                variant = f" [{entry.variant_name}]" if entry.variant_name else ""
                print(f"  {entry.size}{variant}: {entry.qty}")
        return

    if args.command == "low-stock":
        rows = reports.low_stock_rows(
            await catalog.list_products(include_hidden=True), args.threshold
        )
        if not rows:
            print("Nothing at or under the threshold")
        for row in rows:
            variant = f" [{row['variant_name']}]" if row["variant_name"] else ""
            print(f"{row['qty']:>4}  {row['product_name']} {row['size']}{variant}")
        return

    result = await orders.fetch_orders()
    if not result["ok"]:
        raise RuntimeError(result["error"])

    if args.command == "orders":
        selected = reports.filter_orders(result["orders"], args.status, args.period, args.query)
        for order in selected:
            print(
                f"{format_datetime(order.created_at)}  {order.status.value:<9}  "
                f"{format_price(order.total):>10}  {order.customer.name or '-'}  {order.id}"
            )
        counts = reports.order_status_counts(selected)
        print(", ".join(f"{k}: {v}" for k, v in counts.items()))
        return

    if args.command == "export-orders":
        path = Path(args.path)
        if path.suffix.lower() == ".xlsx":
            path.write_bytes(reports.export_orders_excel(result["orders"]))
        else:
            path.write_text(reports.export_orders_csv(result["orders"]), encoding="utf-8")
        print(f"Exported {len(result['orders'])} orders to {path}")

async def main(argv=None):
    setup_logging()
    logger = logging.getLogger(__name__)
    args = build_parser().parse_args(argv)

    db = Database() if Config.CLOUD_MODE else None
    local = LocalStore()
    try:
        if db:
            await db.connect()
        logger.info(f"Running {args.command} ({'cloud' if db else 'demo'} mode)")
        await run(args, CatalogService(db, local), OrderService(db, local))
    except Exception as e:
        logger.error(f"Command {args.command} failed: {e}", exc_info=True)
        raise
    finally:
        if db:
            await db.close()

if __name__ == "__main__":
    asyncio.run(main())
