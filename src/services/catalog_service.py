# src/services/catalog_service.py
import json
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional
from ..config import Config
from ..database.local_store import LocalStore
from ..models.category import Category
from ..models.product import (
    DISCOUNT_PRICE_KEY, IMAGE_META_KEY, MODE_KEY, PER_IMAGE_MODE, Product
)
from ..utils.parsing import json_number, split_list, to_decimal, to_price, unique

PREFERRED_CATEGORIES = ("bags", "accessories")

def title_case(slug: str) -> str:
    s = str(slug or "").strip()
    return s[:1].upper() + s[1:]

def derive_categories(products: List[Product]) -> List[Category]:
    """Categories implied by the products, preferred slugs first"""
    slugs = unique(p.category.strip() for p in products if p.category.strip())

    def sort_key(slug: str):
        if slug in PREFERRED_CATEGORIES:
            return (0, PREFERRED_CATEGORIES.index(slug), "")
        return (1, 0, slug)

    slugs.sort(key=sort_key)
    return [
        Category(id=slug, slug=slug, label=title_case(slug), visible=True, sort_order=i)
        for i, slug in enumerate(slugs)
    ]

def _sync_image_meta(stock: Dict[str, Any], length: int) -> Dict[str, Any]:
    """Pad or trim per-image variants / image captions to the image count"""
    if stock.get(MODE_KEY) == PER_IMAGE_MODE and isinstance(stock.get("variants"), list):
        variants = list(stock["variants"])[:length]
        while len(variants) < length:
            variants.append({"name": "", "description": "", "stock": {}})
        stock["variants"] = variants
        return stock
    meta = stock.get(IMAGE_META_KEY)
    meta = list(meta)[:length] if isinstance(meta, list) else []
    while len(meta) < length:
        meta.append({"name": "", "description": ""})
    stock[IMAGE_META_KEY] = meta
    return stock

def normalize_product_input(data: Dict[str, Any]) -> Dict[str, Any]:
    """Clean an admin form payload into a product document"""
    clean = dict(data or {})
    clean["name"] = str(clean.get("name") or "").strip()
    clean["category"] = str(clean.get("category") or "").strip().lower()
    price = to_price(clean.get("price"))
    clean["price"] = json_number(price)
    clean["featured"] = bool(clean.get("featured"))
    clean["visible"] = clean.get("visible") is not False

    images = split_list(clean.get("images"), "\n")
    sizes = unique(split_list(clean.get("sizes"), ","))
    clean["images"] = images
    clean["sizes"] = sizes

    raw_stock = clean.get("stock")
    stock = dict(raw_stock) if isinstance(raw_stock, dict) else {}
    if stock.get(MODE_KEY) != PER_IMAGE_MODE:
        for size in sizes:
            qty = to_decimal(stock.get(size))
            stock[size] = json_number(qty) if qty is not None else 0

    # The discount rides inside the stock blob; only a real markdown is kept
    if "discount_price" in clean:
        discount = to_decimal(clean.pop("discount_price"))
        if discount is not None and 0 < discount < price:
            stock[DISCOUNT_PRICE_KEY] = json_number(discount)
        else:
            stock.pop(DISCOUNT_PRICE_KEY, None)

    if images:
        stock = _sync_image_meta(stock, len(images))
    clean["stock"] = stock
    clean.pop("image", None)
    return clean

class CatalogService:
    """Products and categories, from the demo store or Postgres"""

    STORE_KEY = "store"

    def __init__(self, db=None, local: Optional[LocalStore] = None):
        self.db = db
        self.local = local or LocalStore()
        self.logger = logging.getLogger(__name__)

    @property
    def cloud(self) -> bool:
        return self.db is not None

    def _prepare(self, data: Any) -> Dict[str, Any]:
        """Fill an empty demo store from the seed file and derive its categories"""
        if not isinstance(data, dict):
            data = {}
        products = data.get("products")
        if not isinstance(products, list) or not products:
            data["products"] = self._seed_products()
        categories = data.get("categories")
        if not isinstance(categories, list) or not categories:
            data["categories"] = [
                c.model_dump() for c in derive_categories(
                    [Product.from_row(p) for p in data["products"]]
                )
            ]
        return data

    def _seed_products(self) -> List[Dict[str, Any]]:
        if not Config.SEED_FILE.exists():
            return []
        try:
            with open(Config.SEED_FILE, encoding="utf-8") as f:
                rows = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not read seed file {Config.SEED_FILE}: {e}")
            return []
        return [row for row in rows if isinstance(row, dict)] if isinstance(rows, list) else []

    async def _load_local(self) -> Dict[str, Any]:
        return self._prepare(await self.local.get(self.STORE_KEY))

    async def _update_local(self, fn: Callable[[Dict[str, Any]], Dict[str, Any]]):
        """Apply `fn` to the demo store while holding the store lock"""
        await self.local.update(self.STORE_KEY, lambda data: fn(self._prepare(data)))

    async def list_products(self, category: Optional[str] = None,
                            include_hidden: bool = False) -> List[Product]:
        """Products, newest first in cloud mode and in stored order in demo mode"""
        if self.cloud:
            async with self.db.pool.acquire() as conn:
                if category:
                    rows = await conn.fetch("""
                        SELECT * FROM products
                        WHERE category_slug = $1
                        ORDER BY created_at DESC
                    """, category)
                else:
                    rows = await conn.fetch("""
                        SELECT * FROM products
                        ORDER BY created_at DESC
                    """)
            products = [Product.from_row(dict(row)) for row in rows]
        else:
            data = await self._load_local()
            products = [Product.from_row(row) for row in data["products"]]
            if category:
                products = [p for p in products if p.category == category]
        if not include_hidden:
            products = [p for p in products if p.visible]
        return products

    async def get_product(self, product_id: str) -> Optional[Product]:
        if self.cloud:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("SELECT * FROM products WHERE id = $1", str(product_id))
            return Product.from_row(dict(row)) if row else None
        data = await self._load_local()
        for row in data["products"]:
            if str(row.get("id")) == str(product_id):
                return Product.from_row(row)
        return None

    async def upsert_product(self, product_data: Dict[str, Any]) -> Product:
        """Create or update a product from admin input"""
        clean = normalize_product_input(product_data)
        product_id = str(clean.get("id") or "").strip()

        if self.cloud:
            draft = Product.model_validate(clean)
            row = draft.to_row()
            price = draft.price
            async with self.db.pool.acquire() as conn:
                if product_id:
                    saved = await conn.fetchrow("""
                        UPDATE products
                        SET name = $1, description = $2, category_slug = $3, price = $4,
                            featured = $5, visible = $6, images = $7, sizes = $8, stock = $9
                        WHERE id = $10
                        RETURNING *
                    """, row['name'], row['description'], row['category_slug'], price,
                        row['featured'], row['visible'], row['images'], row['sizes'],
                        row['stock'], product_id)
                    if saved is None:
                        raise LookupError(f"Product {product_id} not found")
                else:
                    saved = await conn.fetchrow("""
                        INSERT INTO products (
                            name, description, category_slug, price,
                            featured, visible, images, sizes, stock
                        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                        RETURNING *
                    """, row['name'], row['description'], row['category_slug'], price,
                        row['featured'], row['visible'], row['images'], row['sizes'],
                        row['stock'])
            product = Product.from_row(dict(saved))
            self.logger.info(f"Saved product {product.id}")
            return product

        product = None

        def apply(data):
            nonlocal product
            products = data["products"]
            for i, row in enumerate(products):
                if product_id and str(row.get("id")) == product_id:
                    merged = {**Product.from_row(row).model_dump(), **clean, "id": product_id}
                    product = Product.model_validate(merged)
                    products[i] = product.to_row()
                    break
            else:
                product = Product.model_validate(
                    {**clean, "id": f"local-{uuid.uuid4().hex[:12]}"}
                )
                products.append(product.to_row())
            return data

        await self._update_local(apply)
        self.logger.info(f"Saved product {product.id}")
        return product

    async def delete_product(self, product_id: str) -> bool:
        if self.cloud:
            async with self.db.pool.acquire() as conn:
                result = await conn.execute("DELETE FROM products WHERE id = $1", str(product_id))
            return result == "DELETE 1"
        removed = False

        def apply(data):
            nonlocal removed
            kept = [p for p in data["products"] if str(p.get("id")) != str(product_id)]
            removed = len(kept) < len(data["products"])
            data["products"] = kept
            return data

        await self._update_local(apply)
        return removed

    async def list_categories(self, include_hidden: bool = True) -> List[Category]:
        if self.cloud:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT id, slug, label, visible, sort_order
                    FROM categories
                    ORDER BY sort_order
                """)
            categories = [Category.model_validate(dict(row)) for row in rows]
        else:
            data = await self._load_local()
            categories = [Category.model_validate(c) for c in data["categories"]]
        if not include_hidden:
            categories = [c for c in categories if c.visible]
        return categories

    async def category_label(self, slug: str) -> str:
        """Display label for a product's category slug"""
        for category in await self.list_categories():
            if category.slug == slug:
                return category.label
        return title_case(slug)

    async def upsert_category(self, slug: str, label: str, visible: bool = True,
                              sort_order: int = 0) -> Category:
        category = Category(slug=slug, label=label, visible=visible, sort_order=sort_order)
        if not category.slug or not category.label:
            raise ValueError("Category slug and label are required")

        if self.cloud:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO categories (slug, label, visible, sort_order)
                    VALUES ($1, $2, $3, $4)
                    ON CONFLICT (slug)
                    DO UPDATE SET label = $2, visible = $3, sort_order = $4
                    RETURNING id, slug, label, visible, sort_order
                """, category.slug, category.label, category.visible, category.sort_order)
            return Category.model_validate(dict(row))

        category.id = category.slug

        def apply(data):
            categories = data["categories"]
            for i, existing in enumerate(categories):
                if existing.get("slug") == category.slug:
                    categories[i] = {**existing, **category.model_dump()}
                    break
            else:
                categories.append(category.model_dump())
            return data

        await self._update_local(apply)
        return category

    async def delete_category(self, slug: str) -> bool:
        """Delete a category together with its products"""
        s = str(slug or "").strip().lower()
        if not s:
            return False

        if self.cloud:
            async with self.db.pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute("DELETE FROM products WHERE category_slug = $1", s)
                    result = await conn.execute("DELETE FROM categories WHERE slug = $1", s)
            self.logger.info(f"Deleted category {s}")
            return result == "DELETE 1"

        removed = False

        def apply(data):
            nonlocal removed
            data["products"] = [
                p for p in data["products"] if Product.from_row(p).category != s
            ]
            kept = [c for c in data["categories"] if c.get("slug") != s]
            removed = len(kept) < len(data["categories"])
            data["categories"] = kept
            return data

        await self._update_local(apply)
        self.logger.info(f"Deleted category {s}")
        return removed
