# src/catalog/stock.py
"""Stock queries over both stock encodings.

Legacy stock is one size -> quantity pool for the whole product. Per-image
stock keeps one pool per image (variant); a size missing from a variant falls
back to variant 0, which acts as the base pool.
"""
from typing import Any, Dict, List, Optional
from ..models.inventory import QuickPick, StockEntry
from ..models.product import (
    LegacyStock, MODE_KEY, PER_IMAGE_MODE, PerImageStock, Product, StockRecord
)
from ..utils.parsing import to_int

def is_per_image_stock(stock: Any) -> bool:
    """True for the per-image variant encoding, parsed or raw"""
    if isinstance(stock, StockRecord):
        return stock.is_per_image
    if isinstance(stock, PerImageStock):
        return True
    if isinstance(stock, dict):
        return stock.get(MODE_KEY) == PER_IMAGE_MODE and isinstance(stock.get("variants"), list)
    return False

def _clean_size(size: Any) -> str:
    return str(size or "").strip()

def _variant_value(levels: PerImageStock, variant_index: int, size: str) -> int:
    variants = levels.variants
    if not variants:
        return 0
    current = variants[variant_index] if 0 <= variant_index < len(variants) else None
    if current is not None and size in current.stock:
        return current.stock[size]
    return variants[0].stock.get(size, 0)

def quantity_for(product: Optional[Product], size: Any, variant_index: Optional[int] = None) -> int:
    """Units available for a size (and variant, in per-image mode)"""
    if product is None:
        return 0
    s = _clean_size(size)
    if not s:
        return 0
    levels = product.stock.levels
    if isinstance(levels, LegacyStock):
        return levels.quantities.get(s, 0)
    return _variant_value(levels, to_int(variant_index), s)

def total_quantity_for_size(product: Optional[Product], size: Any) -> int:
    """Units of a size across every variant.

    Each variant applies the variant-0 fallback on its own, so variants that
    leave a size undefined all count the base quantity.
    """
    if product is None:
        return 0
    s = _clean_size(size)
    if not s:
        return 0
    levels = product.stock.levels
    if isinstance(levels, LegacyStock):
        return levels.quantities.get(s, 0)
    return sum(_variant_value(levels, vi, s) for vi in range(len(levels.variants)))

def has_any_stock(product: Optional[Product]) -> bool:
    if product is None:
        return False
    if not product.sizes:
        return True
    return any(total_quantity_for_size(product, s) > 0 for s in product.sizes)

def total_stock(product: Optional[Product]) -> int:
    """All units across sizes and variants (low-stock badges)"""
    if product is None or not product.sizes:
        return 0
    return sum(total_quantity_for_size(product, s) for s in product.sizes)

def variant_stock_map(product: Optional[Product], variant_index: Optional[int] = None) -> Dict[str, int]:
    """Effective size map for one variant: base pool overlaid with the variant's own"""
    if product is None:
        return {}
    levels = product.stock.levels
    if isinstance(levels, LegacyStock):
        return dict(levels.quantities)
    variants = levels.variants
    if not variants:
        return {}
    idx = to_int(variant_index)
    merged = dict(variants[0].stock)
    if 0 <= idx < len(variants):
        merged.update(variants[idx].stock)
    return merged

def _image_at(product: Product, index: int) -> str:
    images = product.images
    if 0 <= index < len(images):
        return images[index]
    return product.image

def pick_first_in_stock(product: Optional[Product]) -> QuickPick:
    """Quick-add target, scanning sizes first and variants second"""
    if product is None:
        return QuickPick()
    sizes = product.sizes
    if not sizes:
        return QuickPick(size=None, variant_index=None, image=product.image)

    levels = product.stock.levels
    if isinstance(levels, PerImageStock):
        for s in sizes:
            for vi in range(len(levels.variants)):
                if _variant_value(levels, vi, s) > 0:
                    return QuickPick(size=s, variant_index=vi, image=_image_at(product, vi))
        return QuickPick(size=sizes[0], variant_index=0, image=product.image)

    for s in sizes:
        if levels.quantities.get(s, 0) > 0:
            return QuickPick(size=s, variant_index=None, image=product.image)
    return QuickPick(size=sizes[0], variant_index=None, image=product.image)

def list_entries(product: Optional[Product]) -> List[StockEntry]:
    """Inventory rows for admin views"""
    if product is None or not product.sizes:
        return []

    levels = product.stock.levels
    if isinstance(levels, PerImageStock):
        rows = []
        for vi, variant in enumerate(levels.variants):
            variant_name = variant.name.strip() or f"Variant {vi + 1}"
            for s in product.sizes:
                rows.append(StockEntry(
                    size=s,
                    qty=_variant_value(levels, vi, s),
                    variant_index=vi,
                    variant_name=variant_name,
                    image=_image_at(product, vi),
                ))
        return rows

    return [
        StockEntry(size=s, qty=levels.quantities.get(s, 0), image=product.image)
        for s in product.sizes
    ]

def clamp_quantity(product: Optional[Product], size: Any, variant_index: Optional[int],
                   quantity: int) -> int:
    """Cap a requested cart quantity at live stock.

    A zero reading (no size, or stock unknown) leaves the quantity alone; the
    ledger is not an inventory authority.
    """
    available = quantity_for(product, size, variant_index)
    if available > 0:
        return min(quantity, available)
    return quantity
