# src/catalog/image_meta.py
from typing import Any, Optional
from ..models.inventory import ImageMetaView
from ..models.product import PerImageStock, Product

def index_of(product: Optional[Product], image_url: Any) -> int:
    """Position of an image URL; unknown URLs map to the cover image"""
    if product is None:
        return 0
    url = str(image_url or "")
    try:
        return product.images.index(url)
    except ValueError:
        return 0

def meta_for(product: Optional[Product], image_index: Any) -> ImageMetaView:
    """Caption for one image: variant fields in per-image mode, else the side array"""
    try:
        idx = int(image_index or 0)
    except (TypeError, ValueError):
        idx = 0
    if product is None or idx < 0:
        return ImageMetaView(index=max(idx, 0))

    levels = product.stock.levels
    if isinstance(levels, PerImageStock):
        entries = levels.variants
    else:
        entries = product.stock.overrides.image_meta
    if idx >= len(entries):
        return ImageMetaView(index=idx)
    entry = entries[idx]
    return ImageMetaView(name=entry.name, description=entry.description, index=idx)
