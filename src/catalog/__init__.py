"""Stock, pricing, image metadata and variant selection for catalog products"""
from .image_meta import index_of, meta_for
from .pricing import base_price, discount_price, has_discount, line_total, money, unit_price
from .selector import VariantSelector, build_cart_item, quick_add_item
from .stock import (
    clamp_quantity,
    has_any_stock,
    is_per_image_stock,
    list_entries,
    pick_first_in_stock,
    quantity_for,
    total_quantity_for_size,
    total_stock,
    variant_stock_map,
)

__all__ = [
    'index_of',
    'meta_for',
    'base_price',
    'discount_price',
    'has_discount',
    'line_total',
    'money',
    'unit_price',
    'VariantSelector',
    'build_cart_item',
    'quick_add_item',
    'clamp_quantity',
    'has_any_stock',
    'is_per_image_stock',
    'list_entries',
    'pick_first_in_stock',
    'quantity_for',
    'total_quantity_for_size',
    'total_stock',
    'variant_stock_map',
]
