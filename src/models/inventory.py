# src/models/inventory.py
from typing import Optional
from pydantic import BaseModel

class QuickPick(BaseModel):
    """Size/variant/image chosen for a one-tap add"""
    size: Optional[str] = None
    variant_index: Optional[int] = None
    image: str = ""

class StockEntry(BaseModel):
    """One inventory row: a size, or a (variant, size) pair in per-image mode"""
    size: str
    qty: int
    variant_index: Optional[int] = None
    variant_name: Optional[str] = None
    image: str = ""

class ImageMetaView(BaseModel):
    """Caption of one product image, never None"""
    name: str = ""
    description: str = ""
    index: int = 0
