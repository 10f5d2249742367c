# src/models/product.py
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from ..utils.parsing import (
    json_number, split_list, to_decimal, to_int, to_price, to_text, unique
)

# Keys of the persisted stock blob that are not size quantities
MODE_KEY = "__mode"
PER_IMAGE_MODE = "per_image"
DISCOUNT_PRICE_KEY = "__discount_price"
IMAGE_META_KEY = "__image_meta"

class Variant(BaseModel):
    """One image-aligned stock bucket in per-image mode"""
    name: str = ""
    description: str = ""
    # Sizes without an explicit value are absent so variant 0 can fill them in
    stock: Dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> "Variant":
        if not isinstance(raw, dict):
            return cls()
        raw_stock = raw.get("stock")
        stock = {}
        if isinstance(raw_stock, dict):
            for size, qty in raw_stock.items():
                if qty is None or qty == "":
                    continue
                stock[str(size)] = to_int(qty)
        return cls(
            name=to_text(raw.get("name")),
            description=to_text(raw.get("description")),
            stock=stock,
        )

    def to_raw(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "stock": dict(self.stock)}

class LegacyStock(BaseModel):
    """Flat size -> quantity pool shared by every image"""
    mode: Literal["legacy"] = "legacy"
    quantities: Dict[str, int] = Field(default_factory=dict)

class PerImageStock(BaseModel):
    """variants[i] holds the stock of images[i]"""
    mode: Literal["per_image"] = PER_IMAGE_MODE
    variants: List[Variant] = Field(default_factory=list)

StockLevels = Annotated[Union[LegacyStock, PerImageStock], Field(discriminator="mode")]

class ImageMeta(BaseModel):
    name: str = ""
    description: str = ""

class StockOverrides(BaseModel):
    """Side-channel values stored inside the stock blob.

    The products table has no discount or image caption columns, so these ride
    along in the same JSON document as the quantities.
    """
    discount_price: Optional[Decimal] = None
    image_meta: List[ImageMeta] = Field(default_factory=list)
    # Unknown "__" keys, written back untouched
    extras: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "StockOverrides":
        meta_raw = raw.get(IMAGE_META_KEY)
        image_meta = []
        if isinstance(meta_raw, list):
            for entry in meta_raw:
                if isinstance(entry, dict):
                    image_meta.append(ImageMeta(
                        name=to_text(entry.get("name")),
                        description=to_text(entry.get("description")),
                    ))
                else:
                    image_meta.append(ImageMeta())
        extras = {
            key: value for key, value in raw.items()
            if str(key).startswith("__")
            and key not in (MODE_KEY, DISCOUNT_PRICE_KEY, IMAGE_META_KEY)
        }
        return cls(
            discount_price=to_decimal(raw.get(DISCOUNT_PRICE_KEY)),
            image_meta=image_meta,
            extras=extras,
        )

class StockRecord(BaseModel):
    """Parsed form of a product's stock blob: quantity levels plus overrides"""
    levels: StockLevels = Field(default_factory=LegacyStock)
    overrides: StockOverrides = Field(default_factory=StockOverrides)

    @classmethod
    def from_raw(cls, raw: Any) -> "StockRecord":
        """Parse the persisted blob; malformed input becomes empty legacy stock"""
        if isinstance(raw, StockRecord):
            return raw
        if not isinstance(raw, dict):
            return cls()
        overrides = StockOverrides.from_raw(raw)
        variants = raw.get("variants")
        if raw.get(MODE_KEY) == PER_IMAGE_MODE and isinstance(variants, list):
            levels = PerImageStock(variants=[Variant.from_raw(v) for v in variants])
        else:
            quantities = {
                str(size): to_int(qty) for size, qty in raw.items()
                if not str(size).startswith("__")
            }
            levels = LegacyStock(quantities=quantities)
        return cls(levels=levels, overrides=overrides)

    @property
    def is_per_image(self) -> bool:
        return isinstance(self.levels, PerImageStock)

    def to_raw(self) -> Dict[str, Any]:
        """Serialize back to the blob shape the stores understand"""
        if isinstance(self.levels, PerImageStock):
            raw: Dict[str, Any] = {
                MODE_KEY: PER_IMAGE_MODE,
                "variants": [v.to_raw() for v in self.levels.variants],
            }
        else:
            raw = dict(self.levels.quantities)
        raw.update(self.overrides.extras)
        if self.overrides.discount_price is not None:
            raw[DISCOUNT_PRICE_KEY] = json_number(self.overrides.discount_price)
        if self.overrides.image_meta:
            raw[IMAGE_META_KEY] = [m.model_dump() for m in self.overrides.image_meta]
        return raw

class Product(BaseModel):
    """Catalog product; construct from rows with from_row or model_validate"""
    id: str = ""
    name: str = ""
    description: str = ""
    category: str = ""
    price: Decimal = Decimal(0)
    featured: bool = False
    visible: bool = True
    images: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    stock: StockRecord = Field(default_factory=StockRecord)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("id", "name", "description", "category", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return to_text(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> Decimal:
        return to_price(value)

    @field_validator("visible", mode="before")
    @classmethod
    def _visible(cls, value: Any) -> bool:
        return value is not False

    @field_validator("featured", mode="before")
    @classmethod
    def _featured(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("images", mode="before")
    @classmethod
    def _images(cls, value: Any) -> List[str]:
        return split_list(value, "\n")

    @field_validator("sizes", mode="before")
    @classmethod
    def _sizes(cls, value: Any) -> List[str]:
        return unique(split_list(value, ","))

    @field_validator("stock", mode="before")
    @classmethod
    def _stock(cls, value: Any) -> StockRecord:
        return StockRecord.from_raw(value)

    @field_serializer("stock")
    def _dump_stock(self, stock: StockRecord) -> Dict[str, Any]:
        return stock.to_raw()

    @property
    def image(self) -> str:
        return self.images[0] if self.images else ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Product":
        """Build from a products table row or a demo-store document"""
        data = dict(row)
        if "category_slug" in data:
            data["category"] = data.pop("category_slug")
        if data.get("id") is not None:
            data["id"] = str(data["id"])
        return cls.model_validate(data)

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category_slug": self.category or None,
            "price": json_number(self.price),
            "featured": self.featured,
            "visible": self.visible,
            "images": list(self.images),
            "sizes": list(self.sizes),
            "stock": self.stock.to_raw(),
        }
