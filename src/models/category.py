# src/models/category.py
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, field_validator

class Category(BaseModel):
    """Category model for product categorization"""
    id: Optional[Any] = None
    slug: str
    label: str
    visible: bool = True
    sort_order: int = 0

    model_config = ConfigDict(from_attributes=True)

    @field_validator("slug", mode="before")
    @classmethod
    def _slug(cls, value: Any) -> str:
        return str(value or "").strip().lower()

    @field_validator("label", mode="before")
    @classmethod
    def _label(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("visible", mode="before")
    @classmethod
    def _visible(cls, value: Any) -> bool:
        return value is not False

    @field_validator("sort_order", mode="before")
    @classmethod
    def _sort_order(cls, value: Any) -> int:
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            return 0
