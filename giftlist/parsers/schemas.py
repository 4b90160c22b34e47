from __future__ import annotations

from pydantic import BaseModel, Field

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 200
CATEGORY_MAX_LENGTH = 49
MAX_CATEGORIES = 5


class ProductRecord(BaseModel):
    """Normalized product metadata, copied into a gift by the caller."""

    title: str = Field(..., max_length=TITLE_MAX_LENGTH)
    description: str = Field("", max_length=DESCRIPTION_MAX_LENGTH)
    price: float = Field(0.0, ge=0)
    image_url: str = ""
    categories: list[str] = Field(default_factory=list, max_length=MAX_CATEGORIES)
    source: str
