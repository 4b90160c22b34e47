from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ScrapeRequest(BaseModel):
    url: Optional[str] = None


class ScrapeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    price: float
    image_url: str = Field("", serialization_alias="imageUrl")
    categories: list[str]
    source: Optional[str] = None


class LoginRequest(BaseModel):
    password: Optional[str] = None
