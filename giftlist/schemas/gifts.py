from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def split_categories(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return value


class GiftBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    purchase_link: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    price: float = Field(0, ge=0)
    categories: list[str] = Field(default_factory=list)

    @field_validator("categories", mode="before")
    @classmethod
    def _split_categories(cls, value: Any) -> Any:
        return split_categories(value)

    @field_validator("image_url", mode="before")
    @classmethod
    def _blank_image_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class GiftCreate(GiftBase):
    pass


class GiftUpdate(GiftBase):
    pass


class GiftOut(GiftBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class InterestedUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    user_name: str


class GiftWithInterestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: str
    purchase_link: str
    image_url: Optional[str] = None
    price: float
    categories: list[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    interested_users: list[InterestedUserOut]
    current_user_interested: bool
    state: str


class CategoryCount(BaseModel):
    name: str
    count: int


class ViewerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    view_only: bool


class GiftListOut(BaseModel):
    user: ViewerOut
    total: int
    categories: list[CategoryCount]
    gifts: list[GiftWithInterestOut]


class ToggleRequest(BaseModel):
    confirm: bool = False


class ToggleOut(BaseModel):
    status: str
