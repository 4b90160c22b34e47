from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    view_only: bool = False


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    hex_key: str
    view_only: bool
    created_at: datetime
    link: str = ""


class DashboardStats(BaseModel):
    gifts: int
    users: int
    interests: int
