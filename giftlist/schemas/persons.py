from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PersonGiftStatus = Literal["Idée", "Commandé", "Livré"]


class PersonIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    budget: float


class PersonGiftIn(BaseModel):
    name: str = Field(..., min_length=1)
    amount: float
    status: PersonGiftStatus = "Idée"
    image_url: Optional[str] = None
    note: Optional[str] = None


class PersonGiftStatusIn(BaseModel):
    status: PersonGiftStatus


class PersonGiftOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    person_id: uuid.UUID
    name: str
    amount: float
    status: str
    image_url: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime


class PersonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    budget: float
    created_at: datetime


class PersonSummaryOut(BaseModel):
    person: PersonOut
    total_spent: float
    remaining_budget: float
    budget_percentage: float
    over_budget: bool
    low_budget: bool
    status_counts: dict[str, int]
    gifts: list[PersonGiftOut]


class BudgetTotalsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_budget: float
    total_spent: float
    total_remaining: float
    total_gifts: int
    total_ideas: int
    total_ordered: int
    total_delivered: int


class PersonListOut(BaseModel):
    totals: BudgetTotalsOut
    persons: list[PersonSummaryOut]


class PersonDetailOut(BaseModel):
    summary: PersonSummaryOut
    gifts_by_status: dict[str, list[PersonGiftOut]]
