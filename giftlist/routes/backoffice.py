from __future__ import annotations

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from giftlist.auth.deps import require_backoffice
from giftlist.config import get_settings
from giftlist.db import get_db
from giftlist.models import User
from giftlist.repositories import GiftRepository, PersonRepository, UserRepository
from giftlist.schemas.gifts import GiftCreate, GiftOut, GiftUpdate
from giftlist.schemas.persons import (
    BudgetTotalsOut,
    PersonDetailOut,
    PersonGiftIn,
    PersonGiftOut,
    PersonGiftStatusIn,
    PersonIn,
    PersonListOut,
    PersonOut,
    PersonSummaryOut,
)
from giftlist.schemas.users import DashboardStats, UserCreate, UserOut
from giftlist.services.budget import PersonSummary, group_by_status, summarize_all, summarize_person
from giftlist.utils.errors import AppError

router = APIRouter(
    prefix="/api/v1/backoffice",
    tags=["backoffice"],
    dependencies=[Depends(require_backoffice)],
)
logger = logging.getLogger(__name__)


def _not_found(what: str) -> AppError:
    return AppError("not_found", f"{what} introuvable", status.HTTP_404_NOT_FOUND)


def public_link(hex_key: str) -> str:
    return f"{str(get_settings().public_base_url).rstrip('/')}/gifts/{hex_key}"


def user_out(user: User) -> UserOut:
    out = UserOut.model_validate(user)
    out.link = public_link(user.hex_key)
    return out


def summary_out(summary: PersonSummary) -> PersonSummaryOut:
    return PersonSummaryOut(
        person=PersonOut.model_validate(summary.person),
        total_spent=summary.total_spent,
        remaining_budget=summary.remaining_budget,
        budget_percentage=summary.budget_percentage,
        over_budget=summary.over_budget,
        low_budget=summary.low_budget,
        status_counts=summary.status_counts,
        gifts=[PersonGiftOut.model_validate(g) for g in summary.gifts],
    )


def _check_amount(value: float, message: str) -> None:
    if value < 0:
        raise AppError("invalid_amount", message, status.HTTP_400_BAD_REQUEST)


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)):
    gifts = GiftRepository(db)
    return DashboardStats(
        gifts=await gifts.count_gifts(),
        users=await UserRepository(db).count_users(),
        interests=await gifts.count_interests(),
    )


# --- Gifts ---

@router.get("/gifts", response_model=List[GiftOut])
async def list_gifts(db: AsyncSession = Depends(get_db)):
    return await GiftRepository(db).list_gifts()


@router.get("/gifts/{gift_id}", response_model=GiftOut)
async def get_gift(gift_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    gift = await GiftRepository(db).get_gift(gift_id)
    if not gift:
        raise _not_found("Cadeau")
    return gift


@router.post("/gifts", response_model=GiftOut, status_code=status.HTTP_201_CREATED)
async def create_gift(data: GiftCreate, db: AsyncSession = Depends(get_db)):
    gift = await GiftRepository(db).create_gift(**data.model_dump())
    logger.info(f"Created gift {gift.id} '{gift.title}'")
    return gift


@router.put("/gifts/{gift_id}", response_model=GiftOut)
async def update_gift(gift_id: uuid.UUID, data: GiftUpdate, db: AsyncSession = Depends(get_db)):
    gift = await GiftRepository(db).update_gift(gift_id, **data.model_dump())
    if not gift:
        raise _not_found("Cadeau")
    logger.info(f"Updated gift {gift_id}")
    return gift


@router.delete("/gifts/{gift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_gift(gift_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await GiftRepository(db).delete_gift(gift_id):
        raise _not_found("Cadeau")
    logger.info(f"Deleted gift {gift_id}")


# --- Invitees ---

@router.get("/users", response_model=List[UserOut])
async def list_users(db: AsyncSession = Depends(get_db)):
    return [user_out(user) for user in await UserRepository(db).list_users()]


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    user = await UserRepository(db).create_user(name=data.name, view_only=data.view_only)
    logger.info(f"Created user {user.id} (view_only={user.view_only})")
    return user_out(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await UserRepository(db).delete_user(user_id):
        raise _not_found("Utilisateur")


# --- Persons and budgets ---

@router.get("/persons", response_model=PersonListOut)
async def list_persons(db: AsyncSession = Depends(get_db)):
    repo = PersonRepository(db)
    persons = await repo.list_persons()
    gifts = await repo.list_gifts()
    summaries = [summarize_person(p, [g for g in gifts if g.person_id == p.id]) for p in persons]
    return PersonListOut(
        totals=BudgetTotalsOut.model_validate(summarize_all(summaries)),
        persons=[summary_out(s) for s in summaries],
    )


@router.post("/persons", response_model=PersonOut, status_code=status.HTTP_201_CREATED)
async def create_person(data: PersonIn, db: AsyncSession = Depends(get_db)):
    _check_amount(data.budget, "Veuillez entrer un budget valide")
    return await PersonRepository(db).create_person(name=data.name, budget=data.budget)


@router.get("/persons/{person_id}", response_model=PersonDetailOut)
async def get_person(person_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    repo = PersonRepository(db)
    person = await repo.get_person(person_id)
    if not person:
        raise _not_found("Personne")
    gifts = await repo.list_gifts(person_id)
    return PersonDetailOut(
        summary=summary_out(summarize_person(person, gifts)),
        gifts_by_status={
            name: [PersonGiftOut.model_validate(g) for g in items]
            for name, items in group_by_status(gifts).items()
        },
    )


@router.put("/persons/{person_id}", response_model=PersonOut)
async def update_person(person_id: uuid.UUID, data: PersonIn, db: AsyncSession = Depends(get_db)):
    _check_amount(data.budget, "Veuillez entrer un budget valide")
    person = await PersonRepository(db).update_person(person_id, name=data.name, budget=data.budget)
    if not person:
        raise _not_found("Personne")
    return person


@router.delete("/persons/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_person(person_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await PersonRepository(db).delete_person(person_id):
        raise _not_found("Personne")
    logger.info(f"Deleted person {person_id} and their gifts")


@router.post("/persons/{person_id}/gifts", response_model=PersonGiftOut, status_code=status.HTTP_201_CREATED)
async def add_person_gift(person_id: uuid.UUID, data: PersonGiftIn, db: AsyncSession = Depends(get_db)):
    _check_amount(data.amount, "Veuillez entrer un montant valide")
    repo = PersonRepository(db)
    if not await repo.get_person(person_id):
        raise _not_found("Personne")
    return await repo.add_gift(person_id, **data.model_dump())


@router.put("/person-gifts/{gift_id}", response_model=PersonGiftOut)
async def update_person_gift(gift_id: uuid.UUID, data: PersonGiftIn, db: AsyncSession = Depends(get_db)):
    _check_amount(data.amount, "Veuillez entrer un montant valide")
    gift = await PersonRepository(db).update_gift(gift_id, **data.model_dump())
    if not gift:
        raise _not_found("Cadeau")
    return gift


@router.patch("/person-gifts/{gift_id}/status", response_model=PersonGiftOut)
async def update_person_gift_status(
    gift_id: uuid.UUID, data: PersonGiftStatusIn, db: AsyncSession = Depends(get_db)
):
    gift = await PersonRepository(db).update_gift(gift_id, status=data.status)
    if not gift:
        raise _not_found("Cadeau")
    return gift


@router.delete("/person-gifts/{gift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_person_gift(gift_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await PersonRepository(db).delete_gift(gift_id):
        raise _not_found("Cadeau")
