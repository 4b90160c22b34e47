from __future__ import annotations

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from giftlist.models import Person, PersonGift

PERSON_GIFT_FIELDS = ("name", "amount", "status", "image_url", "note")


class PersonRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_persons(self) -> Sequence[Person]:
        stmt = select(Person).order_by(Person.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_person(self, person_id: uuid.UUID) -> Optional[Person]:
        stmt = select(Person).where(Person.id == person_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_person(self, name: str, budget: float) -> Person:
        person = Person(name=name, budget=budget)
        self.session.add(person)
        await self.session.commit()
        await self.session.refresh(person)
        return person

    async def update_person(self, person_id: uuid.UUID, name: str, budget: float) -> Optional[Person]:
        person = await self.get_person(person_id)
        if not person:
            return None
        person.name = name
        person.budget = budget
        await self.session.commit()
        await self.session.refresh(person)
        return person

    async def delete_person(self, person_id: uuid.UUID) -> bool:
        await self.session.execute(delete(PersonGift).where(PersonGift.person_id == person_id))
        result = await self.session.execute(delete(Person).where(Person.id == person_id))
        await self.session.commit()
        return result.rowcount > 0

    async def list_gifts(self, person_id: Optional[uuid.UUID] = None) -> Sequence[PersonGift]:
        stmt = select(PersonGift).order_by(PersonGift.created_at.desc())
        if person_id is not None:
            stmt = stmt.where(PersonGift.person_id == person_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_gift(self, gift_id: uuid.UUID) -> Optional[PersonGift]:
        stmt = select(PersonGift).where(PersonGift.id == gift_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_gift(self, person_id: uuid.UUID, **values: Any) -> PersonGift:
        gift = PersonGift(person_id=person_id, **{k: values[k] for k in PERSON_GIFT_FIELDS if k in values})
        self.session.add(gift)
        await self.session.commit()
        await self.session.refresh(gift)
        return gift

    async def update_gift(self, gift_id: uuid.UUID, **values: Any) -> Optional[PersonGift]:
        gift = await self.get_gift(gift_id)
        if not gift:
            return None
        for key in PERSON_GIFT_FIELDS:
            if key in values:
                setattr(gift, key, values[key])
        await self.session.commit()
        await self.session.refresh(gift)
        return gift

    async def delete_gift(self, gift_id: uuid.UUID) -> bool:
        result = await self.session.execute(delete(PersonGift).where(PersonGift.id == gift_id))
        await self.session.commit()
        return result.rowcount > 0
