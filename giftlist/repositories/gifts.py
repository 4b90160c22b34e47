from __future__ import annotations

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from giftlist.models import Gift, Interest

GIFT_FIELDS = ("title", "description", "purchase_link", "image_url", "price", "categories")


class GiftRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_gifts(self) -> Sequence[Gift]:
        stmt = select(Gift).order_by(Gift.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_gift(self, gift_id: uuid.UUID) -> Optional[Gift]:
        stmt = select(Gift).where(Gift.id == gift_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_gift(self, **values: Any) -> Gift:
        gift = Gift(**{key: values[key] for key in GIFT_FIELDS if key in values})
        self.session.add(gift)
        await self.session.commit()
        await self.session.refresh(gift)
        return gift

    async def update_gift(self, gift_id: uuid.UUID, **values: Any) -> Optional[Gift]:
        gift = await self.get_gift(gift_id)
        if not gift:
            return None
        for key in GIFT_FIELDS:
            if key in values:
                setattr(gift, key, values[key])
        await self.session.commit()
        await self.session.refresh(gift)
        return gift

    async def delete_gift(self, gift_id: uuid.UUID) -> bool:
        await self.session.execute(delete(Interest).where(Interest.gift_id == gift_id))
        result = await self.session.execute(delete(Gift).where(Gift.id == gift_id))
        await self.session.commit()
        return result.rowcount > 0

    async def count_gifts(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Gift))
        return result.scalar_one()

    async def count_interests(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Interest))
        return result.scalar_one()
