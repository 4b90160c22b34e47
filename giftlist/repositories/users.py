from __future__ import annotations

import secrets
import uuid
from typing import Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from giftlist.models import Interest, User

HEX_KEY_BYTES = 8


def generate_hex_key() -> str:
    """16 lowercase hex characters used in the invitee's public link."""
    return secrets.token_hex(HEX_KEY_BYTES)


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_users(self) -> Sequence[User]:
        stmt = select(User).order_by(User.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_hex_key(self, hex_key: str) -> Optional[User]:
        stmt = select(User).where(User.hex_key == hex_key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_user(self, name: str, view_only: bool = False) -> User:
        user = User(name=name, hex_key=generate_hex_key(), view_only=view_only)
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        await self.session.execute(delete(Interest).where(Interest.user_id == user_id))
        result = await self.session.execute(delete(User).where(User.id == user_id))
        await self.session.commit()
        return result.rowcount > 0

    async def count_users(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(User))
        return result.scalar_one()
