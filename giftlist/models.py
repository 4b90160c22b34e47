from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from giftlist.db import Base

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests).
JSONList = sa.JSON().with_variant(JSONB(), "postgresql")

PERSON_GIFT_STATUSES = ("Idée", "Commandé", "Livré")


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Gift(TimestampMixin, Base):
    __tablename__ = "gifts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    purchase_link: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0)
    categories: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)

    interests: Mapped[list["Interest"]] = relationship(back_populates="gift", passive_deletes=True)


class User(Base):
    """An invitee reaching the public gift list through their hex key."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    hex_key: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    view_only: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False, server_default=sa.false())
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class Interest(Base):
    """A reservation claim. Several users may claim the same gift."""

    __tablename__ = "interests"
    __table_args__ = (
        UniqueConstraint("gift_id", "user_id", name="uq_interests_gift_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    gift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("gifts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    gift: Mapped[Gift] = relationship(back_populates="interests")
    user: Mapped[Optional[User]] = relationship()


class Person(TimestampMixin, Base):
    __tablename__ = "persons"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    budget: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0)

    gifts: Mapped[list["PersonGift"]] = relationship(back_populates="person", passive_deletes=True)


class PersonGift(TimestampMixin, Base):
    __tablename__ = "person_gifts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    person_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("persons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Idée", server_default="Idée")
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    person: Mapped[Person] = relationship(back_populates="gifts")
