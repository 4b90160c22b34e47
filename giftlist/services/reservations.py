"""Reservation state for the public gift list.

A gift's reservation state is never stored: it is projected from the
interest rows on every load, and the toggle decision is taken on that
projection. Several invitees may reserve the same gift; reserving a gift
someone else already holds only asks for a confirmation first.
"""
from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from giftlist.models import Gift, Interest, User
from giftlist.repositories.gifts import GiftRepository
from giftlist.repositories.users import UserRepository
from giftlist.utils.errors import AppError

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
UNKNOWN_USER_NAME = "Unknown"


class ReservationState(str, enum.Enum):
    UNRESERVED = "unreserved"
    RESERVED_BY_ME = "reserved_by_me"
    RESERVED_BY_OTHERS = "reserved_by_others"


class SortOption(str, enum.Enum):
    DEFAULT = "default"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    CATEGORY = "category"


class ToggleAction(str, enum.Enum):
    INSERT = "insert"
    DELETE = "delete"
    CONFIRM = "confirm"


@dataclass(frozen=True)
class InterestedUser:
    user_id: uuid.UUID
    user_name: str


@dataclass
class GiftWithInterest:
    id: uuid.UUID
    title: str
    description: str
    purchase_link: str
    image_url: Optional[str]
    price: float
    categories: list[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    interested_users: list[InterestedUser] = field(default_factory=list)
    current_user_interested: bool = False

    @property
    def state(self) -> ReservationState:
        return reservation_state(self)

    @property
    def reserved_by_others(self) -> bool:
        return self.state is ReservationState.RESERVED_BY_OTHERS

    def reserver_names(self, exclude: Optional[uuid.UUID] = None) -> list[str]:
        return [u.user_name for u in self.interested_users if u.user_id != exclude]


@dataclass(frozen=True)
class ToggleDecision:
    action: ToggleAction
    reserved_by: tuple[str, ...] = ()


class InvitationNotFound(AppError):
    def __init__(self):
        super().__init__("invitation_not_found", "Lien d'accès invalide", status.HTTP_404_NOT_FOUND)


class GiftNotFound(AppError):
    def __init__(self):
        super().__init__("gift_not_found", "Cadeau introuvable", status.HTTP_404_NOT_FOUND)


class ViewOnlyUser(AppError):
    def __init__(self):
        super().__init__(
            "view_only", "Ce lien permet uniquement de consulter la liste", status.HTTP_403_FORBIDDEN
        )


class ConfirmationRequired(AppError):
    def __init__(self, reserved_by: Sequence[str]):
        self.reserved_by = list(reserved_by)
        super().__init__(
            "confirmation_required",
            f"Ce cadeau est déjà réservé par {', '.join(self.reserved_by)}",
            status.HTTP_409_CONFLICT,
            {"status": "confirmation_required", "reserved_by": self.reserved_by},
        )


def project_gifts(
    gifts: Sequence[Gift],
    interests: Iterable[Interest],
    viewer_id: uuid.UUID,
    user_names: Mapping[uuid.UUID, str],
) -> list[GiftWithInterest]:
    """Attach interest information to every gift, keeping the gifts' order."""
    by_gift: dict[uuid.UUID, list[InterestedUser]] = {}
    for interest in interests:
        by_gift.setdefault(interest.gift_id, []).append(
            InterestedUser(
                user_id=interest.user_id,
                user_name=user_names.get(interest.user_id) or UNKNOWN_USER_NAME,
            )
        )

    projected = []
    for gift in gifts:
        interested = by_gift.get(gift.id, [])
        projected.append(
            GiftWithInterest(
                id=gift.id,
                title=gift.title,
                description=gift.description,
                purchase_link=gift.purchase_link,
                image_url=gift.image_url,
                price=gift.price,
                categories=list(gift.categories or []),
                created_at=gift.created_at,
                updated_at=gift.updated_at,
                interested_users=interested,
                current_user_interested=any(u.user_id == viewer_id for u in interested),
            )
        )
    return projected


def reservation_state(gift: GiftWithInterest) -> ReservationState:
    if gift.current_user_interested:
        return ReservationState.RESERVED_BY_ME
    if gift.interested_users:
        return ReservationState.RESERVED_BY_OTHERS
    return ReservationState.UNRESERVED


def _sort_key(gift: GiftWithInterest, sort: SortOption):
    # Tier 1: my reservations first. Tier 2: gifts held by others last.
    tier = 0 if gift.current_user_interested else (2 if gift.reserved_by_others else 1)
    if sort is SortOption.PRICE_ASC:
        return (tier, gift.price)
    if sort is SortOption.PRICE_DESC:
        return (tier, -gift.price)
    if sort is SortOption.CATEGORY:
        return (tier, gift.categories[0].casefold() if gift.categories else "")
    return (tier,)


def filter_and_sort(
    gifts: Sequence[GiftWithInterest],
    category: str = ALL_CATEGORIES,
    sort: SortOption | str = SortOption.DEFAULT,
) -> list[GiftWithInterest]:
    """Filter by category and order for display.

    ``sorted`` is stable, so the default mode keeps the load order (newest
    first) inside each tier.
    """
    sort = SortOption(sort)
    if category and category != ALL_CATEGORIES:
        gifts = [gift for gift in gifts if category in gift.categories]
    return sorted(gifts, key=lambda gift: _sort_key(gift, sort))


def category_counts(gifts: Sequence[GiftWithInterest]) -> list[tuple[str, int]]:
    counts: dict[str, int] = {}
    for gift in gifts:
        for category in set(gift.categories):
            counts[category] = counts.get(category, 0) + 1
    return sorted(counts.items())


def decide_toggle(gift: GiftWithInterest, confirmed: bool = False) -> ToggleDecision:
    state = reservation_state(gift)
    if state is ReservationState.RESERVED_BY_ME:
        return ToggleDecision(ToggleAction.DELETE)
    if state is ReservationState.RESERVED_BY_OTHERS and not confirmed:
        return ToggleDecision(ToggleAction.CONFIRM, tuple(gift.reserver_names()))
    return ToggleDecision(ToggleAction.INSERT)


class ReservationService:
    """Loads the gift list for an invitee and applies reservation toggles."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_viewer(self, hex_key: str) -> User:
        user = await UserRepository(self.db).get_by_hex_key(hex_key)
        if user is None:
            raise InvitationNotFound()
        return user

    async def list_for_viewer(self, viewer: User) -> list[GiftWithInterest]:
        gifts = await GiftRepository(self.db).list_gifts()
        interests = (await self.db.execute(select(Interest).order_by(Interest.created_at.asc()))).scalars().all()
        user_ids = {interest.user_id for interest in interests}
        user_names: dict[uuid.UUID, str] = {}
        if user_ids:
            rows = await self.db.execute(select(User.id, User.name).where(User.id.in_(user_ids)))
            user_names = {row.id: row.name for row in rows}
        return project_gifts(gifts, interests, viewer.id, user_names)

    async def toggle(self, viewer: User, gift_id: uuid.UUID, confirmed: bool = False) -> ToggleAction:
        """Reserve or release ``gift_id`` for ``viewer``.

        Raises ConfirmationRequired, without writing anything, when the gift
        is held by someone else and ``confirmed`` is false.
        """
        if viewer.view_only:
            raise ViewOnlyUser()

        gift = next((g for g in await self.list_for_viewer(viewer) if g.id == gift_id), None)
        if gift is None:
            raise GiftNotFound()

        decision = decide_toggle(gift, confirmed)
        if decision.action is ToggleAction.CONFIRM:
            raise ConfirmationRequired(decision.reserved_by)

        try:
            if decision.action is ToggleAction.DELETE:
                await self.db.execute(
                    delete(Interest).where(Interest.gift_id == gift_id, Interest.user_id == viewer.id)
                )
            else:
                self.db.add(Interest(gift_id=gift_id, user_id=viewer.id))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Interest {decision.action.value} for gift {gift_id} by user {viewer.id}")
        return decision.action
