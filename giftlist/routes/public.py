from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from giftlist.db import get_db
from giftlist.schemas.gifts import (
    CategoryCount,
    GiftListOut,
    GiftWithInterestOut,
    InterestedUserOut,
    ToggleOut,
    ToggleRequest,
    ViewerOut,
)
from giftlist.services.reservations import (
    ALL_CATEGORIES,
    GiftWithInterest,
    ReservationService,
    SortOption,
    ToggleAction,
    category_counts,
    filter_and_sort,
)

router = APIRouter(prefix="/api/v1/gifts", tags=["public"])

TOGGLE_STATUS = {ToggleAction.INSERT: "inserted", ToggleAction.DELETE: "deleted"}


def get_reservation_service(db: AsyncSession = Depends(get_db)) -> ReservationService:
    return ReservationService(db)


def gift_out(gift: GiftWithInterest) -> GiftWithInterestOut:
    return GiftWithInterestOut(
        id=gift.id,
        title=gift.title,
        description=gift.description,
        purchase_link=gift.purchase_link,
        image_url=gift.image_url,
        price=gift.price,
        categories=gift.categories,
        created_at=gift.created_at,
        updated_at=gift.updated_at,
        interested_users=[InterestedUserOut(user_id=u.user_id, user_name=u.user_name) for u in gift.interested_users],
        current_user_interested=gift.current_user_interested,
        state=gift.state.value,
    )


@router.get("/{hex_key}", response_model=GiftListOut, summary="Liste des cadeaux d'un invité")
async def list_gifts(
    hex_key: str,
    category: str = ALL_CATEGORIES,
    sort: SortOption = SortOption.DEFAULT,
    service: ReservationService = Depends(get_reservation_service),
):
    viewer = await service.load_viewer(hex_key)
    gifts = await service.list_for_viewer(viewer)
    shown = filter_and_sort(gifts, category=category, sort=sort)
    return GiftListOut(
        user=ViewerOut.model_validate(viewer),
        total=len(gifts),
        categories=[CategoryCount(name=name, count=count) for name, count in category_counts(gifts)],
        gifts=[gift_out(gift) for gift in shown],
    )


@router.post("/{hex_key}/interests/{gift_id}", response_model=ToggleOut, summary="Réserver ou libérer un cadeau")
async def toggle_interest(
    hex_key: str,
    gift_id: uuid.UUID,
    data: ToggleRequest | None = None,
    service: ReservationService = Depends(get_reservation_service),
):
    """
    Reserves the gift for the invitee, or cancels their reservation.
    A gift already reserved by someone else answers 409 with the names of
    the reservers until the call is repeated with `confirm: true`.
    """
    viewer = await service.load_viewer(hex_key)
    action = await service.toggle(viewer, gift_id, confirmed=bool(data and data.confirm))
    return ToggleOut(status=TOGGLE_STATUS[action])
