import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from giftlist.models import Gift, Interest, User
from giftlist.services.reservations import (
    ConfirmationRequired,
    GiftNotFound,
    InvitationNotFound,
    ReservationService,
    ReservationState,
    ToggleAction,
    ToggleDecision,
    ViewOnlyUser,
)


async def _seed(session):
    gift = Gift(title="Cafetière", purchase_link="https://www.fnac.com/a1", price=89.0, categories=["Cuisine"])
    alice = User(name="Alice", hex_key="a" * 16)
    bob = User(name="Bob", hex_key="b" * 16)
    viewer = User(name="Mamie", hex_key="c" * 16, view_only=True)
    session.add_all([gift, alice, bob, viewer])
    await session.commit()
    return gift, alice, bob, viewer


async def _interest_count(session) -> int:
    return (await session.execute(select(func.count()).select_from(Interest))).scalar_one()


@pytest.mark.asyncio
async def test_reserve_confirm_and_release(sqlite_db_session):
    gift, alice, bob, _ = await _seed(sqlite_db_session)
    service = ReservationService(sqlite_db_session)

    assert await service.toggle(bob, gift.id) is ToggleAction.INSERT

    with pytest.raises(ConfirmationRequired) as exc_info:
        await service.toggle(alice, gift.id)
    assert exc_info.value.reserved_by == ["Bob"]
    assert exc_info.value.http_status == 409
    assert await _interest_count(sqlite_db_session) == 1

    assert await service.toggle(alice, gift.id, confirmed=True) is ToggleAction.INSERT
    assert await _interest_count(sqlite_db_session) == 2

    (for_alice,) = await service.list_for_viewer(alice)
    assert for_alice.state is ReservationState.RESERVED_BY_ME
    assert sorted(for_alice.reserver_names()) == ["Alice", "Bob"]

    assert await service.toggle(alice, gift.id) is ToggleAction.DELETE
    remaining = (await sqlite_db_session.execute(select(Interest))).scalars().all()
    assert [i.user_id for i in remaining] == [bob.id]


@pytest.mark.asyncio
async def test_view_only_user_cannot_reserve(sqlite_db_session):
    gift, _, _, viewer = await _seed(sqlite_db_session)

    with pytest.raises(ViewOnlyUser) as exc_info:
        await ReservationService(sqlite_db_session).toggle(viewer, gift.id)

    assert exc_info.value.http_status == 403
    assert await _interest_count(sqlite_db_session) == 0


@pytest.mark.asyncio
async def test_load_viewer_by_hex_key(sqlite_db_session):
    _, alice, _, _ = await _seed(sqlite_db_session)
    service = ReservationService(sqlite_db_session)

    assert (await service.load_viewer("a" * 16)).id == alice.id
    with pytest.raises(InvitationNotFound) as exc_info:
        await service.load_viewer("0" * 16)
    assert exc_info.value.message == "Lien d'accès invalide"


@pytest.mark.asyncio
async def test_toggle_unknown_gift(sqlite_db_session):
    _, alice, _, _ = await _seed(sqlite_db_session)

    with pytest.raises(GiftNotFound):
        await ReservationService(sqlite_db_session).toggle(alice, uuid.uuid4())


@pytest.mark.asyncio
async def test_failed_toggle_rolls_back_and_keeps_interests(sqlite_db_session, monkeypatch):
    gift, alice, _, _ = await _seed(sqlite_db_session)
    service = ReservationService(sqlite_db_session)
    await service.toggle(alice, gift.id)
    gift_id, alice_id = gift.id, alice.id

    # A stale decision inserts a second row for the same (gift, user) pair.
    monkeypatch.setattr(
        "giftlist.services.reservations.decide_toggle",
        lambda gift, confirmed=False: ToggleDecision(ToggleAction.INSERT),
    )
    with pytest.raises(IntegrityError):
        await service.toggle(alice, gift_id)

    rows = (await sqlite_db_session.execute(select(Interest.gift_id, Interest.user_id))).all()
    assert [(row.gift_id, row.user_id) for row in rows] == [(gift_id, alice_id)]
