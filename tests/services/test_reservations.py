import uuid
from types import SimpleNamespace

import pytest

from giftlist.services.reservations import (
    ReservationState,
    SortOption,
    ToggleAction,
    category_counts,
    decide_toggle,
    filter_and_sort,
    project_gifts,
)

ALICE = uuid.uuid4()
BOB = uuid.uuid4()
CAROL = uuid.uuid4()
NAMES = {ALICE: "Alice", BOB: "Bob", CAROL: "Carol"}


def _gift(title, price, categories=()):
    return SimpleNamespace(
        id=uuid.uuid4(),
        title=title,
        description="",
        purchase_link=f"https://www.amazon.fr/{title}",
        image_url=None,
        price=price,
        categories=list(categories),
        created_at=None,
        updated_at=None,
    )


def _interest(gift, user_id):
    return SimpleNamespace(gift_id=gift.id, user_id=user_id)


@pytest.fixture
def catalogue():
    held_by_bob = _gift("velo", 30, ["Sport"])
    book = _gift("livre", 10, ["Livres"])
    game = _gift("jeu", 50, ["Jeux"])
    paint = _gift("peinture", 20, ["art"])
    interests = [_interest(held_by_bob, BOB), _interest(game, ALICE)]
    return [held_by_bob, book, game, paint], interests


def test_state_depends_on_viewer():
    gift = _gift("montre", 80)
    interests = [_interest(gift, BOB)]

    (for_alice,) = project_gifts([gift], interests, ALICE, NAMES)
    (for_bob,) = project_gifts([gift], interests, BOB, NAMES)
    (for_carol,) = project_gifts([gift], [], CAROL, NAMES)

    assert for_alice.state is ReservationState.RESERVED_BY_OTHERS
    assert for_bob.state is ReservationState.RESERVED_BY_ME
    assert for_carol.state is ReservationState.UNRESERVED


def test_mine_wins_over_others_when_both_reserved():
    gift = _gift("montre", 80)
    interests = [_interest(gift, BOB), _interest(gift, ALICE)]

    (for_alice,) = project_gifts([gift], interests, ALICE, NAMES)

    assert for_alice.state is ReservationState.RESERVED_BY_ME
    assert not for_alice.reserved_by_others
    assert for_alice.reserver_names(exclude=ALICE) == ["Bob"]


def test_unknown_reserver_name():
    gift = _gift("montre", 80)
    (projected,) = project_gifts([gift], [_interest(gift, uuid.uuid4())], ALICE, NAMES)
    assert projected.reserver_names() == ["Unknown"]


def test_default_sort_puts_mine_first_and_others_last(catalogue):
    gifts, interests = catalogue
    projected = project_gifts(gifts, interests, ALICE, NAMES)

    ordered = [g.title for g in filter_and_sort(projected)]
    assert ordered == ["jeu", "livre", "peinture", "velo"]


@pytest.mark.parametrize(
    "sort, expected",
    [
        (SortOption.PRICE_ASC, ["jeu", "livre", "peinture", "velo"]),
        (SortOption.PRICE_DESC, ["jeu", "peinture", "livre", "velo"]),
        (SortOption.CATEGORY, ["jeu", "peinture", "livre", "velo"]),
        ("price-desc", ["jeu", "peinture", "livre", "velo"]),
    ],
)
def test_sort_modes_keep_reservation_tiers(catalogue, sort, expected):
    gifts, interests = catalogue
    projected = project_gifts(gifts, interests, ALICE, NAMES)
    assert [g.title for g in filter_and_sort(projected, sort=sort)] == expected


def test_category_filter(catalogue):
    gifts, interests = catalogue
    projected = project_gifts(gifts, interests, ALICE, NAMES)

    assert [g.title for g in filter_and_sort(projected, category="Livres")] == ["livre"]
    assert filter_and_sort(projected, category="Cuisine") == []
    assert len(filter_and_sort(projected, category="all")) == 4


def test_category_counts(catalogue):
    gifts, interests = catalogue
    projected = project_gifts(gifts, interests, ALICE, NAMES)
    assert category_counts(projected) == [("Jeux", 1), ("Livres", 1), ("Sport", 1), ("art", 1)]


def test_decide_toggle():
    gift = _gift("montre", 80)
    interests = [_interest(gift, BOB)]

    (for_alice,) = project_gifts([gift], interests, ALICE, NAMES)
    (for_bob,) = project_gifts([gift], interests, BOB, NAMES)
    (for_carol,) = project_gifts([gift], [], CAROL, NAMES)

    pending = decide_toggle(for_alice)
    assert pending.action is ToggleAction.CONFIRM
    assert pending.reserved_by == ("Bob",)
    assert decide_toggle(for_alice, confirmed=True).action is ToggleAction.INSERT
    assert decide_toggle(for_bob).action is ToggleAction.DELETE
    assert decide_toggle(for_carol).action is ToggleAction.INSERT


def test_gift_shared_by_two_others_sorts_after_free_gifts():
    shared = _gift("montre", 80)
    mine = _gift("sac", 40)
    free = _gift("stylo", 5)
    interests = [_interest(shared, ALICE), _interest(shared, BOB), _interest(mine, CAROL)]

    projected = project_gifts([shared, free, mine], interests, CAROL, NAMES)

    assert projected[0].state is ReservationState.RESERVED_BY_OTHERS
    assert [g.title for g in filter_and_sort(projected)] == ["sac", "stylo", "montre"]
