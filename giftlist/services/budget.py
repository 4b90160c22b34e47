from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from giftlist.models import PERSON_GIFT_STATUSES, Person, PersonGift

LOW_BUDGET_RATIO = 0.2


@dataclass
class PersonSummary:
    person: Person
    gifts: list[PersonGift]
    total_spent: float
    remaining_budget: float
    status_counts: dict[str, int] = field(default_factory=dict)

    @property
    def budget_percentage(self) -> float:
        """Share of the budget still available, clamped to 0..100."""
        if self.person.budget <= 0:
            return 0.0
        return max(0.0, min(100.0, self.remaining_budget / self.person.budget * 100))

    @property
    def over_budget(self) -> bool:
        return self.remaining_budget < 0

    @property
    def low_budget(self) -> bool:
        return self.remaining_budget < self.person.budget * LOW_BUDGET_RATIO


@dataclass
class BudgetTotals:
    total_budget: float = 0.0
    total_spent: float = 0.0
    total_remaining: float = 0.0
    total_gifts: int = 0
    total_ideas: int = 0
    total_ordered: int = 0
    total_delivered: int = 0


def summarize_person(person: Person, gifts: Sequence[PersonGift]) -> PersonSummary:
    total_spent = sum(float(gift.amount) for gift in gifts)
    counts = {status: 0 for status in PERSON_GIFT_STATUSES}
    for gift in gifts:
        counts[gift.status] = counts.get(gift.status, 0) + 1
    return PersonSummary(
        person=person,
        gifts=list(gifts),
        total_spent=total_spent,
        remaining_budget=float(person.budget) - total_spent,
        status_counts=counts,
    )


def summarize_all(summaries: Sequence[PersonSummary]) -> BudgetTotals:
    idea, ordered, delivered = PERSON_GIFT_STATUSES
    return BudgetTotals(
        total_budget=sum(float(s.person.budget) for s in summaries),
        total_spent=sum(s.total_spent for s in summaries),
        total_remaining=sum(s.remaining_budget for s in summaries),
        total_gifts=sum(len(s.gifts) for s in summaries),
        total_ideas=sum(s.status_counts.get(idea, 0) for s in summaries),
        total_ordered=sum(s.status_counts.get(ordered, 0) for s in summaries),
        total_delivered=sum(s.status_counts.get(delivered, 0) for s in summaries),
    )


def group_by_status(gifts: Sequence[PersonGift]) -> dict[str, list[PersonGift]]:
    grouped: dict[str, list[PersonGift]] = {status: [] for status in PERSON_GIFT_STATUSES}
    for gift in gifts:
        grouped.setdefault(gift.status, []).append(gift)
    return grouped
