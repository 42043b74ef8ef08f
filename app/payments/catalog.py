"""
Plan catalog: the read-only price list consumed by order creation.

Plans are configured in major currency units (``PAYMENT_PLANS`` setting)
and converted to minor units once, here.

Usage:
    catalog = PlanCatalog.from_mapping({
        "standard": {"questions": 10, "price": 299, "name": "Standard Plan"},
    })
    catalog.get("standard").price_minor_units  # 29900
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from typing import Any


MINOR_UNITS_PER_MAJOR = 100

DEFAULT_PLANS: dict[str, dict[str, Any]] = {
    "basic": {"questions": 5, "price": 199, "name": "Basic Plan"},
    "standard": {"questions": 10, "price": 299, "name": "Standard Plan"},
    "premium": {"questions": 20, "price": 399, "name": "Premium Plan"},
    "report": {"questions": 0, "price": 999, "name": "Full Report"},
}


@dataclass(frozen=True)
class Plan:
    """
    A purchasable plan.

    Attributes:
        plan_id: Catalog key (e.g. "standard")
        question_count: Questions unlocked by the plan
        price_minor_units: Flat price in the smallest currency unit
        display_name: Name shown to the customer
    """

    plan_id: str
    question_count: int
    price_minor_units: int
    display_name: str

    @property
    def price(self) -> float:
        """Price in major units, for display only."""
        return self.price_minor_units / MINOR_UNITS_PER_MAJOR

    @property
    def description(self) -> str:
        return f"{self.display_name} - {self.question_count} Questions"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.plan_id,
            "name": self.display_name,
            "questions": self.question_count,
            "price": self.price,
            "price_minor_units": self.price_minor_units,
        }


class PlanCatalog:
    """Immutable lookup of plans by id, in configuration order."""

    def __init__(self, plans: list[Plan]) -> None:
        self._plans = {plan.plan_id: plan for plan in plans}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Mapping[str, Any]]) -> PlanCatalog:
        """
        Build a catalog from ``{plan_id: {questions, price, name}}``.

        ``price`` is in major units and may be an int or a numeric string.
        """
        plans = []
        for plan_id, entry in mapping.items():
            price = entry["price"]
            plans.append(
                Plan(
                    plan_id=plan_id,
                    question_count=int(entry.get("questions", 0)),
                    price_minor_units=round(float(price) * MINOR_UNITS_PER_MAJOR),
                    display_name=entry.get("name") or plan_id.title(),
                )
            )
        return cls(plans)

    @classmethod
    def default(cls) -> PlanCatalog:
        return cls.from_mapping(DEFAULT_PLANS)

    def get(self, plan_id: str | None) -> Plan | None:
        if plan_id is None:
            return None
        return self._plans.get(plan_id)

    def all(self) -> list[Plan]:
        return list(self._plans.values())

    def ids(self) -> list[str]:
        return list(self._plans)

    def __contains__(self, plan_id: object) -> bool:
        return plan_id in self._plans

    def __iter__(self) -> Iterator[Plan]:
        return iter(self._plans.values())

    def __len__(self) -> int:
        return len(self._plans)
