"""
Basket model — the user's in-progress, unpaid selection.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from basketry._types import Pence


# ═══════════════════════════════════════════════════════════════════════════════
# Course Reference (owned by the catalog)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CourseRef:
    """Reference to a catalog course. The engine never owns course data."""

    id: str
    name: str = ""
    type: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Line Items
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BasketItem:
    """
    One purchasable line.

    Note: total_price is what the server charges for the line after
    per-item discounts; price is the list price.
    """

    id: str
    course: CourseRef
    price: Pence
    total_price: Pence
    is_taster: bool = False
    pay_deposit: bool = False
    assign_to_user_id: str | None = None
    charge_from_date: datetime | None = None
    discount_value: Pence | None = None
    promo_code_discount_value: Pence | None = None
    session_id: str | None = None
    added_at: datetime | None = None

    @property
    def total_discount(self) -> Pence:
        return (self.discount_value or 0) + (self.promo_code_discount_value or 0)

    @property
    def has_discount(self) -> bool:
        return self.total_discount > 0


@dataclass(frozen=True, slots=True)
class CreditItem:
    """Account credit applied to the basket."""

    id: str
    description: str
    value: Pence
    code: str | None = None
    valid_until: datetime | None = None


@dataclass(frozen=True, slots=True)
class FeeItem:
    """Additional charge (registration fee etc.)."""

    id: str
    description: str
    value: Pence
    optional: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Basket
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Basket:
    """
    Server-authoritative basket snapshot.

    Invariants (checked by basketry.pricing):
        total == sub_total - discount_total - promo_code_discount_value
                 - credit_total + tax
        total == charge_total + pay_later
    """

    id: str
    items: tuple[BasketItem, ...] = ()
    sub_total: Pence = 0
    discount_total: Pence = 0
    promo_code_discount_value: Pence = 0
    credit_total: Pence = 0
    tax: Pence = 0
    total: Pence = 0
    charge_total: Pence = 0
    pay_later: Pence = 0
    discount_value: Pence = 0
    credit_items: tuple[CreditItem, ...] = ()
    fee_items: tuple[FeeItem, ...] = ()
    user_id: str | None = None
    session_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    expires_at: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def has_discounts(self) -> bool:
        return self.discount_total > 0 or self.promo_code_discount_value > 0

    @property
    def has_credits(self) -> bool:
        return self.credit_total > 0

    @property
    def has_pay_later(self) -> bool:
        return self.pay_later > 0

    @property
    def total_savings(self) -> Pence:
        return self.discount_total + self.promo_code_discount_value + self.credit_total

    @property
    def taster_items(self) -> tuple[BasketItem, ...]:
        return tuple(i for i in self.items if i.is_taster)

    @property
    def course_items(self) -> tuple[BasketItem, ...]:
        return tuple(i for i in self.items if not i.is_taster)

    def item_for_course(self, course_id: str) -> BasketItem | None:
        for item in self.items:
            if item.course.id == course_id:
                return item
        return None

    def contains_course(self, course_id: str) -> bool:
        return self.item_for_course(course_id) is not None


__all__ = (
    "CourseRef",
    "BasketItem",
    "CreditItem",
    "FeeItem",
    "Basket",
)
