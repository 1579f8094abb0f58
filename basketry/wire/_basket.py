"""
Basket payloads.
"""

from __future__ import annotations

from datetime import datetime

from basketry.model import Basket, BasketItem, CourseRef, CreditItem, FeeItem
from basketry.wire._types import WireModel


class CourseWire(WireModel):
    id: str
    name: str = ""
    type: str | None = None

    def to_domain(self) -> CourseRef:
        return CourseRef(id=self.id, name=self.name, type=self.type)


class BasketItemWire(WireModel):
    id: str
    course: CourseWire
    price: int
    total_price: int
    is_taster: bool = False
    pay_deposit: bool = False
    assign_to_user_id: str | None = None
    charge_from_date: datetime | None = None
    discount_value: int | None = None
    promo_code_discount_value: int | None = None
    session_id: str | None = None
    added_at: datetime | None = None

    def to_domain(self) -> BasketItem:
        return BasketItem(
            id=self.id,
            course=self.course.to_domain(),
            price=self.price,
            total_price=self.total_price,
            is_taster=self.is_taster,
            pay_deposit=self.pay_deposit,
            assign_to_user_id=self.assign_to_user_id,
            charge_from_date=self.charge_from_date,
            discount_value=self.discount_value,
            promo_code_discount_value=self.promo_code_discount_value,
            session_id=self.session_id,
            added_at=self.added_at,
        )


class CreditItemWire(WireModel):
    id: str
    description: str
    value: int
    code: str | None = None
    valid_until: datetime | None = None

    def to_domain(self) -> CreditItem:
        return CreditItem(
            id=self.id,
            description=self.description,
            value=self.value,
            code=self.code,
            valid_until=self.valid_until,
        )


class FeeItemWire(WireModel):
    id: str
    description: str
    value: int
    optional: bool = False

    def to_domain(self) -> FeeItem:
        return FeeItem(id=self.id, description=self.description, value=self.value, optional=self.optional)


class BasketWire(WireModel):
    id: str
    items: list[BasketItemWire] = []
    sub_total: int = 0
    discount_total: int = 0
    promo_code_discount_value: int = 0
    credit_total: int = 0
    tax: int = 0
    total: int = 0
    charge_total: int = 0
    pay_later: int = 0
    discount_value: int = 0
    credit_items: list[CreditItemWire] = []
    fee_items: list[FeeItemWire] = []
    user_id: str | None = None
    session_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    expires_at: datetime | None = None

    def to_domain(self) -> Basket:
        return Basket(
            id=self.id,
            items=tuple(i.to_domain() for i in self.items),
            sub_total=self.sub_total,
            discount_total=self.discount_total,
            promo_code_discount_value=self.promo_code_discount_value,
            credit_total=self.credit_total,
            tax=self.tax,
            total=self.total,
            charge_total=self.charge_total,
            pay_later=self.pay_later,
            discount_value=self.discount_value,
            credit_items=tuple(c.to_domain() for c in self.credit_items),
            fee_items=tuple(f.to_domain() for f in self.fee_items),
            user_id=self.user_id,
            session_id=self.session_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
            expires_at=self.expires_at,
        )

    @classmethod
    def from_domain(cls, dom: Basket) -> BasketWire:
        """Used by fakes and fixtures to build server-shaped payloads."""
        return cls.model_validate(
            {
                "id": dom.id,
                "items": [
                    {
                        "id": i.id,
                        "course": {"id": i.course.id, "name": i.course.name, "type": i.course.type},
                        "price": i.price,
                        "total_price": i.total_price,
                        "is_taster": i.is_taster,
                        "pay_deposit": i.pay_deposit,
                        "assign_to_user_id": i.assign_to_user_id,
                        "charge_from_date": i.charge_from_date,
                    }
                    for i in dom.items
                ],
                "sub_total": dom.sub_total,
                "discount_total": dom.discount_total,
                "promo_code_discount_value": dom.promo_code_discount_value,
                "credit_total": dom.credit_total,
                "tax": dom.tax,
                "total": dom.total,
                "charge_total": dom.charge_total,
                "pay_later": dom.pay_later,
            }
        )


__all__ = (
    "CourseWire",
    "BasketItemWire",
    "CreditItemWire",
    "FeeItemWire",
    "BasketWire",
)
