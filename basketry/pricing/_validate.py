"""
Basket money invariants — pure, no I/O.

    total == sub_total - discount_total - promo_code_discount_value - credit_total + tax
    total == charge_total + pay_later
    every money field >= 0
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from basketry._types import Pence
from basketry.model import Basket
from basketry.pricing._types import InvariantViolation, ViolationKind

# ═══════════════════════════════════════════════════════════════════════════════
# Money Fields
# ═══════════════════════════════════════════════════════════════════════════════

MONEY_FIELDS: tuple[str, ...] = (
    "sub_total",
    "discount_total",
    "promo_code_discount_value",
    "credit_total",
    "tax",
    "total",
    "charge_total",
    "pay_later",
)


def expected_total(basket: Basket) -> Pence:
    """Total implied by the component fields."""
    return (
        basket.sub_total
        - basket.discount_total
        - basket.promo_code_discount_value
        - basket.credit_total
        + basket.tax
    )


# ═══════════════════════════════════════════════════════════════════════════════
# validate()
# ═══════════════════════════════════════════════════════════════════════════════


def violations(basket: Basket) -> tuple[InvariantViolation, ...]:
    """Every failed check, in field order. Empty tuple means consistent."""
    found: list[InvariantViolation] = []

    for name in MONEY_FIELDS:
        value = getattr(basket, name)
        if value < 0:
            found.append(InvariantViolation(ViolationKind.NEGATIVE, name, 0, value))

    implied = expected_total(basket)
    if basket.total != implied:
        found.append(
            InvariantViolation(ViolationKind.TOTAL_MISMATCH, "total", implied, basket.total)
        )

    split = basket.charge_total + basket.pay_later
    if basket.total != split:
        found.append(
            InvariantViolation(
                ViolationKind.SPLIT_MISMATCH,
                "charge_total",
                basket.total - basket.pay_later,
                basket.charge_total,
            )
        )

    return tuple(found)


def validate(basket: Basket) -> Result[Basket, tuple[InvariantViolation, ...]]:
    """
    Check a basket snapshot.

    Example:
        match validate(basket):
            case Ok(b): render(b)
            case Error(vs): log.warning("Basket inconsistent", violations=vs)
    """
    found = violations(basket)
    if found:
        return Error(found)
    return Ok(basket)


def is_consistent(basket: Basket) -> bool:
    return not violations(basket)


# ═══════════════════════════════════════════════════════════════════════════════
# derive_charge_split()
# ═══════════════════════════════════════════════════════════════════════════════


def derive_charge_split(total: Pence, pay_later_requested: Pence) -> tuple[Pence, Pence]:
    """
    Optimistic local split of a total into (charge_total, pay_later).

    Display only; the server's figures always win. Deferred part is
    clamped to [0, total].
    """
    total = max(total, 0)
    pay_later = min(max(pay_later_requested, 0), total)
    return total - pay_later, pay_later


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "MONEY_FIELDS",
    "expected_total",
    "violations",
    "validate",
    "is_consistent",
    "derive_charge_split",
)
