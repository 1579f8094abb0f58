"""
Pricing — basket money invariants.

    from basketry import pricing as P

    match P.validate(basket):
        case Ok(b): ...
        case Error(violations): ...

    charge_now, later = P.derive_charge_split(5000, 3000)   # (2000, 3000)
"""

from basketry.pricing._types import ViolationKind, InvariantViolation
from basketry.pricing._validate import (
    MONEY_FIELDS,
    expected_total,
    violations,
    validate,
    is_consistent,
    derive_charge_split,
)

__all__ = (
    "ViolationKind",
    "InvariantViolation",
    "MONEY_FIELDS",
    "expected_total",
    "violations",
    "validate",
    "is_consistent",
    "derive_charge_split",
)
