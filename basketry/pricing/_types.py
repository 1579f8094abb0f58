"""
Pricing types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from basketry._types import Pence


class ViolationKind(Enum):
    """Which basket equation failed."""

    TOTAL_MISMATCH = auto()
    SPLIT_MISMATCH = auto()
    NEGATIVE = auto()


@dataclass(frozen=True, slots=True)
class InvariantViolation:
    """
    One failed money check.

    field names the basket attribute that disagrees; expected is what the
    other fields imply, actual is what the snapshot carries.
    """

    kind: ViolationKind
    field: str
    expected: Pence
    actual: Pence

    def describe(self) -> str:
        return f"{self.kind.name.lower()}: {self.field} expected {self.expected}, got {self.actual}"


__all__ = ("ViolationKind", "InvariantViolation")
