"""
Result types — what basket and payment operations hand back to callers.

Nothing here is raised. Expected failures travel as values:

    OperationResult[Basket] = Ok(basket) | Error(MutationError)
    PaymentOutcome          = tagged by PaymentState
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum, auto

from kungfu import Result

from basketry._types import Pence
from basketry.model._checkout import Order


# ═══════════════════════════════════════════════════════════════════════════════
# Error Codes
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorCode(StrEnum):
    NETWORK_ERROR = "NETWORK_ERROR"
    ORDER_ERROR = "ORDER_ERROR"
    NO_DATA = "NO_DATA"
    NO_ORDER = "NO_ORDER"
    EXCEPTION_ERROR = "EXCEPTION_ERROR"
    TIMEOUT = "TIMEOUT"
    BUSY = "BUSY"
    EMPTY_BASKET = "EMPTY_BASKET"
    INVALID_INPUT = "INVALID_INPUT"
    TOTAL_CHANGED = "TOTAL_CHANGED"
    BUSINESS_RULE = "BUSINESS_RULE"
    USER_CANCELLED = "USER_CANCELLED"


@dataclass(frozen=True, slots=True)
class FieldError:
    """Per-field validation error returned by the backend."""

    path: str
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Basket Mutations
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class MutationError:
    """
    Why a basket mutation did not commit.

    code is an ErrorCode for engine-side failures, or the backend's error
    path for business-rule rejections (e.g. "promoCode").
    """

    code: str
    message: str
    field_errors: tuple[FieldError, ...] = ()

    @property
    def is_busy(self) -> bool:
        return self.code == ErrorCode.BUSY


type OperationResult[T] = Result[T, MutationError]


# ═══════════════════════════════════════════════════════════════════════════════
# Payment
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentState(Enum):
    """
    Payment state machine.

    Lifecycle:
        IDLE → PLACING → COMPLETED
                       → ACTION_REQUIRED → COMPLETED | FAILED | CANCELLED
                       → FAILED
    """

    IDLE = auto()
    PLACING = auto()
    ACTION_REQUIRED = auto()
    COMPLETED = auto()
    FAILED = auto()
    CANCELLED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (PaymentState.COMPLETED, PaymentState.FAILED, PaymentState.CANCELLED)

    @property
    def holds_basket(self) -> bool:
        return self in (PaymentState.PLACING, PaymentState.ACTION_REQUIRED)


@dataclass(frozen=True, slots=True)
class PaymentOutcome:
    """Transient result of placement/confirmation. Never persisted."""

    state: PaymentState
    order: Order | None = None
    client_secret: str | None = None
    next_action: str = "none"
    payment_transaction_status: str | None = None
    error: str | None = None
    error_code: str | None = None
    field_errors: tuple[FieldError, ...] = ()
    charge_total: Pence | None = None

    @property
    def success(self) -> bool:
        return self.state in (PaymentState.COMPLETED, PaymentState.ACTION_REQUIRED)

    @property
    def is_user_cancellation(self) -> bool:
        return self.state is PaymentState.CANCELLED

    @property
    def requires_action(self) -> bool:
        return self.state is PaymentState.ACTION_REQUIRED

    @classmethod
    def completed(cls, order: Order, transaction_status: str | None = None) -> PaymentOutcome:
        return cls(
            state=PaymentState.COMPLETED,
            order=order,
            payment_transaction_status=transaction_status,
        )

    @classmethod
    def action_required(
        cls,
        order: Order,
        client_secret: str,
        next_action: str,
        transaction_status: str | None = None,
    ) -> PaymentOutcome:
        return cls(
            state=PaymentState.ACTION_REQUIRED,
            order=order,
            client_secret=client_secret,
            next_action=next_action,
            payment_transaction_status=transaction_status,
        )

    @classmethod
    def failed(
        cls,
        code: str,
        message: str,
        *,
        order: Order | None = None,
        transaction_status: str | None = None,
        field_errors: tuple[FieldError, ...] = (),
        charge_total: Pence | None = None,
    ) -> PaymentOutcome:
        return cls(
            state=PaymentState.FAILED,
            order=order,
            error=message,
            error_code=code,
            payment_transaction_status=transaction_status,
            field_errors=field_errors,
            charge_total=charge_total,
        )

    @classmethod
    def cancelled(cls, order: Order | None = None) -> PaymentOutcome:
        return cls(
            state=PaymentState.CANCELLED,
            order=order,
            error="Payment authentication was cancelled",
            error_code=ErrorCode.USER_CANCELLED,
        )


__all__ = (
    "ErrorCode",
    "FieldError",
    "MutationError",
    "OperationResult",
    "PaymentState",
    "PaymentOutcome",
)
