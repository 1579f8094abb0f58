"""
Placement graph — classifies a placeOrder response as nodnod nodes.

    PlacementSpec (injected)
         │
         ▼
      SpecNode
         │
         ├── EmptyResponseNode ─────────────────────────┐
         └── ResponseNode                               │
                ├── RejectedNode ───────────────────────┤
                └── AcceptedNode                        │
                       ├── DeclinedNode ────────────────┤
                       └── SettledNode                  ├── PlacementOutcome (@polymorphic)
                              ├── MissingOrderNode ─────┤            │
                              └── OrderNode             │            ▼
                                     ├── ActionNode ────┤     PlacementResultNode
                                     └── CompletedNode ─┘

Every branch validates its own condition and raises NodeError otherwise,
so exactly one case resolves.

Note: no 'from __future__ import annotations', nodnod reads the hints
at runtime.
"""

from dataclasses import dataclass

from nodnod import NodeError, polymorphic, case

from basketry import _graph as G
from basketry.model import (
    ErrorCode,
    Order,
    PaymentOutcome,
    PlaceOrderResponse,
)

# Provider statuses that mean the charge did not go through.
DECLINED_STATUSES = frozenset({"failed", "declined", "canceled", "requires_payment_method"})


# ═══════════════════════════════════════════════════════════════════════════════
# Input (injected)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PlacementSpec:
    response: PlaceOrderResponse | None


@G.node
class SpecNode:
    def __init__(self, spec: PlacementSpec) -> None:
        self.spec = spec

    @classmethod
    def __compose__(cls, spec: PlacementSpec) -> "SpecNode":
        return cls(spec)


# ═══════════════════════════════════════════════════════════════════════════════
# Response Presence
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class EmptyResponseNode:
    """Validates: server returned no placeOrder data."""

    def __init__(self, spec: PlacementSpec) -> None:
        self.spec = spec

    @classmethod
    def __compose__(cls, node: SpecNode) -> "EmptyResponseNode":
        if node.spec.response is not None:
            raise NodeError("Has response")
        return cls(node.spec)


@G.node
class ResponseNode:
    def __init__(self, response: PlaceOrderResponse, spec: PlacementSpec) -> None:
        self.response = response
        self.spec = spec

    @classmethod
    def __compose__(cls, node: SpecNode) -> "ResponseNode":
        if node.spec.response is None:
            raise NodeError("No response")
        return cls(node.spec.response, node.spec)


# ═══════════════════════════════════════════════════════════════════════════════
# Business Errors
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class RejectedNode:
    """Validates: response carries errors."""

    def __init__(self, response: PlaceOrderResponse) -> None:
        self.response = response

    @classmethod
    def __compose__(cls, node: ResponseNode) -> "RejectedNode":
        if not node.response.errors:
            raise NodeError("No errors")
        return cls(node.response)


@G.node
class AcceptedNode:
    def __init__(self, response: PlaceOrderResponse) -> None:
        self.response = response

    @classmethod
    def __compose__(cls, node: ResponseNode) -> "AcceptedNode":
        if node.response.errors:
            raise NodeError("Has errors")
        return cls(node.response)


def _declined(response: PlaceOrderResponse) -> bool:
    status = (response.payment_transaction_status or "").lower()
    if status in DECLINED_STATUSES:
        return True
    return response.order is not None and response.order.status.lower() == "failed"


@G.node
class DeclinedNode:
    """Validates: provider declined the charge."""

    def __init__(self, response: PlaceOrderResponse) -> None:
        self.response = response

    @classmethod
    def __compose__(cls, node: AcceptedNode) -> "DeclinedNode":
        if not _declined(node.response):
            raise NodeError("Not declined")
        return cls(node.response)


@G.node
class SettledNode:
    def __init__(self, response: PlaceOrderResponse) -> None:
        self.response = response

    @classmethod
    def __compose__(cls, node: AcceptedNode) -> "SettledNode":
        if _declined(node.response):
            raise NodeError("Declined")
        return cls(node.response)


# ═══════════════════════════════════════════════════════════════════════════════
# Order Presence
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class MissingOrderNode:
    def __init__(self, response: PlaceOrderResponse) -> None:
        self.response = response

    @classmethod
    def __compose__(cls, node: SettledNode) -> "MissingOrderNode":
        if node.response.order is not None:
            raise NodeError("Has order")
        return cls(node.response)


@G.node
class OrderNode:
    def __init__(self, order: Order, response: PlaceOrderResponse) -> None:
        self.order = order
        self.response = response

    @classmethod
    def __compose__(cls, node: SettledNode) -> "OrderNode":
        if node.response.order is None:
            raise NodeError("No order")
        return cls(node.response.order, node.response)


@G.node
class ActionNode:
    """Validates: provider asks for out-of-band authentication."""

    def __init__(self, order: Order, response: PlaceOrderResponse) -> None:
        self.order = order
        self.response = response

    @classmethod
    def __compose__(cls, node: OrderNode) -> "ActionNode":
        action = node.response.next_action
        if action is None or not action.requires_action:
            raise NodeError("No action required")
        return cls(node.order, node.response)


@G.node
class CompletedNode:
    def __init__(self, order: Order, response: PlaceOrderResponse) -> None:
        self.order = order
        self.response = response

    @classmethod
    def __compose__(cls, node: OrderNode) -> "CompletedNode":
        action = node.response.next_action
        if action is not None and action.requires_action:
            raise NodeError("Action required")
        return cls(node.order, node.response)


# ═══════════════════════════════════════════════════════════════════════════════
# Polymorphic Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@polymorphic[PaymentOutcome]
class PlacementOutcome:
    """Router — conditions live in the nodes, cases only build outcomes."""

    @case
    def no_data(cls, node: EmptyResponseNode) -> PaymentOutcome:
        return PaymentOutcome.failed(ErrorCode.NO_DATA, "No order data returned")

    @case
    def rejected(cls, node: RejectedNode) -> PaymentOutcome:
        errors = node.response.errors
        return PaymentOutcome.failed(
            ErrorCode.ORDER_ERROR,
            errors[0].message or "Unknown error",
            transaction_status=node.response.payment_transaction_status,
            field_errors=errors,
        )

    @case
    def declined(cls, node: DeclinedNode) -> PaymentOutcome:
        status = node.response.payment_transaction_status
        return PaymentOutcome.failed(
            ErrorCode.ORDER_ERROR,
            f"Payment was declined ({status})" if status else "Payment was declined",
            order=node.response.order,
            transaction_status=status,
        )

    @case
    def no_order(cls, node: MissingOrderNode) -> PaymentOutcome:
        return PaymentOutcome.failed(
            ErrorCode.NO_ORDER,
            "No order created",
            transaction_status=node.response.payment_transaction_status,
        )

    @case
    def action_required(cls, node: ActionNode) -> PaymentOutcome:
        action = node.response.next_action
        if action is None or not action.client_secret:
            return PaymentOutcome.failed(
                ErrorCode.NO_DATA,
                "Payment requires authentication but no client secret was returned",
                order=node.order,
                transaction_status=node.response.payment_transaction_status,
            )
        return PaymentOutcome.action_required(
            node.order,
            client_secret=action.client_secret,
            next_action=action.type,
            transaction_status=node.response.payment_transaction_status,
        )

    @case
    def completed(cls, node: CompletedNode) -> PaymentOutcome:
        return PaymentOutcome.completed(
            node.order,
            transaction_status=node.response.payment_transaction_status,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Final Node
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class PlacementResultNode:
    def __init__(self, outcome: PaymentOutcome) -> None:
        self.outcome = outcome

    @classmethod
    def __compose__(cls, outcome: PlacementOutcome) -> "PlacementResultNode":
        return cls(outcome.value)


async def classify_placement(spec: PlacementSpec) -> PaymentOutcome:
    """Classify a placement response. Exactly one outcome per response."""
    node = await G.compose(PlacementResultNode, spec)
    return node.outcome


__all__ = (
    "DECLINED_STATUSES",
    "PlacementSpec",
    "PlacementOutcome",
    "PlacementResultNode",
    "classify_placement",
)
