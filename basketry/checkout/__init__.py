"""
Checkout — placement, confirmation, orders, and the wallet.

    from basketry import checkout as CO

    checkout = CO.PaymentOrchestrator(gateway, store, config)
    outcome = await checkout.place_order(basket, "pm_123")
    if outcome.requires_action:
        ...
        await checkout.confirm_payment_intent(outcome.order.payment_intent_id)
"""

from basketry.checkout._graph import (
    DECLINED_STATUSES,
    PlacementSpec,
    classify_placement,
)
from basketry.checkout._ledger import IntentState, IntentLedger
from basketry.checkout._orchestrator import PaymentOrchestrator
from basketry.checkout._wallet import Wallet, select_default

__all__ = (
    "DECLINED_STATUSES",
    "PlacementSpec",
    "classify_placement",
    "IntentState",
    "IntentLedger",
    "PaymentOrchestrator",
    "Wallet",
    "select_default",
)
