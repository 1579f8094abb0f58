"""
Engine facade — wires one user session.

    gateway = GraphQLGateway(config=config)
    engine = CheckoutEngine(gateway, config)

    await engine.basket.add_item("42", "course")
    outcome = await engine.checkout.place_order(engine.store.get(), method.id)
"""

from __future__ import annotations

import structlog

from basketry.basket import MutationCoordinator
from basketry.checkout import IntentLedger, PaymentOrchestrator, Wallet
from basketry.config import EngineConfig
from basketry.gateway import BackendGateway
from basketry.store import BasketStateStore, BasketView

logger = structlog.get_logger(__name__)


class CheckoutEngine:
    """Constructor-injected wiring of store, coordinator, checkout and wallet."""

    def __init__(self, gateway: BackendGateway, config: EngineConfig = EngineConfig()) -> None:
        self.config = config
        self.gateway = gateway
        self.store = BasketStateStore()
        self.basket = MutationCoordinator(gateway, self.store, config)
        self.checkout = PaymentOrchestrator(gateway, self.store, config, IntentLedger())
        self.wallet = Wallet(gateway, config)

    @property
    def view(self) -> BasketView:
        """Read-only access for UI layers."""
        return self.store

    async def reset(self) -> None:
        """Logout: forget the basket, the payment state and cached wallet data."""
        self.checkout.reset()
        self.store.reset()
        await self.wallet.invalidate()
        logger.info("Session reset")


__all__ = ("CheckoutEngine",)
