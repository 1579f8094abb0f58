"""
Wallet — saved payment methods and the provider's publishable key.

Both are cached with a TTL; every write invalidates the method cache.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from kungfu import Result, Ok, Error

from basketry import cache as C
from basketry._defects import guarded
from basketry.basket import from_exception, from_gateway, invalid_input
from basketry.config import EngineConfig
from basketry.gateway import BackendGateway, GatewayResult
from basketry.model import Address, MutationError, OperationResult, PaymentMethod

logger = structlog.get_logger(__name__)

METHODS_KEY = "payment_methods"
PUBLISHABLE_KEY = "publishable_key"


def select_default(methods: tuple[PaymentMethod, ...]) -> PaymentMethod | None:
    """The method flagged default, else the first, else None."""
    for method in methods:
        if method.is_default:
            return method
    return methods[0] if methods else None


class Wallet:
    """
    Example:
        match await wallet.default_method():
            case Ok(method) if method is not None: pay_with(method.id)
            case Ok(None): ask_for_card()
            case Error(err): show(err.message)
    """

    def __init__(self, gateway: BackendGateway, config: EngineConfig = EngineConfig()) -> None:
        self._gateway = gateway
        self._config = config
        self._methods = (
            C.cache(lambda _: METHODS_KEY, self._fetch_methods)
            .tier(C.TTLTier[tuple[PaymentMethod, ...]](ttl=config.payment_methods_ttl, max_size=1))
            .build()
        )
        self._key = (
            C.cache(lambda _: PUBLISHABLE_KEY, self._fetch_key)
            .tier(C.TTLTier[str](ttl=config.publishable_key_ttl, max_size=1))
            .build()
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    async def payment_methods(self, refresh: bool = False) -> OperationResult[tuple[PaymentMethod, ...]]:
        if refresh:
            await self._methods.invalidate(None)
        match await self._methods.get(None):
            case Ok(cached):
                return Ok(cached.value)
            case Error(e):
                return Error(e)

    async def default_method(self) -> OperationResult[PaymentMethod | None]:
        match await self.payment_methods():
            case Ok(methods):
                return Ok(select_default(methods))
            case Error(e):
                return Error(e)

    async def publishable_key(self) -> OperationResult[str]:
        """Provider key, passed through unexamined."""
        match await self._key.get(None):
            case Ok(cached):
                return Ok(cached.value)
            case Error(e):
                return Error(e)

    # ───────────────────────────────────────────────────────────────────────────
    # Writes
    # ───────────────────────────────────────────────────────────────────────────

    async def add(
        self,
        provider_token: str,
        billing_address: Address,
        set_as_default: bool = False,
    ) -> OperationResult[PaymentMethod]:
        if not provider_token.strip():
            return Error(invalid_input("Provider token is required"))

        result = await self._call(
            "create_payment_method",
            lambda: self._gateway.create_payment_method(provider_token, billing_address, set_as_default),
        )
        match result:
            case Ok(method):
                await self._methods.invalidate(None)
                logger.info("Payment method added", payment_method_id=method.id, is_default=method.is_default)
        return result

    async def delete(self, payment_method_id: str) -> bool:
        return await self._flag(
            "delete_payment_method",
            payment_method_id,
            lambda: self._gateway.delete_payment_method(payment_method_id),
        )

    async def set_default(self, payment_method_id: str) -> bool:
        return await self._flag(
            "set_default_payment_method",
            payment_method_id,
            lambda: self._gateway.set_default_payment_method(payment_method_id),
        )

    async def invalidate(self) -> None:
        """Drop everything cached (logout)."""
        await self._methods.invalidate(None)
        await self._key.invalidate(None)

    # ───────────────────────────────────────────────────────────────────────────
    # Internals
    # ───────────────────────────────────────────────────────────────────────────

    async def _call[T](
        self,
        operation: str,
        call: Callable[[], Awaitable[GatewayResult[T]]],
    ) -> Result[T, MutationError]:
        match await guarded(operation, call, strict=self._config.strict):
            case Error(exc):
                return Error(from_exception(exc))
            case Ok(Error(e)):
                logger.warning("Wallet request failed", operation=operation, error=e.message)
                return Error(from_gateway(e))
            case Ok(Ok(value)):
                return Ok(value)

    async def _flag(
        self,
        operation: str,
        payment_method_id: str,
        call: Callable[[], Awaitable[GatewayResult[bool]]],
    ) -> bool:
        if not payment_method_id.strip():
            return False
        match await self._call(operation, call):
            case Ok(True):
                await self._methods.invalidate(None)
                logger.info("Wallet updated", operation=operation, payment_method_id=payment_method_id)
                return True
            case _:
                return False

    async def _fetch_methods(self, _: None) -> Result[tuple[PaymentMethod, ...], MutationError]:
        return await self._call("get_payment_methods", self._gateway.get_payment_methods)

    async def _fetch_key(self, _: None) -> Result[str, MutationError]:
        return await self._call("get_stripe_publishable_key", self._gateway.get_stripe_publishable_key)


__all__ = ("Wallet", "select_default")
