"""
Item mutation coordinator — every basket-changing intent goes through here.

Per operation:
    1. validate input locally           → INVALID_INPUT
    2. refuse while checkout holds it   → BUSY
    3. wait FIFO for the mutation lock
    4. fetch-or-create the basket if the store is empty
    5. one gateway call
    6. commit the server basket, or leave the snapshot untouched on failure
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime

import structlog
from kungfu import Result, Ok, Error

from basketry._defects import guarded
from basketry.config import EngineConfig
from basketry.gateway import BackendGateway, GatewayError, GatewayErrorKind, GatewayResult
from basketry.model import (
    Basket,
    ErrorCode,
    MutationError,
    MutationResponse,
    OperationResult,
)
from basketry.store import BasketStateStore

logger = structlog.get_logger(__name__)

type MutationCall = Callable[[], Awaitable[GatewayResult[MutationResponse]]]


# ═══════════════════════════════════════════════════════════════════════════════
# Error Mapping
# ═══════════════════════════════════════════════════════════════════════════════


def busy() -> MutationError:
    return MutationError(ErrorCode.BUSY, "Basket is locked while checkout is in progress")


def invalid_input(message: str) -> MutationError:
    return MutationError(ErrorCode.INVALID_INPUT, message)


def from_gateway(error: GatewayError) -> MutationError:
    match error.kind:
        case GatewayErrorKind.TRANSPORT:
            return MutationError(ErrorCode.NETWORK_ERROR, error.message)
        case GatewayErrorKind.GRAPHQL:
            return MutationError(ErrorCode.BUSINESS_RULE, error.message)
        case GatewayErrorKind.EMPTY:
            return MutationError(ErrorCode.NO_DATA, error.message)


def from_exception(exc: Exception) -> MutationError:
    return MutationError(ErrorCode.EXCEPTION_ERROR, str(exc) or type(exc).__name__)


def rejected(response: MutationResponse) -> MutationError:
    return MutationError(
        code=response.error_code or ErrorCode.BUSINESS_RULE,
        message=response.message or "Request was rejected",
        field_errors=response.errors,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Coordinator
# ═══════════════════════════════════════════════════════════════════════════════


class MutationCoordinator:
    """
    Serializes basket mutations and reconciles the store with the server.

    Concurrent calls queue behind the in-flight one; each observes the
    previous call's committed basket.

    Example:
        match await coordinator.add_item("42", "course"):
            case Ok(basket): render(basket)
            case Error(err): show(err.message)
    """

    def __init__(
        self,
        gateway: BackendGateway,
        store: BasketStateStore,
        config: EngineConfig = EngineConfig(),
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._config = config

    @property
    def store(self) -> BasketStateStore:
        return self._store

    # ───────────────────────────────────────────────────────────────────────────
    # Operations
    # ───────────────────────────────────────────────────────────────────────────

    async def add_item(
        self,
        course_id: str,
        item_type: str,
        *,
        pay_deposit: bool | None = None,
        assign_to_user_id: str | None = None,
        charge_from_date: datetime | None = None,
    ) -> OperationResult[Basket]:
        if not course_id.strip() or not item_type.strip():
            return Error(invalid_input("course_id and item_type are required"))
        return await self._mutate(
            "add_item",
            lambda: self._gateway.add_item(
                course_id,
                item_type,
                pay_deposit=pay_deposit,
                assign_to_user_id=assign_to_user_id,
                charge_from_date=charge_from_date,
            ),
            course_id=course_id,
        )

    async def remove_item(self, course_id: str, item_type: str) -> OperationResult[Basket]:
        if not course_id.strip() or not item_type.strip():
            return Error(invalid_input("course_id and item_type are required"))
        return await self._mutate(
            "remove_item",
            lambda: self._gateway.remove_item(course_id, item_type),
            course_id=course_id,
        )

    async def toggle_credit(self, use_credit: bool) -> OperationResult[Basket]:
        return await self._mutate(
            "toggle_credit",
            lambda: self._gateway.use_credit_for_basket(use_credit),
            use_credit=use_credit,
        )

    async def apply_promo_code(self, code: str) -> OperationResult[Basket]:
        code = code.strip()
        if not code:
            return Error(invalid_input("Promo code is required"))
        return await self._mutate(
            "apply_promo_code",
            lambda: self._gateway.apply_promo_code(code),
            promo_code=code,
        )

    async def remove_promo_code(self) -> OperationResult[Basket]:
        return await self._mutate("remove_promo_code", self._gateway.remove_promo_code)

    async def clear(self) -> OperationResult[None]:
        """Destroy the server basket, then forget the local one."""
        if self._store.lock.held_by_checkout:
            return Error(busy())

        async with self._store.lock:
            if self._store.lock.held_by_checkout:
                return Error(busy())

            match await guarded("clear", self._gateway.destroy_basket, strict=self._config.strict):
                case Error(exc):
                    return Error(from_exception(exc))
                case Ok(Error(e)):
                    return Error(from_gateway(e))
                case Ok(Ok(False)):
                    return Error(MutationError(ErrorCode.BUSINESS_RULE, "Basket could not be cleared"))
                case Ok(Ok(_)):
                    basket = self._store.get()
                    self._store.reset()
                    logger.info("Basket cleared", basket_id=basket.id if basket else None)
                    return Ok(None)

    async def ensure_basket(self) -> OperationResult[Basket]:
        """Current basket, fetching or creating it if the store is empty."""
        async with self._store.lock:
            return await self._ensure_locked()

    async def refresh(self) -> OperationResult[Basket | None]:
        """
        Re-read the server basket.

        Ok(None) when the server has no basket; the store is reset.
        On failure the store moves to ERROR and keeps its snapshot.
        BUSY while checkout holds the basket.
        """
        if self._store.lock.held_by_checkout:
            return Error(busy())

        async with self._store.lock:
            if self._store.lock.held_by_checkout:
                return Error(busy())

            self._store.begin_loading()
            match await guarded("refresh", self._gateway.get_basket, strict=self._config.strict):
                case Error(exc):
                    error = from_exception(exc)
                case Ok(Error(e)):
                    error = from_gateway(e)
                case Ok(Ok(None)):
                    self._store.reset()
                    return Ok(None)
                case Ok(Ok(basket)):
                    return Ok(await self._adopt("refresh", basket))

            self._store.fail(error.message)
            return Error(error)

    # ───────────────────────────────────────────────────────────────────────────
    # Internals
    # ───────────────────────────────────────────────────────────────────────────

    async def _mutate(self, operation: str, call: MutationCall, **context: object) -> OperationResult[Basket]:
        if self._store.lock.held_by_checkout:
            logger.info("Basket mutation rejected", operation=operation, reason="busy")
            return Error(busy())

        async with self._store.lock:
            # Placement may have taken the basket while this call was queued.
            if self._store.lock.held_by_checkout:
                logger.info("Basket mutation rejected", operation=operation, reason="busy")
                return Error(busy())

            if self._store.get() is None:
                match await self._ensure_locked():
                    case Error(e):
                        return Error(e)
                    case Ok(_):
                        pass

            return await self._commit(operation, call, **context)

    async def _commit(self, operation: str, call: MutationCall, **context: object) -> OperationResult[Basket]:
        match await guarded(operation, call, strict=self._config.strict):
            case Error(exc):
                return Error(from_exception(exc))
            case Ok(Error(e)):
                logger.warning("Basket mutation failed", operation=operation, error=e.message, **context)
                return Error(from_gateway(e))
            case Ok(Ok(response)) if not response.success:
                error = rejected(response)
                logger.info(
                    "Basket mutation rejected",
                    operation=operation,
                    error_code=error.code,
                    error=error.message,
                    **context,
                )
                return Error(error)
            case Ok(Ok(MutationResponse(basket=None))):
                return Error(MutationError(ErrorCode.NO_DATA, "No basket returned"))
            case Ok(Ok(MutationResponse(basket=basket))):
                committed = await self._adopt(operation, basket)
                logger.info(
                    "Basket updated",
                    operation=operation,
                    basket_id=committed.id,
                    item_count=committed.item_count,
                    total=committed.total,
                    **context,
                )
                return Ok(committed)

    async def _ensure_locked(self) -> OperationResult[Basket]:
        current = self._store.get()
        if current is not None:
            return Ok(current)

        self._store.begin_loading()
        match await guarded("get_basket", self._gateway.get_basket, strict=self._config.strict):
            case Error(exc):
                error = from_exception(exc)
            case Ok(Error(e)):
                error = from_gateway(e)
            case Ok(Ok(None)):
                return await self._create_locked()
            case Ok(Ok(basket)):
                return Ok(await self._adopt("get_basket", basket))

        self._store.fail(error.message)
        return Error(error)

    async def _create_locked(self) -> OperationResult[Basket]:
        result = await self._commit("init_basket", self._gateway.init_basket)
        match result:
            case Error(e):
                self._store.fail(e.message)
            case Ok(basket):
                logger.info("Basket created", basket_id=basket.id)
        return result

    async def _adopt(self, operation: str, basket: Basket) -> Basket:
        """
        Commit a server basket; on an invariant violation re-fetch once.

        Returns whatever ends up in the store.
        """
        match self._store.replace(basket):
            case Ok(_):
                return basket
            case Error(_):
                pass

        logger.info("Re-fetching basket after invariant violation", operation=operation, basket_id=basket.id)
        match await guarded("get_basket", self._gateway.get_basket, strict=self._config.strict):
            case Ok(Ok(fresh)) if fresh is not None:
                self._store.replace(fresh)
                return fresh
            case Ok(Error(e)):
                logger.warning("Basket re-fetch failed", basket_id=basket.id, error=e.message)
        return basket


__all__ = (
    "MutationCoordinator",
    "busy",
    "invalid_input",
    "from_gateway",
    "from_exception",
    "rejected",
)
