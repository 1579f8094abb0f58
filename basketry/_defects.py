"""
Defect guard — strict vs. degraded handling of unexpected exceptions.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from combinators import lift as L
from kungfu import Result, Ok, Error

logger = structlog.get_logger(__name__)


async def guarded[T](
    operation: str,
    call: Callable[[], Awaitable[T]],
    *,
    strict: bool,
) -> Result[T, Exception]:
    """
    Run call, turning a raised defect into Error(exc).

    strict=True lets the exception propagate untouched. Otherwise it is
    logged with traceback and returned as a value.

    Example:
        match await guarded("add_item", lambda: gateway.add_item(...), strict=False):
            case Ok(result): ...
            case Error(exc): return exception_error(exc)
    """
    if strict:
        return Ok(await call())

    result = await L.catching_async(call, on_error=lambda e: e)
    match result:
        case Error(exc):
            logger.error("Unexpected failure", operation=operation, exc_info=exc)
    return result


__all__ = ("guarded",)
