"""
Engine configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "BASKETRY_"


def _clean_env(v: str) -> str:
    return v.strip().strip("'").strip('"')


def _env(name: str) -> str | None:
    value = os.getenv(ENV_PREFIX + name)
    if value is None:
        return None
    value = _clean_env(value)
    return value or None


def _env_seconds(name: str) -> timedelta | None:
    value = _env(name)
    return timedelta(seconds=float(value)) if value is not None else None


def _env_flag(name: str) -> bool | None:
    value = _env(name)
    if value is None:
        return None
    return value.lower() in ("1", "true", "yes", "on")


# ═══════════════════════════════════════════════════════════════════════════════
# EngineConfig
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """
    Engine configuration.

    Fluent builder pattern, each method returns a new config.

    Example:
        config = (
            EngineConfig()
            .with_endpoint("https://api.example.com/graphql", token=jwt)
            .with_action_timeout(minutes=10)
            .with_strict()
        )

    action_timeout — how long ACTION_REQUIRED may wait for the customer
                     before moving to FAILED/TIMEOUT. None waits forever.
    verify_totals  — re-read the server basket before placing and refuse
                     to charge a figure the customer has not seen.
    strict         — let defects (malformed payloads, unexpected
                     exceptions) propagate instead of degrading to
                     EXCEPTION_ERROR. Use in development.
    """

    endpoint: str = "http://localhost:4000/graphql"
    token: str | None = None
    request_timeout: timedelta = timedelta(seconds=30)
    action_timeout: timedelta | None = None
    payment_methods_ttl: timedelta = timedelta(minutes=5)
    publishable_key_ttl: timedelta = timedelta(hours=1)
    currency: str = "gbp"
    verify_totals: bool = True
    strict: bool = False

    def with_endpoint(self, endpoint: str, *, token: str | None = None) -> EngineConfig:
        return replace(self, endpoint=endpoint, token=token if token is not None else self.token)

    def with_token(self, token: str | None) -> EngineConfig:
        return replace(self, token=token)

    def with_request_timeout(self, *, seconds: float) -> EngineConfig:
        return replace(self, request_timeout=timedelta(seconds=seconds))

    def with_action_timeout(
        self,
        *,
        seconds: float | None = None,
        minutes: float | None = None,
        delta: timedelta | None = None,
    ) -> EngineConfig:
        """
        Example:
            .with_action_timeout(minutes=10)
            .with_action_timeout()           # no timeout

        Zero or negative durations mean no timeout.
        """
        if delta is not None:
            timeout = delta if delta > timedelta(0) else None
        else:
            total_seconds = (seconds or 0) + (minutes or 0) * 60
            timeout = timedelta(seconds=total_seconds) if total_seconds > 0 else None
        return replace(self, action_timeout=timeout)

    def with_cache_ttl(
        self,
        *,
        payment_methods: timedelta | None = None,
        publishable_key: timedelta | None = None,
    ) -> EngineConfig:
        """A zero TTL turns that cache off; None keeps the current TTL."""
        return replace(
            self,
            payment_methods_ttl=payment_methods if payment_methods is not None else self.payment_methods_ttl,
            publishable_key_ttl=publishable_key if publishable_key is not None else self.publishable_key_ttl,
        )

    def with_currency(self, currency: str) -> EngineConfig:
        return replace(self, currency=currency.lower())

    def with_verify_totals(self, verify: bool = True) -> EngineConfig:
        return replace(self, verify_totals=verify)

    def with_strict(self, strict: bool = True) -> EngineConfig:
        return replace(self, strict=strict)

    @classmethod
    def from_env(cls, path: str | Path | None = None) -> EngineConfig:
        """
        Build from BASKETRY_* variables, loading a .env file first.

        Variables already set in the process environment win over the file.
        Seconds for BASKETRY_REQUEST_TIMEOUT, BASKETRY_ACTION_TIMEOUT,
        BASKETRY_PAYMENT_METHODS_TTL and BASKETRY_PUBLISHABLE_KEY_TTL.
        """
        load_dotenv(dotenv_path=path)

        config = cls()
        if (endpoint := _env("ENDPOINT")) is not None:
            config = replace(config, endpoint=endpoint.rstrip("/"))
        if (token := _env("TOKEN")) is not None:
            config = config.with_token(token)
        if (timeout := _env_seconds("REQUEST_TIMEOUT")) is not None:
            config = replace(config, request_timeout=timeout)
        if (action := _env_seconds("ACTION_TIMEOUT")) is not None:
            config = config.with_action_timeout(delta=action)
        config = config.with_cache_ttl(
            payment_methods=_env_seconds("PAYMENT_METHODS_TTL"),
            publishable_key=_env_seconds("PUBLISHABLE_KEY_TTL"),
        )
        if (currency := _env("CURRENCY")) is not None:
            config = config.with_currency(currency)
        if (verify := _env_flag("VERIFY_TOTALS")) is not None:
            config = config.with_verify_totals(verify)
        if (strict := _env_flag("STRICT")) is not None:
            config = config.with_strict(strict)
        return config


__all__ = ("EngineConfig",)
