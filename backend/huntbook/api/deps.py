"""Common API dependencies."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, Response, status
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from sqlalchemy.ext.asyncio import AsyncSession

from huntbook.core.config import get_settings
from huntbook.db.session import get_session

SIGNATURE_PREFIX = "sha256="


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def require_admin(
    x_admin_token: Annotated[str | None, Header()] = None,
) -> None:
    """Guard administrative routes with the configured admin token."""
    expected = get_settings().admin_api_token
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrative access is not configured",
        )
    if not x_admin_token or not secrets.compare_digest(x_admin_token, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )


def sign_payload(payload: bytes, secret: str) -> str:
    """Return the signature header value the payment flow sends for ``payload``."""
    digest = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


async def verify_payment_signature(
    request: Request,
    x_payment_signature: Annotated[str | None, Header()] = None,
) -> None:
    """Reject payment callbacks that are not signed with the shared secret."""
    settings = get_settings()
    if not settings.payment_callback_verify:
        return None
    if not settings.payment_callback_secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment callbacks are not configured",
        )
    if not x_payment_signature:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Missing signature header"
        )
    expected = sign_payload(await request.body(), settings.payment_callback_secret)
    if not secrets.compare_digest(x_payment_signature, expected):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature"
        )


def _parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    try:
        count_str, window_str = value.split("/", 1)
        count = int(count_str.strip())
    except ValueError:
        return fallback
    window = window_str.strip().lower()
    seconds_map = {
        "second": 1,
        "seconds": 1,
        "minute": 60,
        "minutes": 60,
        "hour": 3600,
        "hours": 3600,
    }
    seconds = seconds_map.get(window, fallback[1])
    return count, seconds


def rate_limited(limit: str, *, fallback: tuple[int, int] = (120, 60)):
    """Return a dependency enforcing ``limit`` when the limiter is initialized."""
    times, seconds = _parse_rate(limit, fallback=fallback)

    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=times, seconds=seconds)
        await limiter(request, response)

    return Depends(_dependency)
