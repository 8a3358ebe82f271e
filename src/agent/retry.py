from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

import anthropic
import httpx
import openai

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 1
INITIAL_RETRY_DELAY = 1.0
RETRY_DELAY_CAP = 10.0

# 429 rate limited, 503 unavailable, 529 Anthropic overloaded.
RETRYABLE_STATUS_CODES = frozenset({429, 503, 529})

_RETRYABLE_TYPES = (
    anthropic.RateLimitError,
    anthropic.APITimeoutError,
    anthropic.APIConnectionError,
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    httpx.TimeoutException,
    TimeoutError,
)


def _status_code(error: BaseException) -> Optional[int]:
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def is_retryable_error(error: BaseException) -> bool:
    """
    True for rate limiting, transient unavailability and timeouts. Bad input
    and auth failures are never retried.
    """
    status = _status_code(error)
    if status in RETRYABLE_STATUS_CODES:
        return True
    if status is not None and 400 <= status < 500:
        return False
    if isinstance(error, _RETRYABLE_TYPES):
        return True
    return "timeout" in str(error).lower()


def retry_delay(attempt: int, initial_delay: float = INITIAL_RETRY_DELAY, delay_cap: float = RETRY_DELAY_CAP) -> float:
    return min(initial_delay * (2 ** attempt), delay_cap)


async def request_with_retry(
    call_fn: Callable[[], Awaitable[T]],
    max_retries: int = MAX_RETRIES,
    *,
    initial_delay: float = INITIAL_RETRY_DELAY,
    delay_cap: float = RETRY_DELAY_CAP,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_attempt: Optional[Callable[[int], None]] = None,
) -> T:
    """
    Await `call_fn()` up to `max_retries + 1` times with exponential backoff.
    Non-retryable errors propagate on the first failure without sleeping.
    """
    attempt = 0
    while True:
        if on_attempt:
            on_attempt(attempt)
        try:
            return await call_fn()
        except Exception as exc:
            if attempt >= max_retries or not is_retryable_error(exc):
                raise
            delay = retry_delay(attempt, initial_delay, delay_cap)
            logger.warning(
                "Retrying model request (attempt %s/%s) after %.1fs: %s",
                attempt + 1,
                max_retries,
                delay,
                exc,
            )
            await sleep(delay)
            attempt += 1
