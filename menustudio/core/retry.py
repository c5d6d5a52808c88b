"""Retry utility with exponential backoff for cold start resilience."""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar

import httpx

from menustudio.core.errors import is_transient

logger = logging.getLogger(__name__)

T = TypeVar("T")

AUTH_TOKEN_PREFIX = "sb-"


def backoff_delay_ms(attempt: int, initial_delay_ms: int, max_delay_ms: int) -> int:
    """Delay after the failed attempt with 0-based index `attempt`."""
    return min(initial_delay_ms * (2 ** attempt), max_delay_ms)


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 5,
    initial_delay_ms: int = 1000,
    max_delay_ms: int = 10000,
    on_retry: Optional[Callable[[int, Exception], None]] = None,
) -> T:
    """
    Await `fn` until it succeeds, retrying transient failures.

    `fn` is called at most `max_retries + 1` times. Non-transient errors and
    the error from the final attempt are re-raised unchanged. `on_retry`
    receives the 1-based retry number before each wait.
    """
    for attempt in range(max_retries + 1):
        try:
            return await fn()
        except Exception as e:
            if not is_transient(e) or attempt == max_retries:
                raise
            delay_ms = backoff_delay_ms(attempt, initial_delay_ms, max_delay_ms)
            logger.warning(
                f"Transient failure (attempt {attempt + 1}/{max_retries + 1}): {e}; retrying in {delay_ms}ms"
            )
            if on_retry:
                on_retry(attempt + 1, e)
            await _sleep(delay_ms / 1000)
    raise RuntimeError("retry_with_backoff exhausted without result")  # pragma: no cover


async def check_backend_health(supabase_url: str, api_key: str, timeout: float = 5.0) -> bool:
    """HEAD the REST root; 400 still means the backend answered."""
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.head(
                f"{supabase_url.rstrip('/')}/rest/v1/",
                headers={"apikey": api_key},
            )
        return response.is_success or response.status_code == 400
    except httpx.HTTPError as e:
        logger.warning(f"Backend health check failed: {e}")
        return False


def clear_stale_auth_tokens(storage, prefix: str = AUTH_TOKEN_PREFIX) -> List[str]:
    """Remove every persisted auth key starting with `prefix`. Returns the removed keys."""
    keys: Iterable[str] = list(storage.keys())
    removed = [key for key in keys if key and key.startswith(prefix)]
    for key in removed:
        storage.remove_item(key)
    if removed:
        logger.info(f"Cleared {len(removed)} stale auth token(s)")
    return removed
