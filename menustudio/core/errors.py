"""
Typed error kinds for calls that leave the process.

Supabase and the AI gateway report failures as loosely structured
exceptions. The boundary that calls them converts those into the small
closed set below so callers branch on type, never on message text.
"""

from typing import Optional

import httpx

# Legacy message markers for failures that clear up on their own
# (cold starts, dropped connections, overloaded upstreams).
TRANSIENT_MARKERS = (
    "503",
    "service unavailable",
    "network",
    "fetch",
    "connection",
    "upstream",
    "timeout",
)
TRANSIENT_STATUS_CODES = {502, 503, 504}


class BackendError(Exception):
    """Base for classified backend failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransientError(BackendError):
    """Backend unreachable or overloaded; safe to retry."""


class InvalidCredentialsError(BackendError):
    """Email/password rejected by the auth service."""


class AlreadyExistsError(BackendError):
    """Sign-up for an email that is already registered."""


class GatewayError(BackendError):
    """AI gateway failure carrying the HTTP status to report to the caller."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message, status_code)


def _status_of(exc: Exception) -> Optional[int]:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    for attr in ("status", "status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)
    return None


def classify_error(exc: Exception) -> BackendError:
    """Map a raw exception from Supabase/httpx onto a typed error kind."""
    if isinstance(exc, BackendError):
        return exc

    message = str(exc) or exc.__class__.__name__
    status_code = _status_of(exc)

    if isinstance(exc, (httpx.TransportError, TimeoutError, ConnectionError)):
        return TransientError(message, status_code)

    lowered = message.lower()
    if "invalid login credentials" in lowered:
        return InvalidCredentialsError(message, status_code)
    if "already registered" in lowered or "already exists" in lowered:
        return AlreadyExistsError(message, status_code)
    if status_code in TRANSIENT_STATUS_CODES or any(m in lowered for m in TRANSIENT_MARKERS):
        return TransientError(message, status_code)
    return BackendError(message, status_code)


def is_transient(exc: Exception) -> bool:
    if isinstance(exc, TransientError):
        return True
    if isinstance(exc, BackendError):
        return False
    return isinstance(classify_error(exc), TransientError)


def backend_call(fn, *args, **kwargs):
    """Run a Supabase/httpx call, re-raising any failure as a typed error."""
    try:
        return fn(*args, **kwargs)
    except BackendError:
        raise
    except Exception as e:
        raise classify_error(e) from e
