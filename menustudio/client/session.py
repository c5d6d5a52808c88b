"""
Session handling that survives backend cold starts.

`SessionManager` wraps a Supabase auth client (sync or async flavour) and
keeps a connection status the UI can show while it retries.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from menustudio.core.connection import ConnectionStatus, ConnectionTracker
from menustudio.core.errors import AlreadyExistsError, BackendError, InvalidCredentialsError, classify_error
from menustudio.core.retry import clear_stale_auth_tokens, retry_with_backoff
from menustudio.client.storage import MemoryTokenStorage

logger = logging.getLogger(__name__)

STALE_TOKEN_MARKERS = ("refresh_token", "invalid")


@dataclass
class AuthResult:
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class OrganizationOverride:
    """A super admin viewing a client's app as that organization."""

    organization_id: str
    organization_name: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        return {"X-Organization-Override": self.organization_id}


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class SessionManager:
    def __init__(
        self,
        auth,
        storage=None,
        tracker: Optional[ConnectionTracker] = None,
        max_retries: int = 5,
        initial_delay_ms: int = 1000,
    ):
        self.auth = auth
        self.storage = storage if storage is not None else MemoryTokenStorage()
        self.tracker = tracker or ConnectionTracker()
        self.max_retries = max_retries
        self.initial_delay_ms = initial_delay_ms
        self.session = None
        self.user = None
        self.loading = True
        self.organization_override: Optional[OrganizationOverride] = None

    @property
    def connection_status(self) -> ConnectionStatus:
        return self.tracker.status

    @property
    def retry_count(self) -> int:
        return self.tracker.retry_count

    @property
    def access_token(self) -> Optional[str]:
        return getattr(self.session, "access_token", None)

    def _set_session(self, session) -> None:
        self.session = session
        self.user = getattr(session, "user", None) if session else None

    async def _call(self, method: Callable, *args):
        """One auth call, with failures typed after awaiting so async clients match sync ones."""
        async def attempt():
            try:
                return await _resolve(method(*args))
            except BackendError:
                raise
            except Exception as e:
                raise classify_error(e) from e
        return await retry_with_backoff(
            attempt,
            max_retries=self.max_retries,
            initial_delay_ms=self.initial_delay_ms,
            on_retry=self.tracker.reconnecting,
        )

    def subscribe(self):
        """Register with the auth client's state listener. Call before initialize_session()."""
        return self.auth.on_auth_state_change(self.on_auth_state_change)

    def on_auth_state_change(self, event: str, session) -> None:
        logger.debug(f"Auth state change: {event}")
        self._set_session(session)
        self.tracker.connected()
        self.loading = False

    async def initialize_session(self) -> None:
        """Load the persisted session, retrying while the backend is unreachable"""
        self.tracker.connecting()
        try:
            session = await self._call(self.auth.get_session)
            self._set_session(session)
            self.tracker.connected()
        except Exception as e:
            logger.error(f"Failed to initialize session after retries: {e}")
            if any(marker in str(e).lower() for marker in STALE_TOKEN_MARKERS):
                clear_stale_auth_tokens(self.storage)
            self.tracker.failed()
            self._set_session(None)
        finally:
            self.loading = False

    async def retry_connection(self) -> None:
        self.loading = True
        await self.initialize_session()

    async def sign_in(self, email: str, password: str) -> AuthResult:
        self.tracker.connecting()
        try:
            response = await self._call(self.auth.sign_in_with_password, {"email": email, "password": password})
        except InvalidCredentialsError as e:
            self.tracker.connected()
            return AuthResult(error=e)
        except Exception as e:
            self.tracker.failed()
            return AuthResult(error=e)
        if getattr(response, "session", None) is not None:
            self._set_session(response.session)
        self.tracker.connected()
        return AuthResult()

    async def sign_up(self, email: str, password: str, redirect_url: Optional[str] = None) -> AuthResult:
        self.tracker.connecting()
        credentials: Dict[str, Any] = {"email": email, "password": password}
        if redirect_url:
            credentials["options"] = {"email_redirect_to": redirect_url}
        try:
            await self._call(self.auth.sign_up, credentials)
        except AlreadyExistsError as e:
            self.tracker.connected()
            return AuthResult(error=e)
        except Exception as e:
            self.tracker.failed()
            return AuthResult(error=e)
        self.tracker.connected()
        return AuthResult()

    async def sign_out(self) -> None:
        try:
            await _resolve(self.auth.sign_out())
        finally:
            self._set_session(None)
            self.organization_override = None
            clear_stale_auth_tokens(self.storage)

    def login_as(self, organization_id: str, organization_name: Optional[str] = None) -> OrganizationOverride:
        self.organization_override = OrganizationOverride(organization_id, organization_name)
        logger.info(f"Acting as organization {organization_id}")
        return self.organization_override

    def exit_login_as(self) -> None:
        self.organization_override = None

    def request_headers(self) -> Dict[str, str]:
        """Authorization plus the explicit organization override, if any"""
        headers: Dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if self.organization_override:
            headers.update(self.organization_override.headers())
        return headers
