from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from menustudio.client.session import OrganizationOverride, SessionManager
from menustudio.client.storage import MemoryTokenStorage
from menustudio.core.connection import ConnectionStatus
from menustudio.core.errors import AlreadyExistsError, InvalidCredentialsError


@pytest.fixture
def no_sleep():
    with patch("menustudio.core.retry._sleep", new=AsyncMock()) as sleep:
        yield sleep


def make_session(token="access-token"):
    return SimpleNamespace(access_token=token, user=SimpleNamespace(id="user-1"))


class TestInitializeSession:
    @pytest.mark.asyncio
    async def test_connects_after_retries(self, no_sleep):
        auth = MagicMock()
        auth.get_session = AsyncMock(side_effect=[Exception("Failed to fetch"), make_session()])
        manager = SessionManager(auth)

        await manager.initialize_session()

        assert manager.connection_status is ConnectionStatus.CONNECTED
        assert manager.retry_count == 1
        assert manager.user.id == "user-1"
        assert manager.loading is False

    @pytest.mark.asyncio
    async def test_sync_auth_client_supported(self, no_sleep):
        auth = MagicMock()
        auth.get_session.return_value = None
        manager = SessionManager(auth)

        await manager.initialize_session()

        assert manager.connection_status is ConnectionStatus.CONNECTED
        assert manager.session is None

    @pytest.mark.asyncio
    async def test_stale_refresh_token_cleared_on_failure(self, no_sleep):
        auth = MagicMock()
        auth.get_session = AsyncMock(side_effect=Exception("Invalid Refresh Token: refresh_token not found"))
        storage = MemoryTokenStorage({"sb-proj-auth-token": "{}", "theme": "dark"})
        manager = SessionManager(auth, storage=storage)

        await manager.initialize_session()

        assert manager.connection_status is ConnectionStatus.ERROR
        assert manager.session is None
        assert storage.keys() == ["theme"]
        assert auth.get_session.await_count == 1

    @pytest.mark.asyncio
    async def test_exhausted_transient_failure_keeps_tokens(self, no_sleep):
        auth = MagicMock()
        auth.get_session = AsyncMock(side_effect=Exception("503 Service Unavailable"))
        storage = MemoryTokenStorage({"sb-proj-auth-token": "{}"})
        manager = SessionManager(auth, storage=storage, max_retries=2)

        await manager.initialize_session()

        assert auth.get_session.await_count == 3
        assert manager.connection_status is ConnectionStatus.ERROR
        assert manager.retry_count == 2
        assert storage.keys() == ["sb-proj-auth-token"]


class TestSignIn:
    @pytest.mark.asyncio
    async def test_invalid_credentials_leave_status_connected(self, no_sleep):
        auth = MagicMock()
        auth.sign_in_with_password = AsyncMock(side_effect=Exception("Invalid login credentials"))
        manager = SessionManager(auth)

        result = await manager.sign_in("owner@staxburger.com", "wrong")

        assert not result.ok
        assert isinstance(result.error, InvalidCredentialsError)
        assert auth.sign_in_with_password.await_count == 1
        assert manager.connection_status is ConnectionStatus.CONNECTED

    @pytest.mark.asyncio
    async def test_sync_client_invalid_credentials_typed(self, no_sleep):
        auth = MagicMock()
        auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        manager = SessionManager(auth)

        result = await manager.sign_in("owner@staxburger.com", "wrong")

        assert isinstance(result.error, InvalidCredentialsError)
        assert auth.sign_in_with_password.call_count == 1
        assert manager.connection_status is ConnectionStatus.CONNECTED

    @pytest.mark.asyncio
    async def test_async_transient_failures_exhaust_to_error(self, no_sleep):
        auth = MagicMock()
        auth.sign_in_with_password = AsyncMock(side_effect=Exception("503 Service Unavailable"))
        manager = SessionManager(auth, max_retries=2)

        result = await manager.sign_in("owner@staxburger.com", "secret")

        assert not result.ok
        assert auth.sign_in_with_password.await_count == 3
        assert manager.connection_status is ConnectionStatus.ERROR

    @pytest.mark.asyncio
    async def test_success_stores_session(self, no_sleep):
        auth = MagicMock()
        auth.sign_in_with_password = AsyncMock(return_value=SimpleNamespace(session=make_session("tok")))
        manager = SessionManager(auth)

        result = await manager.sign_in("owner@staxburger.com", "secret")

        assert result.ok
        assert manager.request_headers() == {"Authorization": "Bearer tok"}

    @pytest.mark.asyncio
    async def test_sign_up_already_registered(self, no_sleep):
        auth = MagicMock()
        auth.sign_up = AsyncMock(side_effect=Exception("User already registered"))
        manager = SessionManager(auth)

        result = await manager.sign_up("owner@staxburger.com", "secret")

        assert result.error is not None
        assert isinstance(result.error, AlreadyExistsError)
        assert auth.sign_up.await_count == 1
        assert manager.connection_status is ConnectionStatus.CONNECTED


class TestSignOutAndOverride:
    @pytest.mark.asyncio
    async def test_sign_out_clears_tokens_and_override(self):
        auth = MagicMock()
        auth.sign_out = AsyncMock()
        storage = MemoryTokenStorage({"sb-proj-auth-token": "{}"})
        manager = SessionManager(auth, storage=storage)
        manager.on_auth_state_change("SIGNED_IN", make_session())
        manager.login_as("org-2", "Taco Town")

        await manager.sign_out()

        assert storage.keys() == []
        assert manager.session is None
        assert manager.organization_override is None

    def test_override_header_sent_explicitly(self):
        manager = SessionManager(MagicMock())
        manager.on_auth_state_change("SIGNED_IN", make_session("tok"))
        override = manager.login_as("org-2", "Taco Town")

        assert override == OrganizationOverride("org-2", "Taco Town")
        assert manager.request_headers() == {
            "Authorization": "Bearer tok",
            "X-Organization-Override": "org-2",
        }
        manager.exit_login_as()
        assert "X-Organization-Override" not in manager.request_headers()

    def test_auth_state_change_marks_connected(self):
        manager = SessionManager(MagicMock())
        manager.on_auth_state_change("TOKEN_REFRESHED", make_session())
        assert manager.connection_status is ConnectionStatus.CONNECTED
        assert manager.loading is False
