import threading
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException

from menustudio.core.connection import ConnectionTracker
from menustudio.modules.auth.schemas import LoginRequest, RegisterRequest
from menustudio.modules.auth.service import AuthService
from tests.conftest import FakeSupabase


def auth_response(user_id="user-1", email="owner@staxburger.com"):
    return SimpleNamespace(
        user=SimpleNamespace(id=user_id, email=email),
        session=SimpleNamespace(access_token="access", refresh_token="refresh"),
    )


@pytest.fixture
def no_sleep():
    with patch("menustudio.core.retry._sleep", new=AsyncMock()) as sleep:
        yield sleep


class TestLogin:
    @pytest.mark.asyncio
    async def test_success_after_cold_start(self, no_sleep):
        supabase = FakeSupabase()
        supabase.auth.sign_in_with_password.side_effect = [
            Exception("503 Service Unavailable"),
            Exception("upstream connect error"),
            auth_response(),
        ]
        tracker = ConnectionTracker()
        service = AuthService(supabase, tracker=tracker)

        token = await service.login(LoginRequest(email="owner@staxburger.com", password="secret"))

        assert token.access_token == "access"
        assert token.refresh_token == "refresh"
        assert supabase.auth.sign_in_with_password.call_count == 3
        assert tracker.snapshot() == {"status": "connected", "retry_count": 2}

    @pytest.mark.asyncio
    async def test_invalid_credentials_not_retried(self, no_sleep):
        supabase = FakeSupabase()
        supabase.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        tracker = ConnectionTracker()
        service = AuthService(supabase, tracker=tracker)

        with pytest.raises(HTTPException) as exc_info:
            await service.login(LoginRequest(email="owner@staxburger.com", password="wrong"))

        assert exc_info.value.status_code == 401
        assert supabase.auth.sign_in_with_password.call_count == 1
        assert tracker.status.value == "connected"
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sign_in_runs_off_the_event_loop(self, no_sleep):
        loop_thread = threading.get_ident()
        calling_threads = []

        def sign_in(credentials):
            calling_threads.append(threading.get_ident())
            return auth_response()

        supabase = FakeSupabase()
        supabase.auth.sign_in_with_password.side_effect = sign_in

        await AuthService(supabase, tracker=ConnectionTracker()).login(
            LoginRequest(email="owner@staxburger.com", password="secret")
        )

        assert calling_threads and calling_threads[0] != loop_thread

    @pytest.mark.asyncio
    async def test_exhausted_retries_report_unavailable(self, no_sleep):
        supabase = FakeSupabase()
        supabase.auth.sign_in_with_password.side_effect = Exception("Network request failed")
        tracker = ConnectionTracker()
        service = AuthService(supabase, tracker=tracker)

        with patch("menustudio.modules.auth.service.settings.retry_max_attempts", 2):
            with pytest.raises(HTTPException) as exc_info:
                await service.login(LoginRequest(email="owner@staxburger.com", password="secret"))

        assert exc_info.value.status_code == 503
        assert supabase.auth.sign_in_with_password.call_count == 3
        assert tracker.status.value == "error"


class TestRegister:
    @pytest.mark.asyncio
    async def test_already_registered(self, no_sleep):
        supabase = FakeSupabase()
        supabase.auth.sign_up.side_effect = Exception("User already registered")
        service = AuthService(supabase, tracker=ConnectionTracker())

        with pytest.raises(HTTPException) as exc_info:
            await service.register(RegisterRequest(email="owner@staxburger.com", password="secret"))

        assert exc_info.value.status_code == 400
        assert supabase.auth.sign_up.call_count == 1

    @pytest.mark.asyncio
    async def test_passes_display_name_and_redirect(self, no_sleep):
        supabase = FakeSupabase()
        supabase.auth.sign_up.return_value = auth_response()
        service = AuthService(supabase, tracker=ConnectionTracker())

        result = await service.register(RegisterRequest(
            email="owner@staxburger.com",
            password="secret",
            display_name="Stax",
            redirect_url="https://app.example/",
        ))

        assert result.user_id == "user-1"
        credentials = supabase.auth.sign_up.call_args.args[0]
        assert credentials["options"] == {
            "data": {"display_name": "Stax"},
            "email_redirect_to": "https://app.example/",
        }


class TestSuperAdmin:
    def test_has_role_true(self):
        supabase = FakeSupabase({"rpc:has_role": [SimpleNamespace(data=True)]})
        assert AuthService(supabase).is_super_admin("user-1") is True
        assert supabase.queries[0].called("rpc") == [("has_role", {"_user_id": "user-1", "_role": "super_admin"})]

    def test_rpc_failure_means_not_admin(self):
        supabase = FakeSupabase({"rpc:has_role": [RuntimeError("boom")]})
        assert AuthService(supabase).is_super_admin("user-1") is False


class TestCheckConnection:
    @pytest.mark.asyncio
    async def test_probe_retries_until_healthy(self, no_sleep):
        tracker = ConnectionTracker()
        service = AuthService(FakeSupabase(), tracker=tracker)
        health = AsyncMock(side_effect=[False, True])

        with patch("menustudio.modules.auth.service.check_backend_health", new=health):
            snapshot = await service.check_connection()

        assert snapshot == {"status": "connected", "retry_count": 1}
        assert health.await_count == 2
