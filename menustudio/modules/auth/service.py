import hashlib
import logging
import time
from supabase import Client
from menustudio.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from menustudio.config import settings
from menustudio.core.connection import ConnectionTracker, connection_tracker
from menustudio.core.errors import (
    AlreadyExistsError, BackendError, InvalidCredentialsError, TransientError, backend_call
)
from menustudio.core.retry import retry_with_backoff, check_backend_health
from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


class AuthService:
    def __init__(self, supabase: Client, tracker: Optional[ConnectionTracker] = None):
        self.supabase = supabase
        self.tracker = tracker or connection_tracker

    async def _with_retry(self, operation):
        return await retry_with_backoff(
            operation,
            max_retries=settings.retry_max_attempts,
            initial_delay_ms=settings.retry_initial_delay_ms,
            max_delay_ms=settings.retry_max_delay_ms,
            on_retry=self.tracker.reconnecting,
        )

    async def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth, retrying while the backend is cold"""
        self.tracker.connecting()
        options: Dict[str, Any] = {}
        if register_data.display_name:
            options["data"] = {"display_name": register_data.display_name}
        if register_data.redirect_url:
            options["email_redirect_to"] = register_data.redirect_url

        async def sign_up():
            return await run_in_threadpool(backend_call, self.supabase.auth.sign_up, {
                "email": register_data.email,
                "password": register_data.password,
                "options": options,
            })

        try:
            auth_response = await self._with_retry(sign_up)
        except AlreadyExistsError:
            self.tracker.connected()
            raise HTTPException(status_code=400, detail="User already exists")
        except TransientError as e:
            self.tracker.failed()
            raise HTTPException(status_code=503, detail=f"Authentication service unavailable: {e.message}")
        except BackendError as e:
            self.tracker.failed()
            raise HTTPException(status_code=500, detail=f"Registration failed: {e.message}")

        self.tracker.connected()
        if not auth_response.user:
            raise HTTPException(status_code=400, detail="Failed to register user")
        return RegisterResponse(
            user_id=auth_response.user.id,
            email=auth_response.user.email or register_data.email,
            message="User registered successfully"
        )

    async def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth; bad credentials are never retried"""
        self.tracker.connecting()

        async def sign_in():
            return await run_in_threadpool(backend_call, self.supabase.auth.sign_in_with_password, {
                "email": login_data.email,
                "password": login_data.password,
            })

        try:
            auth_response = await self._with_retry(sign_in)
        except InvalidCredentialsError:
            self.tracker.connected()
            raise HTTPException(status_code=401, detail="Invalid email or password")
        except TransientError as e:
            self.tracker.failed()
            raise HTTPException(status_code=503, detail=f"Authentication service unavailable: {e.message}")
        except BackendError as e:
            self.tracker.failed()
            raise HTTPException(status_code=500, detail=f"Login failed: {e.message}")

        self.tracker.connected()
        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return TokenResponse(
            access_token=auth_response.session.access_token,
            refresh_token=getattr(auth_response.session, "refresh_token", None),
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email
        )

    async def check_connection(self) -> Dict[str, Any]:
        """Probe the Supabase REST root with backoff and update the shared connection status"""
        self.tracker.connecting()

        async def probe():
            healthy = await check_backend_health(settings.supabase_url, settings.supabase_key)
            if not healthy:
                raise TransientError("503 Service Unavailable: Supabase backend not reachable", 503)
            return True

        try:
            await self._with_retry(probe)
            self.tracker.connected()
        except BackendError:
            self.tracker.failed()
        return self.tracker.snapshot()

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid authentication")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"[AUTH] Authentication failed: {e}")
            raise HTTPException(status_code=401, detail="Invalid authentication")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        try:
            # Supabase Auth tokens are stateless JWTs; the token expires on its own
            self.supabase.auth.sign_out()
            _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def is_super_admin(self, user_id: str) -> bool:
        """Check the super_admin role through the has_role RPC"""
        try:
            result = self.supabase.rpc("has_role", {"_user_id": user_id, "_role": "super_admin"}).execute()
            return result.data is True
        except Exception as e:
            logger.error(f"Error checking super admin status: {e}")
            return False
