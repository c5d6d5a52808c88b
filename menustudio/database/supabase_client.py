from supabase import create_client, Client
from menustudio.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Process-wide Supabase clients.

    The anon client runs every request under the caller's row level security.
    The service client backs the AI endpoints, which read menus and settings
    across tenants; it falls back to the anon client when no service role key
    is configured.
    """

    _client: Optional[Client] = None
    _service_client: Optional[Client] = None
    _warned_fallback = False

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            if not settings.supabase_url or not settings.supabase_key:
                raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be configured")
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        if cls._service_client is not None:
            return cls._service_client
        if settings.supabase_service_role_key:
            cls._service_client = create_client(settings.supabase_url, settings.supabase_service_role_key)
            return cls._service_client
        if not cls._warned_fallback:
            logger.warning("SUPABASE_SERVICE_ROLE_KEY not set; AI endpoints use the anon client")
            cls._warned_fallback = True
        return cls.get_client()

    @classmethod
    def reset(cls):
        cls._client = None
        cls._service_client = None
        cls._warned_fallback = False


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()
