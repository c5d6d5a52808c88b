"""
Core dependencies for route protection and tenant scoping
"""

from fastapi import Depends, Header, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from menustudio.database.supabase_client import get_supabase
from menustudio.modules.auth.service import AuthService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


class OrganizationContext(BaseModel):
    """Tenant the current request acts for. Replaces the client-stored "login as" override."""
    user_id: str
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    impersonating: bool = False


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for role lookups."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(credentials.credentials)


def is_super_admin(user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    if cache is not None and "super_admin" in cache:
        return cache["super_admin"]
    result = AuthService(supabase).is_super_admin(user_data["id"])
    if cache is not None:
        cache["super_admin"] = result
    return result


def require_super_admin(
    request: Request,
    user_data: dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Dependency for admin panel routes"""
    if not is_super_admin(user_data, supabase, _get_request_cache(request)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required"
        )
    return user_data


def get_organization_context(
    request: Request,
    x_organization_override: Optional[str] = Header(None),
    user_data: dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase)
) -> OrganizationContext:
    """Resolve the tenant for this request: the caller's own organization, or an explicit
    X-Organization-Override sent by a super admin viewing a client's app."""
    user_id = user_data["id"]

    if x_organization_override:
        if not is_super_admin(user_data, supabase, _get_request_cache(request)):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only super admins can act for another organization"
            )
        org_result = supabase.table("organizations")\
            .select("id, name")\
            .eq("id", x_organization_override)\
            .maybe_single()\
            .execute()
        if not org_result or not org_result.data:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
        logger.info(f"User {user_id} acting as organization {org_result.data['id']}")
        return OrganizationContext(
            user_id=user_id,
            organization_id=org_result.data["id"],
            organization_name=org_result.data.get("name"),
            impersonating=True,
        )

    try:
        profile_result = supabase.table("profiles")\
            .select("organization_id")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        organization_id = profile_result.data.get("organization_id") if profile_result and profile_result.data else None
    except Exception as e:
        logger.error(f"Error loading profile organization: {e}")
        organization_id = None
    return OrganizationContext(user_id=user_id, organization_id=organization_id)
