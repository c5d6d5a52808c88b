from fastapi import APIRouter, Depends
from menustudio.database.supabase_client import get_supabase
from menustudio.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, ConnectionStatusResponse
)
from menustudio.modules.auth.service import AuthService
from menustudio.core.connection import ConnectionTracker, get_connection_tracker
from menustudio.core.dependencies import get_auth_service, get_current_token, get_current_user, is_super_admin
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return await service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return await service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_me(
    current_user: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Get current authenticated user and whether they can open the admin panel."""
    return {**current_user, "is_super_admin": is_super_admin(current_user, supabase)}


@router.get("/connection", response_model=ConnectionStatusResponse)
async def connection_status(tracker: ConnectionTracker = Depends(get_connection_tracker)):
    """Current connection status of this server to the backend"""
    return tracker.snapshot()


@router.post("/reconnect", response_model=ConnectionStatusResponse)
async def reconnect(service: AuthService = Depends(get_auth_service)):
    """Re-probe the backend with exponential backoff"""
    return await service.check_connection()
