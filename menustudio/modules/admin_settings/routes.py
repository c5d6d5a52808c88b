from fastapi import APIRouter, Depends
from menustudio.database.supabase_client import get_supabase
from menustudio.modules.admin_settings.schemas import AdminSettingsResponse, AdminSettingsUpdate, DefaultSettings
from menustudio.modules.admin_settings.service import AdminSettingsService
from menustudio.modules.styles.schemas import GlobalChangeInfo
from menustudio.core.dependencies import get_current_user, require_super_admin
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/settings", tags=["settings"])
admin_router = APIRouter(prefix="/admin/settings", tags=["admin"])


def get_admin_settings_service(supabase: Client = Depends(get_supabase)) -> AdminSettingsService:
    return AdminSettingsService(supabase)


@router.get("/defaults", response_model=DefaultSettings)
async def get_default_settings(
    user_data: Dict = Depends(get_current_user),
    service: AdminSettingsService = Depends(get_admin_settings_service),
):
    """Default ratio and resolution for the prompt bar"""
    return service.get_defaults()


@admin_router.get("", response_model=Optional[AdminSettingsResponse])
async def get_settings(
    user_data: Dict = Depends(require_super_admin),
    service: AdminSettingsService = Depends(get_admin_settings_service),
):
    return service.get_settings()


@admin_router.put("", response_model=AdminSettingsResponse)
async def update_settings(
    data: AdminSettingsUpdate,
    user_data: Dict = Depends(require_super_admin),
    service: AdminSettingsService = Depends(get_admin_settings_service),
):
    return service.update_settings(data)


@admin_router.post("/impact", response_model=List[GlobalChangeInfo])
async def preview_settings_impact(
    data: AdminSettingsUpdate,
    user_data: Dict = Depends(require_super_admin),
    service: AdminSettingsService = Depends(get_admin_settings_service),
):
    return service.preview_impact(data)
