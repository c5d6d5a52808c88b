from fastapi import APIRouter, Depends
from menustudio.database.supabase_client import get_supabase
from menustudio.modules.styles.schemas import (
    StyleCreate, StyleUpdate, StyleResponse, ActiveStyle, GlobalChangeInfo, StyleImpactRequest
)
from menustudio.modules.styles.service import StyleService
from menustudio.core.dependencies import OrganizationContext, get_organization_context, require_super_admin
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/styles", tags=["styles"])
admin_router = APIRouter(prefix="/admin/styles", tags=["admin"])


def get_style_service(supabase: Client = Depends(get_supabase)) -> StyleService:
    return StyleService(supabase)


@router.get("/active", response_model=List[ActiveStyle])
async def list_active_styles(
    ctx: OrganizationContext = Depends(get_organization_context),
    service: StyleService = Depends(get_style_service),
):
    """Styles offered in the prompt builder"""
    return service.list_active_styles(ctx.organization_id)


@admin_router.get("", response_model=List[StyleResponse])
async def list_styles(
    organization_id: Optional[str] = None,
    user_data: Dict = Depends(require_super_admin),
    service: StyleService = Depends(get_style_service),
):
    """List styles; organization_id may be "all", "global" or an organization id"""
    return service.list_styles(organization_id)


@admin_router.post("", response_model=StyleResponse, status_code=201)
async def create_style(
    style_data: StyleCreate,
    user_data: Dict = Depends(require_super_admin),
    service: StyleService = Depends(get_style_service),
):
    return service.create_style(style_data)


@admin_router.post("/impact", response_model=GlobalChangeInfo)
async def preview_style_impact(
    request: StyleImpactRequest,
    user_data: Dict = Depends(require_super_admin),
    service: StyleService = Depends(get_style_service),
):
    """Warn before a change that affects all client applications"""
    return service.preview_impact(request)


@admin_router.put("/{style_id}", response_model=StyleResponse)
async def update_style(
    style_id: str,
    style_data: StyleUpdate,
    user_data: Dict = Depends(require_super_admin),
    service: StyleService = Depends(get_style_service),
):
    return service.update_style(style_id, style_data)


@admin_router.delete("/{style_id}", status_code=204)
async def delete_style(
    style_id: str,
    user_data: Dict = Depends(require_super_admin),
    service: StyleService = Depends(get_style_service),
):
    service.delete_style(style_id)
    return None
