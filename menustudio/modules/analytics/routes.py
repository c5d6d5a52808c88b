from fastapi import APIRouter, Depends
from menustudio.database.supabase_client import get_supabase
from menustudio.modules.analytics.schemas import (
    AnalyticsContextResponse, AdminStats, AdminAlerts, RecentGeneration, ClientActivitySummary
)
from menustudio.modules.analytics.service import AnalyticsService, format_analytics_for_ai
from menustudio.core.dependencies import OrganizationContext, get_organization_context, require_super_admin
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/analytics", tags=["analytics"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


def get_analytics_service(supabase: Client = Depends(get_supabase)) -> AnalyticsService:
    return AnalyticsService(supabase)


@router.get("/context", response_model=AnalyticsContextResponse)
async def get_analytics_context(
    ctx: OrganizationContext = Depends(get_organization_context),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Live figures for the chat assistant, raw and pre-formatted"""
    context = service.get_context(ctx)
    return AnalyticsContextResponse(context=context, formatted=format_analytics_for_ai(context))


@admin_router.get("/stats", response_model=AdminStats)
async def get_admin_stats(
    user_data: Dict = Depends(require_super_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.get_admin_stats()


@admin_router.get("/alerts", response_model=AdminAlerts)
async def get_admin_alerts(
    user_data: Dict = Depends(require_super_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.get_admin_alerts()


@admin_router.get("/recent-activity", response_model=List[RecentGeneration])
async def get_recent_activity(
    user_data: Dict = Depends(require_super_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.get_recent_activity()


@admin_router.get("/client-activity", response_model=List[ClientActivitySummary])
async def get_client_activity(
    user_data: Dict = Depends(require_super_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.get_client_activity()
