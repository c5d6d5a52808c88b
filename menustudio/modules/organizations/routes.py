from fastapi import APIRouter, Depends
from menustudio.database.supabase_client import get_supabase
from menustudio.modules.organizations.schemas import (
    OrganizationCreate, OrganizationUpdate, OrganizationResponse, OrganizationDetails
)
from menustudio.modules.organizations.service import OrganizationService
from menustudio.core.dependencies import require_super_admin
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/admin/organizations", tags=["admin"])


def get_organization_service(supabase: Client = Depends(get_supabase)) -> OrganizationService:
    return OrganizationService(supabase)


@router.get("", response_model=List[OrganizationResponse])
async def list_organizations(
    user_data: Dict = Depends(require_super_admin),
    service: OrganizationService = Depends(get_organization_service),
):
    return service.list_organizations()


@router.post("", response_model=OrganizationResponse, status_code=201)
async def create_organization(
    org_data: OrganizationCreate,
    user_data: Dict = Depends(require_super_admin),
    service: OrganizationService = Depends(get_organization_service),
):
    """Create a client organization; owner_email links an existing profile as owner"""
    return service.create_organization(org_data)


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: str,
    user_data: Dict = Depends(require_super_admin),
    service: OrganizationService = Depends(get_organization_service),
):
    return service.get_organization(organization_id)


@router.get("/{organization_id}/details", response_model=OrganizationDetails)
async def get_organization_details(
    organization_id: str,
    user_data: Dict = Depends(require_super_admin),
    service: OrganizationService = Depends(get_organization_service),
):
    return service.get_organization_details(organization_id)


@router.patch("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: str,
    org_data: OrganizationUpdate,
    user_data: Dict = Depends(require_super_admin),
    service: OrganizationService = Depends(get_organization_service),
):
    return service.update_organization(organization_id, org_data)
