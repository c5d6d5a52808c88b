from fastapi import APIRouter, Depends, Query
from menustudio.database.supabase_client import get_supabase
from menustudio.modules.generations.schemas import (
    GenerationCreate, GenerationMetadata, GenerationImages, GenerationResponse,
    BulkDeleteRequest, BulkDeleteResponse
)
from menustudio.modules.generations.service import GenerationService
from menustudio.core.dependencies import OrganizationContext, get_organization_context
from supabase import Client
from typing import List

router = APIRouter(prefix="/generations", tags=["generations"])


def get_generation_service(supabase: Client = Depends(get_supabase)) -> GenerationService:
    return GenerationService(supabase)


@router.get("", response_model=List[GenerationMetadata])
async def list_generations(
    limit: int = Query(50, ge=1, le=200),
    ctx: OrganizationContext = Depends(get_organization_context),
    service: GenerationService = Depends(get_generation_service),
):
    """Generation history without image payloads"""
    return service.list_metadata(ctx, limit=limit)


@router.get("/images", response_model=List[GenerationImages])
async def get_generation_images(
    ids: List[str] = Query(...),
    ctx: OrganizationContext = Depends(get_organization_context),
    service: GenerationService = Depends(get_generation_service),
):
    """Image arrays for a batch of generation ids"""
    return service.get_images(ids, ctx)


@router.post("", response_model=GenerationResponse, status_code=201)
async def create_generation(
    data: GenerationCreate,
    ctx: OrganizationContext = Depends(get_organization_context),
    service: GenerationService = Depends(get_generation_service),
):
    return service.create_generation(data, ctx)


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_generations(
    data: BulkDeleteRequest,
    ctx: OrganizationContext = Depends(get_organization_context),
    service: GenerationService = Depends(get_generation_service),
):
    return BulkDeleteResponse(deleted=service.delete_generations(data.ids, ctx))


@router.delete("/{generation_id}", status_code=204)
async def delete_generation(
    generation_id: str,
    ctx: OrganizationContext = Depends(get_organization_context),
    service: GenerationService = Depends(get_generation_service),
):
    service.delete_generation(generation_id, ctx)
    return None
