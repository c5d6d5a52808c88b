from fastapi import APIRouter, Depends, File, Form, UploadFile
from menustudio.database.supabase_client import get_supabase
from menustudio.modules.menu_photos.schemas import (
    MenuPhotoResponse, MenuPhotoRename, MenuPhotoReorder, TrashItem, PurgeResponse
)
from menustudio.modules.menu_photos.service import MenuPhotoService
from menustudio.core.dependencies import OrganizationContext, get_organization_context, require_super_admin
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/menu-photos", tags=["menu-photos"])
trash_router = APIRouter(prefix="/admin/trash", tags=["admin"])


def get_menu_photo_service(supabase: Client = Depends(get_supabase)) -> MenuPhotoService:
    return MenuPhotoService(supabase)


@router.get("", response_model=List[MenuPhotoResponse])
async def list_photos(
    ctx: OrganizationContext = Depends(get_organization_context),
    service: MenuPhotoService = Depends(get_menu_photo_service),
):
    return service.list_photos(ctx)


@router.post("", response_model=MenuPhotoResponse, status_code=201)
async def upload_photo(
    file: UploadFile = File(...),
    category: str = Form("Uploaded"),
    ctx: OrganizationContext = Depends(get_organization_context),
    service: MenuPhotoService = Depends(get_menu_photo_service),
):
    """Upload a PNG or JPEG menu photo; a thumbnail is generated alongside"""
    return await service.upload_photo(file, ctx, category=category)


@router.put("/order", response_model=List[MenuPhotoResponse])
async def reorder_photos(
    data: MenuPhotoReorder,
    ctx: OrganizationContext = Depends(get_organization_context),
    service: MenuPhotoService = Depends(get_menu_photo_service),
):
    return service.reorder_photos(data.ids, ctx)


@router.patch("/{photo_id}", response_model=MenuPhotoResponse)
async def rename_photo(
    photo_id: str,
    data: MenuPhotoRename,
    ctx: OrganizationContext = Depends(get_organization_context),
    service: MenuPhotoService = Depends(get_menu_photo_service),
):
    return service.rename_photo(photo_id, data.name, ctx)


@router.delete("/{photo_id}", status_code=204)
async def delete_photo(
    photo_id: str,
    ctx: OrganizationContext = Depends(get_organization_context),
    service: MenuPhotoService = Depends(get_menu_photo_service),
):
    """Move photo to trash"""
    service.soft_delete_photo(photo_id, ctx)
    return None


@trash_router.get("", response_model=List[TrashItem])
async def list_trash(
    organization_id: Optional[str] = None,
    user_data: Dict = Depends(require_super_admin),
    service: MenuPhotoService = Depends(get_menu_photo_service),
):
    return service.list_trash(organization_id)


@trash_router.post("/purge", response_model=PurgeResponse)
async def purge_trash(
    user_data: Dict = Depends(require_super_admin),
    service: MenuPhotoService = Depends(get_menu_photo_service),
):
    """Permanently delete everything past the retention period"""
    return PurgeResponse(purged=service.purge_expired_trash())


@trash_router.post("/{photo_id}/restore", status_code=200)
async def restore_photo(
    photo_id: str,
    user_data: Dict = Depends(require_super_admin),
    service: MenuPhotoService = Depends(get_menu_photo_service),
):
    service.restore_photo(photo_id)
    return {"message": "Photo restored", "id": photo_id}


@trash_router.delete("/{photo_id}", status_code=204)
async def permanently_delete_photo(
    photo_id: str,
    user_data: Dict = Depends(require_super_admin),
    service: MenuPhotoService = Depends(get_menu_photo_service),
):
    service.permanently_delete_photo(photo_id)
    return None
