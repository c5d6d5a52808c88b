import io
import logging
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import HTTPException, UploadFile
from PIL import Image
from supabase import Client

from menustudio.config import settings
from menustudio.core.dependencies import OrganizationContext
from menustudio.database.lookups import fetch_emails, fetch_organization_names
from menustudio.modules.ai.images import extension_for, sniff_image_type
from menustudio.modules.menu_photos.schemas import MenuPhotoResponse, TrashItem
from menustudio.modules.menu_photos.storage import ImageStorage

logger = logging.getLogger(__name__)

THUMBNAIL_MAX_SIZE = 400
THUMBNAIL_QUALITY = 80
TRASH_COLUMNS = "id, name, thumbnail_url, original_url, deleted_at, deleted_by, organization_id, user_id"


def generate_thumbnail(content: bytes, max_size: int = THUMBNAIL_MAX_SIZE) -> bytes:
    """Scale so the longer side is at most max_size and re-encode as JPEG."""
    with Image.open(io.BytesIO(content)) as img:
        img = img.convert("RGB")
        img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
        buf = io.BytesIO()
        img.save(buf, "JPEG", quality=THUMBNAIL_QUALITY, optimize=True)
        return buf.getvalue()


class MenuPhotoService:
    def __init__(self, supabase: Client, storage: Optional[ImageStorage] = None):
        self.supabase = supabase
        self.storage = storage or ImageStorage(supabase)

    def _scoped(self, query, ctx: OrganizationContext):
        if ctx.organization_id:
            return query.eq("organization_id", ctx.organization_id)
        return query.eq("user_id", ctx.user_id)

    def list_photos(self, ctx: OrganizationContext) -> List[MenuPhotoResponse]:
        """Photos not in trash, in gallery order"""
        try:
            query = self.supabase.table("menu_photos").select("*").is_("deleted_at", "null")
            result = self._scoped(query, ctx)\
                .order("sort_order")\
                .order("created_at", desc=True)\
                .execute()
            return [MenuPhotoResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    async def upload_photo(
        self,
        file: UploadFile,
        ctx: OrganizationContext,
        category: str = "Uploaded",
    ) -> MenuPhotoResponse:
        """Store original + thumbnail and create the menu_photos row"""
        content = await file.read()
        content_type = sniff_image_type(content)
        if not content_type:
            raise HTTPException(status_code=400, detail="Only PNG and JPEG images are supported")

        name = os.path.splitext(file.filename or "photo")[0] or "photo"
        owner = ctx.organization_id or ctx.user_id
        photo_id = str(uuid.uuid4())
        original_path = f"{owner}/{photo_id}.{extension_for(content_type)}"
        thumbnail_path = f"{owner}/thumbnails/{photo_id}.jpg"

        try:
            thumbnail = generate_thumbnail(content)
        except Exception as e:
            logger.error(f"Thumbnail generation failed for {file.filename}: {e}")
            raise HTTPException(status_code=400, detail="Could not read image")

        try:
            original_url = self.storage.upload(content, original_path, content_type)
            thumbnail_url = self.storage.upload(thumbnail, thumbnail_path, "image/jpeg")
        except Exception as e:
            logger.error(f"Photo upload failed: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to upload to storage: {str(e)}")

        try:
            result = self.supabase.table("menu_photos").insert({
                "id": photo_id,
                "name": name,
                "category": category,
                "original_url": original_url,
                "thumbnail_url": thumbnail_url,
                "user_id": ctx.user_id,
                "organization_id": ctx.organization_id,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save photo")
            return MenuPhotoResponse(**result.data[0])
        except Exception as e:
            self.storage.remove([original_url, thumbnail_url])
            if isinstance(e, HTTPException):
                raise
            raise HTTPException(status_code=500, detail=f"Failed to save photo: {str(e)}")

    def rename_photo(self, photo_id: str, name: str, ctx: OrganizationContext) -> MenuPhotoResponse:
        try:
            query = self.supabase.table("menu_photos").update({"name": name}).eq("id", photo_id)
            result = self._scoped(query, ctx).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Photo not found")
            return MenuPhotoResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reorder_photos(self, ids: List[str], ctx: OrganizationContext) -> List[MenuPhotoResponse]:
        """Persist gallery order; position in `ids` becomes sort_order"""
        try:
            for position, photo_id in enumerate(ids):
                query = self.supabase.table("menu_photos").update({"sort_order": position}).eq("id", photo_id)
                self._scoped(query, ctx).execute()
            return self.list_photos(ctx)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def soft_delete_photo(self, photo_id: str, ctx: OrganizationContext) -> bool:
        """Move to trash"""
        try:
            query = self.supabase.table("menu_photos").update({
                "deleted_at": datetime.now(timezone.utc).isoformat(),
                "deleted_by": ctx.user_id,
            }).eq("id", photo_id)
            result = self._scoped(query, ctx).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Photo not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_trash(self, organization_id: Optional[str] = None) -> List[TrashItem]:
        """Trashed photos across tenants, newest deletion first (admin)"""
        try:
            query = self.supabase.table("menu_photos")\
                .select(TRASH_COLUMNS)\
                .not_.is_("deleted_at", "null")
            if organization_id:
                query = query.eq("organization_id", organization_id)
            result = query.order("deleted_at", desc=True).execute()
            rows = result.data or []
            if not rows:
                return []
            email_map = fetch_emails(self.supabase, [r.get("deleted_by") for r in rows])
            org_map = fetch_organization_names(self.supabase, [r.get("organization_id") for r in rows])
            return [
                TrashItem(
                    **row,
                    deleted_by_email=email_map.get(row.get("deleted_by")),
                    organization_name=org_map.get(row.get("organization_id")),
                )
                for row in rows
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def restore_photo(self, photo_id: str) -> bool:
        try:
            result = self.supabase.table("menu_photos")\
                .update({"deleted_at": None, "deleted_by": None})\
                .eq("id", photo_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Photo not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def permanently_delete_photo(self, photo_id: str) -> bool:
        try:
            result = self.supabase.table("menu_photos").delete().eq("id", photo_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Photo not found")
            row = result.data[0]
            self.storage.remove([row.get("original_url"), row.get("thumbnail_url")])
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def purge_expired_trash(self, retention_days: Optional[int] = None) -> int:
        """Permanently delete photos that have been in trash longer than the retention period"""
        days = retention_days if retention_days is not None else settings.trash_retention_days
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        try:
            result = self.supabase.table("menu_photos")\
                .delete()\
                .lt("deleted_at", cutoff)\
                .execute()
            rows = result.data or []
            for row in rows:
                self.storage.remove([row.get("original_url"), row.get("thumbnail_url")])
            logger.info(f"Purged {len(rows)} photo(s) trashed before {cutoff}")
            return len(rows)
        except Exception as e:
            logger.error(f"Error purging trash: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
