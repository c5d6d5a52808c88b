from supabase import Client
from menustudio.modules.generations.schemas import (
    GenerationCreate, GenerationMetadata, GenerationImages, GenerationResponse
)
from menustudio.core.dependencies import OrganizationContext
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

METADATA_COLUMNS = "id, prompt, ratio, resolution, created_at"
MAX_IMAGE_BATCH = 20


class GenerationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _scoped(self, query, ctx: OrganizationContext):
        """Organization members share history; users without an organization see their own."""
        if ctx.organization_id:
            return query.eq("organization_id", ctx.organization_id)
        return query.eq("user_id", ctx.user_id)

    def list_metadata(self, ctx: OrganizationContext, limit: int = 50) -> List[GenerationMetadata]:
        """Lightweight columns only, newest first"""
        try:
            query = self.supabase.table("generations").select(METADATA_COLUMNS)
            result = self._scoped(query, ctx)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [GenerationMetadata(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error listing generations: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_images(self, ids: List[str], ctx: OrganizationContext) -> List[GenerationImages]:
        """Heavy `images` column for a small batch of ids"""
        if not ids:
            return []
        if len(ids) > MAX_IMAGE_BATCH:
            raise HTTPException(status_code=400, detail=f"At most {MAX_IMAGE_BATCH} ids per request")
        try:
            query = self.supabase.table("generations").select("id, images").in_("id", ids)
            result = self._scoped(query, ctx).execute()
            return [GenerationImages(id=row["id"], images=row.get("images") or []) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error loading generation images: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def create_generation(self, data: GenerationCreate, ctx: OrganizationContext) -> GenerationResponse:
        try:
            result = self.supabase.table("generations").insert({
                "prompt": data.prompt,
                "images": data.images,
                "ratio": data.ratio,
                "resolution": data.resolution,
                "user_id": ctx.user_id,
                "organization_id": ctx.organization_id,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save generation")
            return GenerationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_generation(self, generation_id: str, ctx: OrganizationContext) -> bool:
        try:
            query = self.supabase.table("generations").delete().eq("id", generation_id)
            result = self._scoped(query, ctx).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Generation not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_generations(self, ids: List[str], ctx: OrganizationContext) -> int:
        try:
            query = self.supabase.table("generations").delete().in_("id", ids)
            result = self._scoped(query, ctx).execute()
            deleted = len(result.data or [])
            logger.info(f"Deleted {deleted}/{len(ids)} generation(s)")
            return deleted
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
