from supabase import Client
from menustudio.modules.styles.schemas import (
    StyleCreate, StyleUpdate, StyleResponse, ActiveStyle, GlobalChangeInfo, StyleImpactRequest
)
from menustudio.modules.styles.impact import detect_style_change_impact
from menustudio.database.lookups import fetch_organization_names
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

ACTIVE_STYLE_COLUMNS = "id, name, description, prompt_modifier, thumbnail_url, category, is_default"


def _normalize_org(organization_id: Optional[str]) -> Optional[str]:
    return None if not organization_id or organization_id == "global" else organization_id


class StyleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_styles(self, filter_org_id: Optional[str] = None) -> List[StyleResponse]:
        """List styles for the admin panel. filter_org_id: None/"all", "global", or an organization id."""
        try:
            query = self.supabase.table("styles").select("*")
            if filter_org_id == "global":
                query = query.is_("organization_id", "null")
            elif filter_org_id and filter_org_id != "all":
                query = query.eq("organization_id", filter_org_id)
            result = query.order("created_at", desc=True).execute()
            rows = result.data or []
            org_map = fetch_organization_names(self.supabase, [r.get("organization_id") for r in rows])
            return [
                StyleResponse(**{**row, "organization_name": org_map.get(row.get("organization_id"))})
                for row in rows
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_active_styles(self, organization_id: Optional[str] = None) -> List[ActiveStyle]:
        """Active styles visible to a client: global ones plus its organization's, default first then by name"""
        try:
            query = self.supabase.table("styles").select(ACTIVE_STYLE_COLUMNS + ", organization_id").eq("status", "active")
            result = query.order("is_default", desc=True).order("name").execute()
            rows = [
                r for r in result.data or []
                if not r.get("organization_id") or r.get("organization_id") == organization_id
            ]
            return [ActiveStyle(**row) for row in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_style(self, style_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("styles").select("*").eq("id", style_id).maybe_single().execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Style not found")
        return result.data

    def create_style(self, style_data: StyleCreate) -> StyleResponse:
        try:
            result = self.supabase.table("styles").insert({
                "name": style_data.name,
                "description": style_data.description or None,
                "prompt_modifier": style_data.prompt_modifier,
                "thumbnail_url": style_data.thumbnail_url or None,
                "organization_id": _normalize_org(style_data.organization_id),
                "has_color_picker": style_data.has_color_picker,
                "category": style_data.category or "Studio",
                "status": style_data.status,
                "is_default": style_data.is_default,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create style")
            logger.info(f"Created style {result.data[0]['id']} ({style_data.name})")
            return StyleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_style(self, style_id: str, style_data: StyleUpdate) -> StyleResponse:
        update_data = style_data.model_dump(exclude_unset=True)
        if "organization_id" in update_data:
            update_data["organization_id"] = _normalize_org(update_data["organization_id"])
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("styles")\
                .update(update_data)\
                .eq("id", style_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Style not found")
            return StyleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_style(self, style_id: str) -> bool:
        try:
            result = self.supabase.table("styles").delete().eq("id", style_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Style not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def preview_impact(self, request: StyleImpactRequest) -> GlobalChangeInfo:
        """Whether a pending style change reaches every client, before the admin confirms it"""
        style = request.style.model_dump(exclude_unset=True) if request.style else {}
        original = None
        if request.operation in ("update", "delete"):
            if not request.style_id:
                raise HTTPException(status_code=400, detail="style_id is required for update and delete")
            original = self.get_style(request.style_id)
        return detect_style_change_impact(style, request.operation, original)
