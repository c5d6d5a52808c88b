from supabase import Client
from menustudio.modules.admin_settings.schemas import AdminSettingsResponse, AdminSettingsUpdate, DefaultSettings
from menustudio.modules.styles.impact import detect_settings_changes
from menustudio.modules.styles.schemas import GlobalChangeInfo
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class AdminSettingsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _fetch_row(self) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("admin_settings").select("*").limit(1).maybe_single().execute()
        return result.data if result else None

    def get_settings(self) -> Optional[AdminSettingsResponse]:
        try:
            row = self._fetch_row()
            return AdminSettingsResponse(**row) if row else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_settings(self, data: AdminSettingsUpdate) -> AdminSettingsResponse:
        """Update the single settings row, creating it on first save"""
        try:
            existing = self._fetch_row()
            if existing:
                update_data = data.model_dump(exclude_none=True)
                update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
                result = self.supabase.table("admin_settings")\
                    .update(update_data)\
                    .eq("id", existing["id"])\
                    .execute()
            else:
                result = self.supabase.table("admin_settings").insert({
                    "master_prompt": data.master_prompt or "",
                    "default_resolution": data.default_resolution or "1K",
                    "default_ratio": data.default_ratio or "1:1",
                }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save settings")
            return AdminSettingsResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_defaults(self) -> DefaultSettings:
        """Defaults for new client sessions; never fails the caller"""
        try:
            result = self.supabase.table("admin_settings")\
                .select("default_resolution, default_ratio")\
                .limit(1)\
                .maybe_single()\
                .execute()
            if result and result.data:
                return DefaultSettings(**result.data)
        except Exception as e:
            logger.warning(f"Could not fetch default settings: {e}")
        return DefaultSettings()

    def get_master_prompt(self) -> str:
        try:
            row = self._fetch_row()
            return (row or {}).get("master_prompt") or ""
        except Exception as e:
            logger.warning(f"Could not fetch master prompt: {e}")
            return ""

    def preview_impact(self, data: AdminSettingsUpdate) -> List[GlobalChangeInfo]:
        try:
            original = self._fetch_row()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return detect_settings_changes(data.model_dump(exclude_none=True), original)
