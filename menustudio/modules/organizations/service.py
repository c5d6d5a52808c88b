from supabase import Client
from menustudio.modules.organizations.schemas import (
    OrganizationCreate, OrganizationUpdate, OrganizationResponse, OrganizationDetails, DEFAULT_PRIMARY_COLOR
)
from menustudio.database.lookups import fetch_emails
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

DETAIL_PHOTOS_LIMIT = 20
DETAIL_GENERATIONS_LIMIT = 10


class OrganizationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _generation_activity(self) -> tuple:
        """Generation count and latest generation timestamp per organization"""
        result = self.supabase.table("generations")\
            .select("organization_id, created_at")\
            .order("created_at", desc=True)\
            .execute()
        counts: Dict[str, int] = {}
        last_active: Dict[str, str] = {}
        for row in result.data or []:
            org_id = row.get("organization_id")
            if not org_id:
                continue
            counts[org_id] = counts.get(org_id, 0) + 1
            # rows arrive newest first
            last_active.setdefault(org_id, row["created_at"])
        return counts, last_active

    def list_organizations(self) -> List[OrganizationResponse]:
        """List organizations with owner email, generation count and last activity"""
        try:
            result = self.supabase.table("organizations")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            orgs = result.data or []
            if not orgs:
                return []

            email_map = fetch_emails(self.supabase, [o.get("owner_id") for o in orgs])
            counts, last_active = self._generation_activity()

            return [
                OrganizationResponse(**{
                    **org,
                    "owner_email": email_map.get(org.get("owner_id")),
                    "generations_count": counts.get(org["id"], 0),
                    "last_active": last_active.get(org["id"]),
                })
                for org in orgs
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_organization(self, organization_id: str) -> OrganizationResponse:
        try:
            result = self.supabase.table("organizations")\
                .select("*")\
                .eq("id", organization_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Organization not found")
        return OrganizationResponse(**result.data)

    def _find_owner_id(self, email: Optional[str]) -> Optional[str]:
        if not email:
            return None
        result = self.supabase.table("profiles")\
            .select("id")\
            .eq("email", email)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            logger.warning(f"No profile found for owner email {email}; creating organization without owner")
            return None
        return result.data["id"]

    def create_organization(self, org_data: OrganizationCreate) -> OrganizationResponse:
        """Create an organization and link the owner's profile to it"""
        try:
            owner_id = self._find_owner_id(org_data.owner_email)
            result = self.supabase.table("organizations").insert({
                "name": org_data.name,
                "slug": org_data.slug,
                "primary_color": org_data.primary_color or DEFAULT_PRIMARY_COLOR,
                "owner_id": owner_id,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create organization")
            org = result.data[0]

            if owner_id:
                self.supabase.table("profiles")\
                    .update({"organization_id": org["id"]})\
                    .eq("id", owner_id)\
                    .execute()

            logger.info(f"Created organization {org['id']} ({org_data.slug})")
            return OrganizationResponse(**{**org, "owner_email": org_data.owner_email if owner_id else None})
        except HTTPException:
            raise
        except Exception as e:
            if "duplicate" in str(e).lower():
                raise HTTPException(status_code=400, detail=f"Organization slug '{org_data.slug}' already exists")
            raise HTTPException(status_code=500, detail=str(e))

    def update_organization(self, organization_id: str, org_data: OrganizationUpdate) -> OrganizationResponse:
        update_data = org_data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("organizations")\
                .update(update_data)\
                .eq("id", organization_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Organization not found")
            if "disabled" in update_data:
                logger.info(f"Organization {organization_id} disabled={update_data['disabled']}")
            return OrganizationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_organization_details(self, organization_id: str) -> OrganizationDetails:
        """Organization with its latest menu photos and generations, for the client detail panel"""
        organization = self.get_organization(organization_id)
        try:
            photos = self.supabase.table("menu_photos")\
                .select("*")\
                .eq("organization_id", organization_id)\
                .order("created_at", desc=True)\
                .limit(DETAIL_PHOTOS_LIMIT)\
                .execute()
            generations = self.supabase.table("generations")\
                .select("*")\
                .eq("organization_id", organization_id)\
                .order("created_at", desc=True)\
                .limit(DETAIL_GENERATIONS_LIMIT)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return OrganizationDetails(
            organization=organization,
            menu_photos=photos.data or [],
            generations=generations.data or [],
        )
