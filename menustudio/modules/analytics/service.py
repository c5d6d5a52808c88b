from supabase import Client
from menustudio.modules.analytics.schemas import (
    AnalyticsContext, RecentPrompt, AdminStats, AdminAlerts, RecentGeneration, ClientActivitySummary
)
from menustudio.core.dependencies import OrganizationContext
from menustudio.database.lookups import fetch_emails, fetch_organization_names
from typing import Any, Dict, Iterable, List, Optional
from fastapi import HTTPException
from datetime import datetime, timedelta, timezone
import logging

logger = logging.getLogger(__name__)

RECENT_PROMPTS_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10
INACTIVITY_DAYS = 7


def parse_timestamp(value: Any) -> datetime:
    """Supabase timestamps as aware datetimes; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_analytics_for_ai(analytics: AnalyticsContext) -> str:
    """Render live figures as a plain-text block appended to the chat system prompt"""
    if analytics.generations_last_week > 0:
        change = (analytics.generations_this_week - analytics.generations_last_week) \
            / analytics.generations_last_week * 100
        week_change = f"{change:.0f}"
    else:
        week_change = "N/A"

    category_list = ", ".join(f"{cat}: {count}" for cat, count in analytics.photos_by_category.items())
    recent_list = "\n".join(
        f'- "{g.prompt}" ({g.created_at.month}/{g.created_at.day}/{g.created_at.year})'
        for g in analytics.recent_generations
    )

    lines = [
        "CURRENT ANALYTICS (Live Data):",
        f"- Total menu photos: {analytics.total_photos}",
        f"- Total AI generations: {analytics.total_generations}",
        f"- Generations this week: {analytics.generations_this_week}",
        f"- Generations last week: {analytics.generations_last_week}",
        f"- Week-over-week change: {week_change}%",
        f"- Photos by category: {category_list or 'None'}",
        "",
        "Recent AI generations:",
        recent_list or "No recent generations",
    ]
    return "\n".join(lines)


class AnalyticsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _scoped(self, query, ctx: OrganizationContext):
        if ctx.organization_id:
            return query.eq("organization_id", ctx.organization_id)
        return query.eq("user_id", ctx.user_id)

    def _count(self, table: str, since: Optional[datetime] = None) -> int:
        query = self.supabase.table(table).select("id", count="exact")
        if since is not None:
            query = query.gte("created_at", since.isoformat())
        result = query.limit(1).execute()
        return result.count or 0

    def get_context(self, ctx: OrganizationContext, now: Optional[datetime] = None) -> AnalyticsContext:
        """Figures the chat assistant sees about the caller's restaurant"""
        now = now or datetime.now(timezone.utc)
        one_week_ago = now - timedelta(days=7)
        two_weeks_ago = now - timedelta(days=14)
        try:
            photos = self._scoped(
                self.supabase.table("menu_photos").select("id, category").is_("deleted_at", "null"), ctx
            ).execute().data or []
            generations = self._scoped(
                self.supabase.table("generations").select("id, prompt, created_at"), ctx
            ).order("created_at", desc=True).execute().data or []
        except Exception as e:
            logger.error(f"Error loading analytics context: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        photos_by_category: Dict[str, int] = {}
        for photo in photos:
            category = photo.get("category") or "Uploaded"
            photos_by_category[category] = photos_by_category.get(category, 0) + 1

        created = [parse_timestamp(g["created_at"]) for g in generations]
        this_week = sum(1 for c in created if c >= one_week_ago)
        last_week = sum(1 for c in created if two_weeks_ago <= c < one_week_ago)

        recent = [
            RecentPrompt(prompt=g.get("prompt") or "No prompt", created_at=created[i])
            for i, g in enumerate(generations[:RECENT_PROMPTS_LIMIT])
        ]

        return AnalyticsContext(
            total_photos=len(photos),
            total_generations=len(generations),
            recent_generations=recent,
            photos_by_category=photos_by_category,
            generations_this_week=this_week,
            generations_last_week=last_week,
        )

    def get_admin_stats(self, now: Optional[datetime] = None) -> AdminStats:
        now = now or datetime.now(timezone.utc)
        first_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        try:
            return AdminStats(
                total_clients=self._count("profiles"),
                total_generations=self._count("generations"),
                generations_this_month=self._count("generations", since=first_of_month),
                total_menu_photos=self._count("menu_photos"),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _active_user_ids(self, user_ids: List[str], since: datetime) -> set:
        active = set()
        for table in ("generations", "menu_photos"):
            result = self.supabase.table(table)\
                .select("user_id, created_at")\
                .in_("user_id", user_ids)\
                .gte("created_at", since.isoformat())\
                .execute()
            active.update(row["user_id"] for row in result.data or [])
        return active

    def get_admin_alerts(self, now: Optional[datetime] = None) -> AdminAlerts:
        """Clients with no generation or upload in the last 7 days.

        Failed generations are not persisted, so that count is always 0.
        """
        now = now or datetime.now(timezone.utc)
        try:
            profiles = self.supabase.table("profiles").select("id").execute().data or []
            user_ids = [p["id"] for p in profiles]
            inactive = 0
            if user_ids:
                active = self._active_user_ids(user_ids, now - timedelta(days=INACTIVITY_DAYS))
                inactive = sum(1 for uid in user_ids if uid not in active)
            return AdminAlerts(failed_generations_today=0, inactive_clients=inactive)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_recent_activity(self) -> List[RecentGeneration]:
        try:
            result = self.supabase.table("generations")\
                .select("id, prompt, images, created_at, user_id")\
                .order("created_at", desc=True)\
                .limit(RECENT_ACTIVITY_LIMIT)\
                .execute()
            generations = result.data or []
            if not generations:
                return []
            email_map = fetch_emails(self.supabase, [g.get("user_id") for g in generations])
            return [
                RecentGeneration(**{**gen, "images": gen.get("images") or [], "user_email": email_map.get(gen["user_id"])})
                for gen in generations
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _counts_and_last(self, rows: Iterable[Dict[str, Any]], since: datetime) -> tuple:
        counts: Dict[str, int] = {}
        last: Dict[str, datetime] = {}
        for row in rows:
            uid = row["user_id"]
            created = parse_timestamp(row["created_at"])
            if created >= since:
                counts[uid] = counts.get(uid, 0) + 1
            if uid not in last or created > last[uid]:
                last[uid] = created
        return counts, last

    def get_client_activity(self, now: Optional[datetime] = None) -> List[ClientActivitySummary]:
        """Per-client activity for the last 7 days, most recently active first, never-active last"""
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(days=INACTIVITY_DAYS)
        try:
            profiles = self.supabase.table("profiles")\
                .select("id, email, display_name, organization_id")\
                .execute().data or []
            if not profiles:
                return []
            user_ids = [p["id"] for p in profiles]
            org_map = fetch_organization_names(self.supabase, [p.get("organization_id") for p in profiles])

            generations = self.supabase.table("generations")\
                .select("user_id, created_at")\
                .in_("user_id", user_ids)\
                .execute().data or []
            photos = self.supabase.table("menu_photos")\
                .select("user_id, created_at")\
                .in_("user_id", user_ids)\
                .execute().data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        gen_counts, gen_last = self._counts_and_last(generations, since)
        upload_counts, upload_last = self._counts_and_last(photos, since)

        summaries = []
        for profile in profiles:
            uid = profile["id"]
            candidates = [d for d in (gen_last.get(uid), upload_last.get(uid)) if d is not None]
            org_id = profile.get("organization_id")
            summaries.append(ClientActivitySummary(
                client_id=uid,
                client_name=profile.get("display_name") or profile.get("email") or "Unknown",
                client_email=profile.get("email"),
                organization_id=org_id,
                organization_name=org_map.get(org_id) if org_id else None,
                generations_last_7_days=gen_counts.get(uid, 0),
                uploads_last_7_days=upload_counts.get(uid, 0),
                last_active=max(candidates) if candidates else None,
            ))

        never = datetime.min.replace(tzinfo=timezone.utc)
        summaries.sort(key=lambda s: (s.last_active is not None, s.last_active or never), reverse=True)
        return summaries
