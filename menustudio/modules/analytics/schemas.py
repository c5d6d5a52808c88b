from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


class RecentPrompt(BaseModel):
    prompt: str
    created_at: datetime


class AnalyticsContext(BaseModel):
    total_photos: int = 0
    total_generations: int = 0
    recent_generations: List[RecentPrompt] = Field(default_factory=list)
    photos_by_category: Dict[str, int] = Field(default_factory=dict)
    generations_this_week: int = 0
    generations_last_week: int = 0


class AnalyticsContextResponse(BaseModel):
    context: AnalyticsContext
    formatted: str


class AdminStats(BaseModel):
    total_clients: int = 0
    total_generations: int = 0
    generations_this_month: int = 0
    total_menu_photos: int = 0


class AdminAlerts(BaseModel):
    failed_generations_today: int = 0
    inactive_clients: int = 0


class RecentGeneration(BaseModel):
    id: str
    prompt: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    created_at: datetime
    user_id: str
    user_email: Optional[str] = None


class ClientActivitySummary(BaseModel):
    client_id: str
    client_name: str
    client_email: Optional[str] = None
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    generations_last_7_days: int = 0
    uploads_last_7_days: int = 0
    last_active: Optional[datetime] = None
