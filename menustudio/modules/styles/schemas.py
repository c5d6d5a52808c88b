from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

StyleStatus = Literal["active", "inactive"]


class StyleCreate(BaseModel):
    name: str
    description: Optional[str] = None
    prompt_modifier: str
    thumbnail_url: Optional[str] = None
    organization_id: Optional[str] = None  # None or "global" for a global style
    has_color_picker: bool = False
    category: str = "Studio"
    status: StyleStatus = "active"
    is_default: bool = False


class StyleUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    prompt_modifier: Optional[str] = None
    thumbnail_url: Optional[str] = None
    organization_id: Optional[str] = None
    has_color_picker: Optional[bool] = None
    category: Optional[str] = None
    status: Optional[StyleStatus] = None
    is_default: Optional[bool] = None


class StyleResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    prompt_modifier: str
    thumbnail_url: Optional[str] = None
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    has_color_picker: bool = False
    category: str = "Studio"
    status: StyleStatus = "active"
    is_default: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ActiveStyle(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    prompt_modifier: str
    thumbnail_url: Optional[str] = None
    category: str = "Studio"
    is_default: bool = False


class GlobalChangeInfo(BaseModel):
    is_global_change: bool = False
    change_type: Optional[str] = None
    affected_scope: Optional[Literal["all_clients", "single_org"]] = None
    warning_message: Optional[str] = None
    severity: Optional[Literal["warning", "critical"]] = None


class StyleImpactRequest(BaseModel):
    operation: Literal["create", "update", "delete"]
    style_id: Optional[str] = None  # required for update/delete
    style: Optional[StyleUpdate] = None
