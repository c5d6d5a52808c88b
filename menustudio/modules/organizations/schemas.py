from pydantic import BaseModel, Field, EmailStr
from typing import Optional, List, Dict, Any
from datetime import datetime

DEFAULT_PRIMARY_COLOR = "#ff6b35"


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9][a-z0-9-]*$")
    primary_color: Optional[str] = None
    owner_email: Optional[EmailStr] = None


class OrganizationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    primary_color: Optional[str] = None
    logo_url: Optional[str] = None
    disabled: Optional[bool] = None


class OrganizationResponse(BaseModel):
    id: str
    name: str
    slug: str
    primary_color: Optional[str] = None
    logo_url: Optional[str] = None
    owner_id: Optional[str] = None
    disabled: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None
    owner_email: Optional[str] = None
    generations_count: int = 0
    last_active: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrganizationDetails(BaseModel):
    organization: OrganizationResponse
    menu_photos: List[Dict[str, Any]] = Field(default_factory=list)
    generations: List[Dict[str, Any]] = Field(default_factory=list)
