from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class MenuPhotoResponse(BaseModel):
    id: str
    name: str
    category: str = "Uploaded"
    original_url: str
    thumbnail_url: str
    sort_order: int = 0
    user_id: str
    organization_id: Optional[str] = None
    deleted_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MenuPhotoRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class MenuPhotoReorder(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class TrashItem(BaseModel):
    id: str
    name: str
    thumbnail_url: str
    original_url: str
    deleted_at: datetime
    deleted_by: Optional[str] = None
    deleted_by_email: Optional[str] = None
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    user_id: str


class PurgeResponse(BaseModel):
    purged: int
