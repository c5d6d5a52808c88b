from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class GenerationCreate(BaseModel):
    prompt: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    ratio: Optional[str] = None
    resolution: Optional[str] = None


class GenerationMetadata(BaseModel):
    id: str
    prompt: Optional[str] = None
    ratio: Optional[str] = None
    resolution: Optional[str] = None
    created_at: datetime


class GenerationImages(BaseModel):
    id: str
    images: List[str] = Field(default_factory=list)


class GenerationResponse(BaseModel):
    id: str
    prompt: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    ratio: Optional[str] = None
    resolution: Optional[str] = None
    user_id: str
    organization_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BulkDeleteRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int
