from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

Resolution = Literal["1K", "2K", "4K"]
Ratio = Literal["1:1", "16:9", "9:16", "4:3"]


class AdminSettingsResponse(BaseModel):
    id: str
    master_prompt: str = ""
    default_resolution: str = "1K"
    default_ratio: str = "1:1"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminSettingsUpdate(BaseModel):
    master_prompt: Optional[str] = None
    default_resolution: Optional[Resolution] = None
    default_ratio: Optional[Ratio] = None


class DefaultSettings(BaseModel):
    default_resolution: str = "2K"
    default_ratio: str = "1:1"
