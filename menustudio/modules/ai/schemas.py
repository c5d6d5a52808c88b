from pydantic import BaseModel, Field
from typing import Optional, List, Literal

# Request and response bodies keep the camelCase names the web client sends.


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    analytics_context: Optional[str] = Field(None, alias="analyticsContext")
    menu_context: Optional[str] = Field(None, alias="menuContext")

    class Config:
        populate_by_name = True


class GenerateImageRequest(BaseModel):
    prompt: Optional[str] = None
    ratio: str = "1:1"
    resolution: str = "1K"
    photo_amount: int = Field(1, alias="photoAmount")
    image_urls: List[str] = Field(default_factory=list, alias="imageUrls")
    photo_names: List[str] = Field(default_factory=list, alias="photoNames")
    style_guide_url: Optional[str] = Field(None, alias="styleGuideUrl")

    class Config:
        populate_by_name = True


class GenerateImageResponse(BaseModel):
    images: List[str]
    reasoning: str


class MenuImageRequest(BaseModel):
    prompt: Optional[str] = None
    menu_item: Optional[str] = Field(None, alias="menuItem")
    style: Optional[str] = None

    class Config:
        populate_by_name = True


class MenuImageResponse(BaseModel):
    image_url: str = Field(..., alias="imageUrl")
    text_content: str = Field("", alias="textContent")
    prompt: str

    class Config:
        populate_by_name = True


class EditImageRequest(BaseModel):
    image_url: str = Field(..., alias="imageUrl")
    edit_prompt: str = Field(..., alias="editPrompt", min_length=1)
    resolution: str = "1K"
    aspect_ratio: str = Field("1:1", alias="aspectRatio")

    class Config:
        populate_by_name = True


class EditImageResponse(BaseModel):
    image: str
