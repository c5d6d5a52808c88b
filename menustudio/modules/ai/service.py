from supabase import Client
from menustudio.modules.ai.gateway import AIGateway
from menustudio.modules.ai import prompts
from menustudio.modules.ai.images import decode_data_url, extension_for, parse_data_url, sniff_image_type
from menustudio.modules.ai.schemas import (
    ChatRequest, GenerateImageRequest, GenerateImageResponse, MenuImageRequest, MenuImageResponse,
    EditImageRequest, EditImageResponse
)
from menustudio.modules.admin_settings.service import AdminSettingsService
from menustudio.modules.menu_photos.storage import ImageStorage
from menustudio.core.dependencies import OrganizationContext
from typing import AsyncIterator, Optional
import logging
import time
import uuid

logger = logging.getLogger(__name__)


class AIService:
    def __init__(
        self,
        gateway: AIGateway,
        supabase: Client,
        storage: Optional[ImageStorage] = None,
        settings_service: Optional[AdminSettingsService] = None,
    ):
        self.gateway = gateway
        self.supabase = supabase
        self.storage = storage or ImageStorage(supabase)
        self.settings_service = settings_service or AdminSettingsService(supabase)

    def load_menu_items(self, ctx: OrganizationContext) -> str:
        """Menu listing for the chat system prompt; empty when it cannot be loaded"""
        try:
            query = self.supabase.table("menu_photos").select("name, category").is_("deleted_at", "null")
            if ctx.organization_id:
                query = query.eq("organization_id", ctx.organization_id)
            else:
                query = query.eq("user_id", ctx.user_id)
            result = query.order("name").execute()
            return prompts.format_menu_items(result.data or [])
        except Exception as e:
            logger.error(f"Failed to fetch menu: {e}")
            return ""

    async def chat_stream(self, request: ChatRequest, ctx: OrganizationContext) -> AsyncIterator[bytes]:
        menu_items = request.menu_context if request.menu_context else self.load_menu_items(ctx)
        system_prompt = prompts.chat_system_prompt(request.analytics_context, menu_items, ctx.organization_name)
        messages = [m.model_dump() for m in request.messages]
        logger.info(f"Chat request from user {ctx.user_id} with {len(messages)} message(s)")
        return await self.gateway.open_chat_stream(messages, system_prompt)

    async def generate_image(self, request: GenerateImageRequest) -> GenerateImageResponse:
        prompt = request.prompt
        master_prompt = self.settings_service.get_master_prompt()
        if master_prompt:
            prompt = f"{master_prompt}\n\n{prompt}" if prompt else master_prompt

        logger.info(
            f"Generating {request.photo_amount} image(s) {request.ratio}/{request.resolution} "
            f"with {len(request.image_urls)} reference photo(s)"
        )
        images, reasoning = await self.gateway.generate_images(
            prompt,
            request.ratio,
            request.resolution,
            photo_amount=request.photo_amount,
            image_urls=request.image_urls,
            photo_names=request.photo_names,
            style_guide_url=request.style_guide_url,
        )
        return GenerateImageResponse(images=images, reasoning=reasoning)

    def store_generated_image(self, image_url: str) -> str:
        """Upload a data-URL image to storage and return its public URL. Falls back to the data URL."""
        if not parse_data_url(image_url):
            return image_url
        try:
            content = decode_data_url(image_url)
            content_type = sniff_image_type(content) or "image/png"
            path = f"generated/{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}.{extension_for(content_type)}"
            public_url = self.storage.upload(content, path, content_type)
            logger.info(f"Image uploaded to: {public_url}")
            return public_url
        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            return image_url

    async def generate_menu_image(self, request: MenuImageRequest) -> MenuImageResponse:
        image_prompt = prompts.menu_image_prompt(request.prompt, request.menu_item)
        logger.info(f"Generating menu image with prompt: {image_prompt}")
        image, text_content = await self.gateway.generate_menu_image(image_prompt)
        return MenuImageResponse(
            image_url=self.store_generated_image(image),
            text_content=text_content,
            prompt=image_prompt,
        )

    async def edit_image(self, request: EditImageRequest) -> EditImageResponse:
        edited = await self.gateway.edit_image(
            request.image_url, request.edit_prompt, request.resolution, request.aspect_ratio
        )
        return EditImageResponse(image=edited)
