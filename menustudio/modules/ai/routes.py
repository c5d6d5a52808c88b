from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from menustudio.database.supabase_client import get_service_supabase
from menustudio.modules.ai.gateway import AIGateway
from menustudio.modules.ai.schemas import (
    ChatRequest, GenerateImageRequest, GenerateImageResponse, MenuImageRequest, MenuImageResponse,
    EditImageRequest, EditImageResponse
)
from menustudio.modules.ai.service import AIService
from menustudio.core.dependencies import OrganizationContext, get_current_user, get_organization_context
from menustudio.core.errors import GatewayError
from supabase import Client
from typing import Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["ai"])


def get_gateway() -> AIGateway:
    return AIGateway()


def get_ai_service(
    gateway: AIGateway = Depends(get_gateway),
    supabase: Client = Depends(get_service_supabase),
) -> AIService:
    return AIService(gateway, supabase)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """AI endpoints report failures as {"error": message}"""
    logger.error(f"{request.url.path} failed ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code or 500, content={"error": exc.message})


@router.post("/chat")
async def chat(
    request: ChatRequest,
    ctx: OrganizationContext = Depends(get_organization_context),
    service: AIService = Depends(get_ai_service),
):
    """Marketing assistant; the gateway's SSE stream is relayed as-is"""
    stream = await service.chat_stream(request, ctx)
    return StreamingResponse(stream, media_type="text/event-stream")


@router.post("/generate-image", response_model=GenerateImageResponse)
async def generate_image(
    request: GenerateImageRequest,
    user_data: Dict = Depends(get_current_user),
    service: AIService = Depends(get_ai_service),
):
    return await service.generate_image(request)


@router.post("/generate-menu-image", response_model=MenuImageResponse)
async def generate_menu_image(
    request: MenuImageRequest,
    user_data: Dict = Depends(get_current_user),
    service: AIService = Depends(get_ai_service),
):
    return await service.generate_menu_image(request)


@router.post("/edit-image", response_model=EditImageResponse)
async def edit_image(
    request: EditImageRequest,
    user_data: Dict = Depends(get_current_user),
    service: AIService = Depends(get_ai_service),
):
    return await service.edit_image(request)
