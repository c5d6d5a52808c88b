"""
Client for the AI model gateway (OpenAI-compatible chat completions) and the
native Gemini API.

Every non-success answer is raised as a GatewayError carrying the status the
caller should see; routes turn it into a `{"error": ...}` JSON body.
"""

import base64
import json
import logging
import re
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import httpx

from menustudio.config import settings
from menustudio.core.errors import BackendError, GatewayError, TransientError, TRANSIENT_STATUS_CODES, classify_error
from menustudio.core.retry import retry_with_backoff
from menustudio.modules.ai import prompts
from menustudio.modules.ai.images import (
    calculate_dimensions, resolution_quality, extract_gateway_images, extract_gemini_image, parse_data_url,
)

logger = logging.getLogger(__name__)

MAX_IMAGES_PER_REQUEST = 4
HAND_RETRY_INITIAL_DELAY_MS = 2000
HAND_THINKING_BUDGET = 16384

_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    global _http_client
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(timeout=settings.gateway_timeout_seconds)
    return _http_client


async def close_http_client() -> None:
    global _http_client
    if _http_client is not None and not _http_client.is_closed:
        await _http_client.aclose()
    _http_client = None


def parse_blueprint(content: str) -> Tuple[str, str]:
    """(image prompt, reasoning) from the brain's answer; raw content when it is not JSON."""
    match = _FENCED_JSON_RE.search(content)
    json_str = match.group(1).strip() if match else content
    try:
        parsed = json.loads(json_str)
    except ValueError:
        logger.info("[BRAIN] Could not parse as JSON, using raw content as blueprint")
        return content, "Direct prompt interpretation"
    if not isinstance(parsed, dict):
        return content, "Direct prompt interpretation"
    return parsed.get("imagePrompt") or content, parsed.get("reasoning") or "No reasoning provided"


def clamp_image_count(amount: Any) -> int:
    try:
        count = int(amount)
    except (TypeError, ValueError):
        count = 1
    return min(max(count, 1), MAX_IMAGES_PER_REQUEST)


class AIGateway:
    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or get_http_client()
        self.url = settings.ai_gateway_url
        self.api_key = settings.ai_gateway_key

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise GatewayError("AI gateway key is not configured", 500)
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        return await self.client.post(self.url, json=payload, headers=self._headers())

    # ---- chat ----

    async def open_chat_stream(self, messages: List[Dict[str, str]], system_prompt: str) -> AsyncIterator[bytes]:
        """Start a streaming completion. Status errors are raised before the first byte is returned."""
        request = self.client.build_request(
            "POST",
            self.url,
            headers=self._headers(),
            json={
                "model": settings.chat_model,
                "messages": [{"role": "system", "content": system_prompt}, *messages],
                "stream": True,
            },
        )
        response = await self.client.send(request, stream=True)
        if not response.is_success:
            body = await response.aread()
            await response.aclose()
            if response.status_code == 429:
                raise GatewayError("Rate limit exceeded. Please try again in a moment.", 429)
            if response.status_code == 402:
                raise GatewayError("AI credits depleted. Please add credits to continue.", 402)
            logger.error(f"AI gateway error: {response.status_code} {body[:500]!r}")
            raise GatewayError("AI service temporarily unavailable", 500)
        return self._relay(response)

    async def _relay(self, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        finally:
            await response.aclose()

    # ---- generate-image: brain + hand ----

    async def create_blueprint(
        self,
        user_prompt: str,
        ratio: str,
        dimensions: str,
        photo_names: List[str],
        has_style_guide: bool,
    ) -> Tuple[str, str]:
        logger.info("[BRAIN] Requesting image blueprint")
        response = await self._post({
            "model": settings.brain_model,
            "messages": [
                {"role": "system", "content": prompts.brain_system_prompt(ratio, dimensions, photo_names, has_style_guide)},
                {"role": "user", "content": user_prompt},
            ],
        })
        if not response.is_success:
            logger.error(f"[BRAIN] Error: {response.status_code} {response.text[:500]}")
            raise GatewayError(f"Brain reasoning failed: {response.status_code}", 500)

        data = response.json()
        content = ((data.get("choices") or [{}])[0].get("message") or {}).get("content")
        if not content:
            raise GatewayError("Brain returned empty response", 500)
        blueprint, reasoning = parse_blueprint(content)
        logger.info(f"[BRAIN] Reasoning: {reasoning}")
        return blueprint, reasoning

    async def _render(self, content: List[Dict[str, Any]], ratio: str, resolution: str) -> Dict[str, Any]:
        """One hand call; 5xx answers and dropped connections are retried."""
        payload = {
            "model": settings.image_model,
            "messages": [{"role": "user", "content": content}],
            "modalities": ["image", "text"],
            "generationConfig": {
                "imageConfig": {"aspectRatio": ratio, "imageSize": resolution},
                "thinkingConfig": {"thinkingBudget": HAND_THINKING_BUDGET},
            },
        }

        async def attempt() -> httpx.Response:
            try:
                response = await self._post(payload)
            except httpx.HTTPError as e:
                raise classify_error(e) from e
            if response.status_code >= 500:
                raise TransientError(f"AI gateway error: {response.status_code}", response.status_code)
            return response

        try:
            response = await retry_with_backoff(
                attempt,
                max_retries=settings.gateway_max_attempts - 1,
                initial_delay_ms=HAND_RETRY_INITIAL_DELAY_MS,
                max_delay_ms=HAND_RETRY_INITIAL_DELAY_MS * 2 ** settings.gateway_max_attempts,
                on_retry=lambda n, err: logger.warning(f"[HAND] Retry {n} after: {err}"),
            )
        except TransientError as e:
            if e.status_code in TRANSIENT_STATUS_CODES:
                raise GatewayError("AI service temporarily unavailable. Please try again in a moment.", 503) from e
            raise GatewayError(e.message, 500) from e
        except GatewayError:
            raise
        except BackendError as e:
            raise GatewayError(e.message, 500) from e

        if not response.is_success:
            logger.error(f"[HAND] AI gateway error: {response.status_code} {response.text[:500]}")
            if response.status_code == 429:
                raise GatewayError("Rate limits exceeded, please try again later.", 429)
            if response.status_code == 402:
                raise GatewayError("Payment required, please add funds to your workspace.", 402)
            raise GatewayError(f"AI gateway error: {response.status_code}", 500)

        data = response.json()
        # the gateway can answer 200 with an error body
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else None
            raise GatewayError(
                message or "AI generation failed. Try reducing resolution or using fewer reference images.", 500
            )
        return data

    async def generate_images(
        self,
        prompt: Optional[str],
        ratio: str,
        resolution: str,
        photo_amount: Any = 1,
        image_urls: Optional[List[str]] = None,
        photo_names: Optional[List[str]] = None,
        style_guide_url: Optional[str] = None,
    ) -> Tuple[List[str], str]:
        """Plan the image with the brain model, then render it `photo_amount` times with the image model"""
        width, height = calculate_dimensions(ratio, resolution)
        dimensions = f"{width}x{height} pixels"
        has_style_guide = bool(style_guide_url)

        blueprint, reasoning = await self.create_blueprint(
            prompt or prompts.DEFAULT_GENERATION_PROMPT,
            ratio,
            dimensions,
            photo_names or [],
            has_style_guide,
        )

        content: List[Dict[str, Any]] = [{
            "type": "text",
            "text": prompts.hand_prompt(blueprint, ratio, width, height, resolution_quality(resolution), has_style_guide),
        }]
        if style_guide_url:
            content.append({"type": "image_url", "image_url": {"url": style_guide_url}})
        for url in image_urls or []:
            content.append({"type": "image_url", "image_url": {"url": url}})

        count = clamp_image_count(photo_amount)
        images: List[str] = []
        for index in range(count):
            logger.info(f"[HAND] Generating image {index + 1}/{count} at {dimensions}")
            data = await self._render(content, ratio, resolution)
            message = ((data.get("choices") or [{}])[0]).get("message")
            found = extract_gateway_images(message)
            if found:
                images.extend(found)
            else:
                logger.error(f"[HAND] No images found for generation {index + 1}")

        if not images:
            raise GatewayError("No images generated - try a simpler prompt or fewer reference images", 500)
        logger.info(f"Generated {len(images)} image(s)")
        return images, reasoning

    # ---- generate-menu-image ----

    async def generate_menu_image(self, image_prompt: str) -> Tuple[str, str]:
        """Single image for the chat assistant. Returns (image url or data URL, text content)."""
        response = await self._post({
            "model": settings.image_model,
            "messages": [{"role": "user", "content": image_prompt}],
            "modalities": ["image", "text"],
        })
        if not response.is_success:
            if response.status_code == 429:
                raise GatewayError("Rate limit exceeded. Please try again in a moment.", 429)
            if response.status_code == 402:
                raise GatewayError("AI credits depleted. Please add credits to continue.", 402)
            logger.error(f"Image generation error: {response.status_code} {response.text[:500]}")
            raise GatewayError("Image generation failed", 500)

        data = response.json()
        message = ((data.get("choices") or [{}])[0]).get("message") or {}
        images = extract_gateway_images({"images": message.get("images")})
        if not images:
            raise GatewayError("No image generated", 500)
        return images[0], message.get("content") or ""

    # ---- edit-image (native Gemini) ----

    async def _load_source_image(self, image_url: str) -> Dict[str, str]:
        if image_url.startswith("data:"):
            parsed = parse_data_url(image_url)
            if not parsed:
                raise GatewayError("Invalid base64 image format", 400)
            mime_type, data = parsed
            return {"mimeType": mime_type, "data": data}

        try:
            response = await self.client.get(image_url)
        except httpx.HTTPError as e:
            raise GatewayError(f"Failed to fetch source image: {e}", 500) from e
        if not response.is_success:
            raise GatewayError(f"Failed to fetch source image: {response.status_code}", 500)
        return {
            "mimeType": response.headers.get("content-type") or "image/png",
            "data": base64.b64encode(response.content).decode("ascii"),
        }

    async def edit_image(self, image_url: str, instruction: str, resolution: str = "1K", aspect_ratio: str = "1:1") -> str:
        """Apply a text instruction to an existing image; returns the edited image as a data URL"""
        if not settings.gemini_api_key:
            raise GatewayError("GEMINI_API_KEY is not configured", 500)

        source = await self._load_source_image(image_url)
        logger.info(f"[EDIT] Editing image at {resolution}, {aspect_ratio}: {instruction!r}")
        response = await self.client.post(
            f"{settings.gemini_api_url}/{settings.gemini_image_model}:generateContent",
            params={"key": settings.gemini_api_key},
            json={
                "contents": [{
                    "parts": [
                        {"text": prompts.edit_prompt(instruction)},
                        {"inlineData": source},
                    ]
                }],
                "generationConfig": {
                    "responseModalities": ["TEXT", "IMAGE"],
                    "imageConfig": {"imageSize": resolution, "aspectRatio": aspect_ratio},
                },
            },
        )
        if not response.is_success:
            if response.status_code == 429:
                raise GatewayError("Rate limit exceeded. Please try again later.", 429)
            if response.status_code == 402:
                raise GatewayError("Usage limit reached. Please add credits.", 402)
            logger.error(f"[EDIT] Gemini API error: {response.status_code} {response.text[:500]}")
            raise GatewayError(f"Gemini API error: {response.status_code}", 500)

        edited = extract_gemini_image(response.json())
        if not edited:
            raise GatewayError("No edited image was generated", 500)
        return edited
