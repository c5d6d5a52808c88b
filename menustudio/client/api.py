"""HTTP client for the menustudio API."""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from menustudio.core.errors import GatewayError, classify_error

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
FUNCTIONS_PREFIX = "/functions/v1"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Request failed with status {response.status_code}"
    if isinstance(body, dict):
        return body.get("error") or body.get("detail") or f"Request failed with status {response.status_code}"
    return str(body)


class StudioClient:
    """
    Thin async wrapper over the REST and function endpoints.

    Headers come from `session.request_headers()` on every call so a refreshed
    token or a super admin's organization override applies immediately.
    """

    def __init__(self, base_url: str, session=None, client: Optional[httpx.AsyncClient] = None, timeout: float = 120.0):
        self.session = session
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    def _headers(self) -> Dict[str, str]:
        return self.session.request_headers() if self.session else {}

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise classify_error(e) from e
        if not response.is_success:
            raise classify_error(httpx.HTTPStatusError(
                _error_message(response), request=response.request, response=response
            ))
        return response

    # generation history source

    async def fetch_metadata(self, limit: int) -> List[Dict[str, Any]]:
        response = await self._request("GET", f"{API_PREFIX}/generations", params={"limit": limit})
        return response.json()

    async def fetch_images(self, ids: List[str]) -> List[Dict[str, Any]]:
        response = await self._request("GET", f"{API_PREFIX}/generations/images", params=[("ids", i) for i in ids])
        return response.json()

    async def delete(self, ids: List[str]) -> int:
        if len(ids) == 1:
            await self._request("DELETE", f"{API_PREFIX}/generations/{ids[0]}")
            return 1
        response = await self._request("POST", f"{API_PREFIX}/generations/bulk-delete", json={"ids": ids})
        return response.json().get("deleted", 0)

    async def save_generation(self, prompt: Optional[str], images: List[str], ratio: str, resolution: str) -> Dict[str, Any]:
        response = await self._request("POST", f"{API_PREFIX}/generations", json={
            "prompt": prompt,
            "images": images,
            "ratio": ratio,
            "resolution": resolution,
        })
        return response.json()

    # chat

    async def fetch_analytics_text(self) -> Optional[str]:
        """Pre-formatted analytics for the assistant; None when unavailable"""
        try:
            response = await self._request("GET", f"{API_PREFIX}/analytics/context")
        except Exception as e:
            logger.error(f"Failed to fetch analytics: {e}")
            return None
        return response.json().get("formatted")

    async def stream_chat(self, messages: List[Dict[str, str]], analytics_context: Optional[str] = None) -> AsyncIterator[bytes]:
        payload: Dict[str, Any] = {"messages": messages}
        if analytics_context:
            payload["analyticsContext"] = analytics_context
        async with self.client.stream(
            "POST", f"{FUNCTIONS_PREFIX}/chat", json=payload, headers=self._headers()
        ) as response:
            if not response.is_success:
                await response.aread()
                raise GatewayError(_error_message(response), response.status_code)
            async for chunk in response.aiter_bytes():
                yield chunk

    async def generate_menu_image(self, prompt: str, menu_item: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"prompt": prompt}
        if menu_item:
            body["menuItem"] = menu_item
        response = await self._request("POST", f"{FUNCTIONS_PREFIX}/generate-menu-image", json=body)
        return response.json()

    async def generate_images(self, prompt: str, ratio: str = "1:1", resolution: str = "1K", **options) -> Dict[str, Any]:
        """options: photoAmount, imageUrls, photoNames, styleGuideUrl"""
        body = {"prompt": prompt, "ratio": ratio, "resolution": resolution, **options}
        response = await self._request("POST", f"{FUNCTIONS_PREFIX}/generate-image", json=body)
        return response.json()
