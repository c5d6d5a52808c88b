"""Image helpers shared by the generation endpoints and photo uploads."""

import base64
import re
from typing import List, Optional, Tuple

RESOLUTION_BASE_PIXELS = {
    "1K": 1024,
    "2K": 2048,
    "4K": 4096,
}

RATIO_DIMENSIONS = {
    "1:1": (1, 1),
    "16:9": (16, 9),
    "9:16": (9, 16),
    "4:3": (4, 3),
}

RESOLUTION_QUALITY = {
    "4K": "ultra high definition 4K quality",
    "2K": "high definition 2K quality",
}

_DATA_URL_RE = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)
_INLINE_IMAGE_RE = re.compile(r"data:image/[^;]+;base64,[^\s\"]+")
_DATA_URL_PREFIX_RE = re.compile(r"^data:image/\w+;base64,")

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"


def calculate_dimensions(ratio: str, resolution: str) -> Tuple[int, int]:
    """Pixel size where the larger side equals the resolution's base pixels. Unknown values fall back to 1:1 / 1K."""
    base = RESOLUTION_BASE_PIXELS.get(resolution, 1024)
    w, h = RATIO_DIMENSIONS.get(ratio, (1, 1))
    if w >= h:
        return base, round(base * h / w)
    return round(base * w / h), base


def resolution_quality(resolution: str) -> str:
    return RESOLUTION_QUALITY.get(resolution, "standard 1K quality")


def parse_data_url(url: str) -> Optional[Tuple[str, str]]:
    """Return (mime_type, base64_data) for a data URL, None otherwise."""
    match = _DATA_URL_RE.match(url)
    if not match:
        return None
    return match.group(1), match.group(2)


def find_inline_images(text: str) -> List[str]:
    return _INLINE_IMAGE_RE.findall(text or "")


def decode_data_url(url: str) -> bytes:
    return base64.b64decode(_DATA_URL_PREFIX_RE.sub("", url))


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def sniff_image_type(data: bytes) -> Optional[str]:
    """Content type from the file header; only PNG and JPEG are recognised."""
    if data.startswith(PNG_SIGNATURE):
        return "image/png"
    if data.startswith(JPEG_SIGNATURE):
        return "image/jpeg"
    return None


def extension_for(content_type: str) -> str:
    return "jpg" if content_type == "image/jpeg" else "png"


def extract_gateway_images(message: Optional[dict]) -> List[str]:
    """Images from a chat-completions message: the `images` array first, inline data URLs in content otherwise."""
    if not message:
        return []
    images = [
        (img.get("image_url") or {}).get("url") or img.get("url")
        for img in message.get("images") or []
    ]
    images = [url for url in images if url]
    if images:
        return images
    content = message.get("content")
    return find_inline_images(content) if isinstance(content, str) else []


def extract_gemini_image(data: dict) -> Optional[str]:
    """First image part of a native Gemini generateContent response, as a data URL."""
    candidates = data.get("candidates") or []
    if not candidates:
        return None
    for part in (candidates[0].get("content") or {}).get("parts") or []:
        inline = part.get("inlineData") or {}
        if (inline.get("mimeType") or "").startswith("image/"):
            return f"data:{inline['mimeType']};base64,{inline.get('data', '')}"
    return None
