"""Chat with the marketing assistant, including in-chat image generation."""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from menustudio.client.sse import SSELineBuffer, delta_content

logger = logging.getLogger(__name__)

GENERATE_IMAGE_RE = re.compile(r"\[GENERATE_IMAGE:\s*(.+?)\]")
GENERATING_TEXT = "🎨 Generating image..."
IMAGE_READY_TEXT = "Here's the image I created for you:"
IMAGE_FAILED_TEXT = "Sorry, I couldn't generate the image. Please try again."


@dataclass
class Message:
    role: str
    content: str
    images: List[str] = field(default_factory=list)

    def to_wire(self) -> dict:
        return {"role": self.role, "content": self.content}


def find_image_request(content: str) -> Optional[str]:
    match = GENERATE_IMAGE_RE.search(content)
    return match.group(1).strip() if match else None


def replace_image_request(content: str, replacement: str) -> str:
    return GENERATE_IMAGE_RE.sub(replacement, content, count=1)


class ChatSession:
    """
    Conversation state for one chat window.

    `api` is a `StudioClient`; `on_update` is called with the assistant
    message each time its content changes while streaming.
    """

    def __init__(self, api, on_update: Optional[Callable[[Message], None]] = None):
        self.api = api
        self.on_update = on_update
        self.messages: List[Message] = []
        self.is_loading = False

    def _notify(self, message: Message) -> None:
        if self.on_update:
            self.on_update(message)

    async def _generate_image(self, prompt: str) -> Optional[str]:
        try:
            result = await self.api.generate_menu_image(prompt)
            return result.get("imageUrl") or None
        except Exception as e:
            logger.error(f"Image generation error: {e}")
            return None

    async def send_message(self, text: str) -> Optional[Message]:
        """Send a user message and stream the reply. Returns the assistant message."""
        if not text.strip() or self.is_loading:
            return None

        user_message = Message(role="user", content=text.strip())
        self.messages.append(user_message)
        self.is_loading = True
        assistant: Optional[Message] = None

        try:
            analytics = await self.api.fetch_analytics_text()
            history = [m.to_wire() for m in self.messages]
            buffer = SSELineBuffer()

            def apply(payloads) -> None:
                nonlocal assistant
                for payload in payloads:
                    content = delta_content(payload)
                    if not content:
                        continue
                    if assistant is None:
                        assistant = Message(role="assistant", content="")
                        self.messages.append(assistant)
                    assistant.content += content
                    self._notify(assistant)

            async for chunk in self.api.stream_chat(history, analytics):
                apply(buffer.feed(chunk))
                if buffer.done:
                    break
            apply(buffer.flush())
        except Exception as e:
            logger.error(f"Chat error: {e}")
            if assistant is not None:
                self.messages.remove(assistant)
            self.messages.remove(user_message)
            self.is_loading = False
            raise

        try:
            if assistant is not None:
                await self._handle_image_request(assistant)
        finally:
            self.is_loading = False
        return assistant

    async def _handle_image_request(self, assistant: Message) -> None:
        prompt = find_image_request(assistant.content)
        if not prompt:
            return
        raw = assistant.content
        assistant.content = replace_image_request(raw, GENERATING_TEXT)
        self._notify(assistant)

        image_url = await self._generate_image(prompt)
        if image_url:
            assistant.content = replace_image_request(raw, IMAGE_READY_TEXT)
            assistant.images = [image_url]
        else:
            assistant.content = replace_image_request(raw, IMAGE_FAILED_TEXT)
        self._notify(assistant)

    def clear_messages(self) -> None:
        self.messages = []
