"""Incremental parser for the chat completion event stream."""

import codecs
import json
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DONE_MARKER = "[DONE]"


def delta_content(payload: Dict[str, Any]) -> Optional[str]:
    """Text delta of a streamed chat completion chunk"""
    choices = payload.get("choices") or []
    if not choices:
        return None
    return (choices[0].get("delta") or {}).get("content")


class SSELineBuffer:
    """
    Feed raw byte chunks; get back the JSON payloads of complete `data:` lines.

    A chunk boundary can split a line or a multi-byte character. A `data:`
    line whose JSON does not parse yet is kept and retried once more bytes
    arrive.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""
        self.done = False

    @staticmethod
    def _data_of(line: str) -> Optional[str]:
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip() or line.startswith(":") or not line.startswith("data:"):
            return None
        return line[5:].strip()

    def feed(self, chunk: bytes) -> List[Dict[str, Any]]:
        if self.done:
            return []
        self._buffer += self._decoder.decode(chunk)
        payloads: List[Dict[str, Any]] = []

        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            data = self._data_of(line)
            if data is None:
                continue
            if data == DONE_MARKER:
                self.done = True
                break
            try:
                payloads.append(json.loads(data))
            except ValueError:
                self._buffer = line + "\n" + self._buffer
                break
        return payloads

    def flush(self) -> List[Dict[str, Any]]:
        """Parse whatever is left once the stream has ended"""
        self._buffer += self._decoder.decode(b"", final=True)
        remaining, self._buffer = self._buffer, ""
        if self.done or not remaining.strip():
            return []

        payloads: List[Dict[str, Any]] = []
        for raw in remaining.split("\n"):
            data = self._data_of(raw)
            if data is None or data == DONE_MARKER:
                continue
            try:
                payloads.append(json.loads(data))
            except ValueError:
                logger.debug(f"Dropping unparsable stream line: {data[:80]}")
        return payloads
