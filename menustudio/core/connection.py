"""Connection-status state machine surfaced to clients: connecting -> reconnecting -> connected | error."""

import logging
import threading
from enum import Enum
from typing import Any, Dict

logger = logging.getLogger(__name__)


class ConnectionStatus(str, Enum):
    CONNECTING = "connecting"
    RECONNECTING = "reconnecting"
    CONNECTED = "connected"
    ERROR = "error"


class ConnectionTracker:
    def __init__(self):
        self._lock = threading.Lock()
        self.status = ConnectionStatus.CONNECTING
        self.retry_count = 0

    def connecting(self) -> None:
        with self._lock:
            self.status = ConnectionStatus.CONNECTING
            self.retry_count = 0

    def reconnecting(self, attempt: int, error: Exception = None) -> None:
        """Usable directly as a retry_with_backoff `on_retry` callback."""
        with self._lock:
            self.status = ConnectionStatus.RECONNECTING
            self.retry_count = attempt
        logger.info(f"Reconnecting to backend (attempt {attempt})")

    def connected(self) -> None:
        with self._lock:
            self.status = ConnectionStatus.CONNECTED

    def failed(self) -> None:
        with self._lock:
            self.status = ConnectionStatus.ERROR
        logger.error(f"Backend connection failed after {self.retry_count} retries")

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {"status": self.status.value, "retry_count": self.retry_count}


# Process-wide tracker for this server's link to Supabase
connection_tracker = ConnectionTracker()


def get_connection_tracker() -> ConnectionTracker:
    return connection_tracker
