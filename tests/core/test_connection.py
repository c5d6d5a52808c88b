from menustudio.core.connection import ConnectionStatus, ConnectionTracker


class TestConnectionTracker:
    def test_starts_connecting(self):
        tracker = ConnectionTracker()
        assert tracker.snapshot() == {"status": "connecting", "retry_count": 0}

    def test_reconnecting_records_attempt(self):
        tracker = ConnectionTracker()
        tracker.reconnecting(1)
        tracker.reconnecting(2, Exception("503"))
        assert tracker.status is ConnectionStatus.RECONNECTING
        assert tracker.retry_count == 2

    def test_connected_keeps_last_retry_count(self):
        tracker = ConnectionTracker()
        tracker.reconnecting(3)
        tracker.connected()
        assert tracker.snapshot() == {"status": "connected", "retry_count": 3}

    def test_connecting_resets_retry_count(self):
        tracker = ConnectionTracker()
        tracker.reconnecting(4)
        tracker.failed()
        assert tracker.status is ConnectionStatus.ERROR
        tracker.connecting()
        assert tracker.snapshot() == {"status": "connecting", "retry_count": 0}
