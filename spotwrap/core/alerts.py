"""Alert channel: user-visible failures waiting to be shown by the UI."""
import logging
import threading
from collections import deque
from typing import List

from spotwrap.config import ALERT_HISTORY
from spotwrap.models.alert import Alert

logger = logging.getLogger(__name__)


class AlertChannel:
    """Bounded queue of alerts. Oldest entries drop once the UI falls behind."""

    def __init__(self, maxlen: int = ALERT_HISTORY) -> None:
        self._alerts: deque[Alert] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def publish(self, alert: Alert) -> None:
        logger.warning("Alert: %s %s", alert.title, alert.message)
        with self._lock:
            self._alerts.append(alert)

    def drain(self) -> List[Alert]:
        """Return queued alerts (oldest first) and clear the queue."""
        with self._lock:
            out = list(self._alerts)
            self._alerts.clear()
        return out

    def __len__(self) -> int:
        with self._lock:
            return len(self._alerts)
