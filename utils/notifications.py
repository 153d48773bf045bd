"""
User notifications for the HF Propagation Dashboard.
Collects the short status messages the UI shows after refreshes and analyses.
"""

import logging
import threading
import time
from collections import deque
from datetime import datetime
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class NotificationCenter:
    """Holds the current notification and a bounded log of recent ones."""

    NOTIFICATION_TYPES = {
        'info': logging.INFO,
        'success': logging.INFO,
        'warning': logging.WARNING,
        'error': logging.ERROR,
    }

    def __init__(self, display_seconds: float = 5.0, max_history: int = 50, clock=time.time):
        self.display_seconds = display_seconds
        self._clock = clock
        self._history = deque(maxlen=max_history)
        self._current: Optional[Dict] = None
        self._shown_at = 0.0
        self._lock = threading.Lock()

    def notify(self, message: str, notification_type: str = 'info') -> Dict:
        """Publish a notification; it replaces whatever is currently shown."""
        if notification_type not in self.NOTIFICATION_TYPES:
            logger.warning(f"Unknown notification type {notification_type}, using info")
            notification_type = 'info'

        notification = {
            'message': message,
            'type': notification_type,
            'timestamp': datetime.now().isoformat(),
        }

        with self._lock:
            self._current = notification
            self._shown_at = self._clock()
            self._history.append(notification)

        logger.log(self.NOTIFICATION_TYPES[notification_type], f"Notification ({notification_type}): {message}")
        return notification

    def info(self, message: str) -> Dict:
        return self.notify(message, 'info')

    def success(self, message: str) -> Dict:
        return self.notify(message, 'success')

    def warning(self, message: str) -> Dict:
        return self.notify(message, 'warning')

    def error(self, message: str) -> Dict:
        return self.notify(message, 'error')

    @property
    def current(self) -> Optional[Dict]:
        """The notification still inside its display window, if any."""
        with self._lock:
            if self._current and self._clock() - self._shown_at <= self.display_seconds:
                return self._current
            return None

    def recent(self, limit: int = 10) -> List[Dict]:
        with self._lock:
            return list(self._history)[-limit:]

    def clear(self):
        with self._lock:
            self._current = None
            self._history.clear()
