"""
Fire-and-forget notification dispatch

Request handlers hand a ``Notification`` to the dispatcher and return
immediately. A daemon worker drains the queue and retries failed deliveries a
bounded number of times. Nothing here ever raises into the caller.
"""
import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

from hotelcore.core.config import settings

logger = logging.getLogger(__name__)

CHANNEL_WHATSAPP = "whatsapp"

_STOP = object()


@dataclass
class Notification:
    recipient: str
    channel: str = CHANNEL_WHATSAPP
    template_id: Optional[str] = None
    variables: List[str] = field(default_factory=list)
    body: Optional[str] = None
    description: Optional[str] = None


class NotificationDispatcher:
    def __init__(self, sender, max_attempts: int = 3, retry_delay: float = 2.0, enabled: bool = True):
        self.sender = sender
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self.enabled = enabled
        self._queue: "queue.Queue" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def start(self):
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(target=self._run, name="notification-worker", daemon=True)
            self._worker.start()

    def stop(self, timeout: float = 5.0):
        with self._lock:
            worker = self._worker
            self._worker = None
        if worker is not None and worker.is_alive():
            self._queue.put(_STOP)
            worker.join(timeout)

    def enqueue(self, notification: Optional[Notification]):
        if notification is None or not self.enabled:
            return
        try:
            self.start()
            self._queue.put_nowait(notification)
        except Exception:
            logger.exception("Failed to enqueue notification to %s", notification.recipient)

    def join(self):
        """Block until every queued notification has been handled"""
        self._queue.join()

    def _run(self):
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._deliver(item)
            finally:
                self._queue.task_done()

    def _deliver(self, notification: Notification) -> Optional[str]:
        for attempt in range(1, self.max_attempts + 1):
            try:
                delivery_id = self.sender.send(notification)
                logger.info("Notification delivered (%s): %s", delivery_id, notification.description)
                return delivery_id
            except Exception as e:
                logger.warning(
                    "Notification attempt %d/%d to %s failed: %s",
                    attempt, self.max_attempts, notification.recipient, e,
                )
                if attempt < self.max_attempts:
                    time.sleep(self.retry_delay)
        logger.error("Giving up on notification to %s: %s", notification.recipient, notification.description)
        return None


_dispatcher: Optional[NotificationDispatcher] = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> NotificationDispatcher:
    """Process-wide dispatcher, also used as a FastAPI dependency"""
    global _dispatcher
    if _dispatcher is None:
        with _dispatcher_lock:
            if _dispatcher is None:
                from hotelcore.notifications.senders import build_sender

                _dispatcher = NotificationDispatcher(
                    build_sender(),
                    max_attempts=settings.NOTIFY_MAX_ATTEMPTS,
                    retry_delay=settings.NOTIFY_RETRY_DELAY,
                    enabled=settings.NOTIFICATIONS_ENABLED,
                )
    return _dispatcher
