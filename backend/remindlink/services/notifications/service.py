"""
Notification Dispatcher - Builds and delivers notifications
Owns the notification id counter and the shared builder; send() is serialized
"""
import logging
import threading
from typing import Callable, Optional

from remindlink.core.constants import DEFAULT_NOTIFY_ID_BASE
from remindlink.core.exceptions import DeliveryFailure
from remindlink.models.link import LaunchableTarget
from remindlink.models.notification import NotificationRecord
from remindlink.services.links.resolver import LinkResolver
from remindlink.utils.timezone import now_epoch_millis
from .builder import NotificationBuilder
from .sinks import NotificationSink

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Service for sending notifications through a sink
    """

    def __init__(
        self,
        sink: NotificationSink,
        resolver: Optional[LinkResolver] = None,
        notify_id_base: int = DEFAULT_NOTIFY_ID_BASE,
        builder: Optional[NotificationBuilder] = None,
        clock: Callable[[], int] = now_epoch_millis
    ):
        """
        Initialize notification dispatcher

        Args:
            sink: Channel notifications are delivered to
            resolver: Link resolver used by send_link()
            notify_id_base: First notification id handed out
            builder: Shared notification template
            clock: Returns the current time in epoch milliseconds
        """
        self.sink = sink
        self.resolver = resolver
        self.builder = builder or NotificationBuilder()
        self._clock = clock
        self._lock = threading.Lock()
        self._notify_id = notify_id_base

    @property
    def next_notify_id(self) -> int:
        with self._lock:
            return self._notify_id

    def send(self, title: str, content: str,
             launch_target: Optional[LaunchableTarget] = None) -> NotificationRecord:
        """
        Build and deliver one notification

        Args:
            title: Notification title
            content: Notification body (multi-line capable)
            launch_target: Click action; None delivers a notification without one

        Returns:
            The delivered NotificationRecord

        Raises:
            DeliveryFailure: If the sink rejects the notification
        """
        with self._lock:
            # Every field is overwritten so nothing leaks from the previous send
            self.builder.set_content_title(title) \
                .set_content_text(content) \
                .set_big_text(content) \
                .set_when(self._clock()) \
                .set_content_intent(launch_target)
            notify_id = self._notify_id
            record = self.builder.build(notify_id)

            try:
                self.sink.post_record(record)
            except DeliveryFailure:
                logger.error(f"[DISPATCH] Sink rejected notification {notify_id}")
                raise
            except Exception as e:
                logger.error(f"[DISPATCH] Failed to deliver notification {notify_id}: {e}")
                raise DeliveryFailure(f"Failed to deliver notification {notify_id}: {e}") from e

            self._notify_id += 1

        logger.info(
            f"[DISPATCH] Notification {notify_id} sent: {title}"
            + ("" if launch_target else " (no click action)")
        )
        return record

    def send_link(self, title: str, content: str, link: Optional[str],
                  request_code: int = 0, broadcast: bool = False) -> NotificationRecord:
        """
        Send a notification whose click action opens link

        Args:
            title: Notification title
            content: Notification body
            link: Deep link; dead or malformed links give no click action
            request_code: Identifies the click action to the platform
            broadcast: Keep the raw link and resolve it only when clicked

        Returns:
            The delivered NotificationRecord
        """
        target = None
        if link and self.resolver is not None:
            if broadcast:
                target = self.resolver.build_broadcast_target(link, request_code)
            else:
                target = self.resolver.build_launch_target(link, request_code)
        return self.send(title, content, target)

    def cancel_all(self) -> int:
        """
        Remove every live notification. The id counter keeps counting.

        Returns:
            Number of notifications removed
        """
        return self.sink.cancel_all()
