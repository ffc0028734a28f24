"""
Notification Sinks - Where notifications are actually delivered
Keeps track of live notifications per id so they can be clicked or cleared
"""
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from remindlink.core.exceptions import DeliveryFailure
from remindlink.models.link import LaunchableTarget
from remindlink.models.notification import NotificationRecord
from remindlink.utils.timezone import now_epoch_millis

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    """
    Base class for notification delivery channels
    """

    def __init__(self, clock: Callable[[], int] = now_epoch_millis):
        self._clock = clock
        self._lock = threading.Lock()
        self._live: Dict[int, NotificationRecord] = {}

    @abstractmethod
    def _deliver(self, notify_id: int, title: str, body: str,
                 click_action: Optional[LaunchableTarget]) -> None:
        """Hand the notification to the channel; raise DeliveryFailure on rejection"""

    def _withdraw_all(self, notify_ids: List[int]) -> None:
        """Remove delivered notifications from the channel, where it supports that"""

    def post(self, notify_id: int, title: str, body: str,
             click_action: Optional[LaunchableTarget] = None) -> NotificationRecord:
        """
        Deliver a notification and keep it as a live entry under notify_id

        Raises:
            DeliveryFailure: If the channel rejects the notification
        """
        return self.post_record(NotificationRecord(
            notify_id=notify_id,
            title=title,
            content=body,
            click_action=click_action,
            posted_at_epoch_millis=self._clock()
        ))

    def post_record(self, record: NotificationRecord) -> NotificationRecord:
        """Deliver an already built notification"""
        self._deliver(record.notify_id, record.title, record.content, record.click_action)
        with self._lock:
            self._live[record.notify_id] = record
        return record

    def take(self, notify_id: int) -> Optional[NotificationRecord]:
        """Click a notification: it is dismissed and returned"""
        with self._lock:
            return self._live.pop(notify_id, None)

    def live_notifications(self) -> List[NotificationRecord]:
        with self._lock:
            return sorted(self._live.values(), key=lambda r: r.notify_id)

    def cancel_all(self) -> int:
        """
        Remove every live notification created by this process

        Returns:
            Number of notifications removed
        """
        with self._lock:
            notify_ids = list(self._live)
            self._live.clear()
        self._withdraw_all(notify_ids)
        logger.info(f"[SINK] Cancelled {len(notify_ids)} live notification(s)")
        return len(notify_ids)


class InMemoryNotificationSink(NotificationSink):
    """
    In-process notification surface

    Keeps a history of everything posted; set_enabled(False) makes it reject
    deliveries the way a revoked notification permission would.
    """

    def __init__(self, clock: Callable[[], int] = now_epoch_millis):
        super().__init__(clock)
        self.enabled = True
        self._history: List[NotificationRecord] = []

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    def _deliver(self, notify_id, title, body, click_action):
        if not self.enabled:
            raise DeliveryFailure("Notifications are disabled for this sink")
        logger.info(f"[SINK] Notification {notify_id}: {title}")

    def post_record(self, record):
        record = super().post_record(record)
        with self._lock:
            self._history.append(record)
        return record

    def history(self) -> List[NotificationRecord]:
        with self._lock:
            return list(self._history)


def format_whatsapp_message(title: str, body: str, link: Optional[str] = None) -> str:
    """
    Format a notification as a WhatsApp message

    Args:
        title: Notification title
        body: Notification body
        link: Optional deep link to append

    Returns:
        Formatted message text
    """
    message = f"🔔 {title}"
    if body:
        message = f"{message}\n\n{body}"
    if link:
        message = f"{message}\n\nOpen: {link}"
    return message


class WhatsAppNotificationSink(NotificationSink):
    """
    Delivers notifications as WhatsApp messages via Twilio
    """

    def __init__(self, twilio_client, from_number: str, recipient: str,
                 link_scheme: str = "app", clock: Callable[[], int] = now_epoch_millis):
        """
        Initialize the WhatsApp sink

        Args:
            twilio_client: twilio.rest.Client instance (None when not configured)
            from_number: Sender number, e.g. "whatsapp:+14155238886"
            recipient: Recipient number, e.g. "whatsapp:+13128856151"
            link_scheme: Scheme used to render click actions as links
        """
        super().__init__(clock)
        self.twilio_client = twilio_client
        self.from_number = from_number
        self.recipient = recipient
        self.link_scheme = link_scheme

    def _deliver(self, notify_id, title, body, click_action):
        if not self.twilio_client or not self.recipient:
            raise DeliveryFailure("Twilio client or WhatsApp recipient not configured")

        link = click_action.to_link(self.link_scheme) if click_action else None
        logger.info(f"[TWILIO] Sending notification {notify_id} to {self.recipient}")
        try:
            message = self.twilio_client.messages.create(
                from_=self.from_number,
                body=format_whatsapp_message(title, body, link),
                to=self.recipient
            )
        except Exception as e:
            logger.error(f"[TWILIO] Send failed: {str(e)}")
            raise DeliveryFailure(f"Twilio rejected notification {notify_id}: {e}") from e
        logger.info(f"[TWILIO] Message sent with SID: {message.sid}")

    def _withdraw_all(self, notify_ids):
        if notify_ids:
            logger.warning(f"[TWILIO] {len(notify_ids)} WhatsApp message(s) cannot be withdrawn, only forgotten")
