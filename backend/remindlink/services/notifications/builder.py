"""
Notification Builder - Shared template for outgoing notifications
"""
from typing import Optional

from remindlink.models.link import LaunchableTarget
from remindlink.models.notification import NotificationRecord


class NotificationBuilder:
    """
    Mutable notification template.

    Common settings (icon, auto cancel) are fixed at construction; title,
    text, timestamp and click action are overwritten for every notification.
    Not thread-safe: the owner must serialize access.
    """

    def __init__(self, small_icon: Optional[str] = None, auto_cancel: bool = True):
        self.small_icon = small_icon
        self.auto_cancel = auto_cancel
        self.title = ""
        self.content = ""
        self.big_text = ""
        self.when = 0
        self.content_intent: Optional[LaunchableTarget] = None

    def set_content_title(self, title: str) -> "NotificationBuilder":
        self.title = title
        return self

    def set_content_text(self, content: str) -> "NotificationBuilder":
        self.content = content
        return self

    def set_big_text(self, text: str) -> "NotificationBuilder":
        # Multi-line body shown when the notification is expanded
        self.big_text = text
        return self

    def set_when(self, epoch_millis: int) -> "NotificationBuilder":
        self.when = epoch_millis
        return self

    def set_content_intent(self, target: Optional[LaunchableTarget]) -> "NotificationBuilder":
        self.content_intent = target
        return self

    def build(self, notify_id: int) -> NotificationRecord:
        return NotificationRecord(
            notify_id=notify_id,
            title=self.title,
            content=self.big_text or self.content,
            click_action=self.content_intent,
            posted_at_epoch_millis=self.when,
            auto_cancel=self.auto_cancel,
            small_icon=self.small_icon
        )
