"""
Notifications module
Notification building, dispatch and delivery sinks
"""
from .builder import NotificationBuilder
from .service import NotificationDispatcher
from .sinks import (
    NotificationSink,
    InMemoryNotificationSink,
    WhatsAppNotificationSink,
    format_whatsapp_message
)

__all__ = [
    'NotificationBuilder',
    'NotificationDispatcher',
    'NotificationSink',
    'InMemoryNotificationSink',
    'WhatsAppNotificationSink',
    'format_whatsapp_message'
]
