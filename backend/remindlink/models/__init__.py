"""
Pydantic models for the application
"""
from remindlink.models.link import (
    DeepLink,
    DestinationRef,
    LaunchableTarget,
    Navigation,
    OpenLinkRequest,
    RegisterRouteRequest,
    RouteType,
    TargetKind
)
from remindlink.models.notification import NotificationRecord, SendNotificationRequest
from remindlink.models.reminder import (
    FireResult,
    ReminderRequest,
    ReminderState,
    ReminderStatus,
    ScheduleReminderRequest
)

__all__ = [
    "DeepLink",
    "DestinationRef",
    "LaunchableTarget",
    "Navigation",
    "OpenLinkRequest",
    "RegisterRouteRequest",
    "RouteType",
    "TargetKind",
    "NotificationRecord",
    "SendNotificationRequest",
    "FireResult",
    "ReminderRequest",
    "ReminderState",
    "ReminderStatus",
    "ScheduleReminderRequest"
]
