"""
Dependency injection for shared services
Builds the route table, resolver, sink, dispatcher and scheduler once
"""
import logging
import threading
from typing import Optional

from twilio.rest import Client

from remindlink.core.config import Settings, settings
from remindlink.core.constants import DEFAULT_ROUTES
from remindlink.core.exceptions import ConfigurationError
from remindlink.services.links import LinkResolver, RouteTable
from remindlink.services.notifications import (
    InMemoryNotificationSink,
    NotificationBuilder,
    NotificationDispatcher,
    NotificationSink,
    WhatsAppNotificationSink
)
from remindlink.services.scheduler.backend import SchedulerBackend
from remindlink.services.scheduler.reminders import ReminderScheduler

logger = logging.getLogger(__name__)


class Services:
    """The wired-up reminder services"""

    def __init__(self, router: RouteTable, resolver: LinkResolver, sink: NotificationSink,
                 dispatcher: NotificationDispatcher, backend, reminders: ReminderScheduler):
        self.router = router
        self.resolver = resolver
        self.sink = sink
        self.dispatcher = dispatcher
        self.backend = backend
        self.reminders = reminders


def get_twilio_client(config: Settings = settings) -> Optional[Client]:
    """Get Twilio client instance, or None if credentials are missing"""
    if config.TWILIO_ACCOUNT_SID and config.TWILIO_AUTH_TOKEN:
        return Client(config.TWILIO_ACCOUNT_SID, config.TWILIO_AUTH_TOKEN)
    logger.warning("Twilio credentials not found. WhatsApp notifications will not work.")
    return None


def create_route_table(config: Settings = settings) -> RouteTable:
    if config.ROUTE_TABLE.strip():
        return RouteTable.from_json(config.ROUTE_TABLE)
    return RouteTable(DEFAULT_ROUTES)


def create_notification_sink(config: Settings = settings) -> NotificationSink:
    kind = config.NOTIFICATION_SINK.strip().lower()
    if kind == "memory":
        return InMemoryNotificationSink()
    if kind == "whatsapp":
        return WhatsAppNotificationSink(
            get_twilio_client(config),
            from_number=config.TWILIO_WHATSAPP_NUMBER or "whatsapp:+14155238886",
            recipient=config.WHATSAPP_RECIPIENT,
            link_scheme=config.LINK_SCHEME
        )
    raise ConfigurationError(f"Unknown notification sink '{config.NOTIFICATION_SINK}'")


def build_services(config: Settings = settings, backend=None) -> Services:
    """
    Wire every service from settings

    Args:
        config: Settings to build from
        backend: Optional scheduler backend to use instead of an APScheduler one

    Returns:
        Services container (the scheduler backend is not started)
    """
    router = create_route_table(config)
    resolver = LinkResolver(router)
    sink = create_notification_sink(config)
    dispatcher = NotificationDispatcher(
        sink,
        resolver=resolver,
        notify_id_base=config.NOTIFY_ID_BASE,
        builder=NotificationBuilder(small_icon=config.NOTIFICATION_SMALL_ICON)
    )
    if backend is None:
        backend = SchedulerBackend(
            jobstore_url=config.SCHEDULER_JOBSTORE_URL,
            max_workers=config.SCHEDULER_MAX_WORKERS
        )
    reminders = ReminderScheduler(
        backend,
        dispatcher,
        resolver,
        interval_millis=config.reminder_interval_millis
    )
    return Services(router, resolver, sink, dispatcher, backend, reminders)


_services: Optional[Services] = None
_services_lock = threading.Lock()


def get_services() -> Services:
    """Get the process-wide services, building them on first use"""
    global _services

    with _services_lock:
        if _services is None:
            _services = build_services()
        return _services
