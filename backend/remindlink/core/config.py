"""
Application configuration and environment variables
"""
import os
from dotenv import load_dotenv

from remindlink.core.constants import DEFAULT_NOTIFY_ID_BASE, DEFAULT_REMINDER_INTERVAL_SECONDS

# Load environment variables
load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name, "")
    return int(value) if value.strip() else default


class Settings:
    """Application settings loaded from environment variables"""

    # Clock
    APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "UTC")

    # Reminder chain
    REMINDER_INTERVAL_SECONDS: int = _int_env("REMINDER_INTERVAL_SECONDS", DEFAULT_REMINDER_INTERVAL_SECONDS)
    NOTIFY_ID_BASE: int = _int_env("NOTIFY_ID_BASE", DEFAULT_NOTIFY_ID_BASE)

    # Scheduler backend (empty URL keeps jobs in memory)
    SCHEDULER_JOBSTORE_URL: str = os.getenv("SCHEDULER_JOBSTORE_URL", "")
    SCHEDULER_MAX_WORKERS: int = _int_env("SCHEDULER_MAX_WORKERS", 10)

    # Deep links
    LINK_SCHEME: str = os.getenv("LINK_SCHEME", "app")
    ROUTE_TABLE: str = os.getenv("ROUTE_TABLE", "")

    # Notifications
    NOTIFICATION_SINK: str = os.getenv("NOTIFICATION_SINK", "memory")
    NOTIFICATION_SMALL_ICON: str = os.getenv("NOTIFICATION_SMALL_ICON", "ic_reminder")

    # WhatsApp / Twilio
    TWILIO_ACCOUNT_SID: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.getenv("TWILIO_AUTH_TOKEN", "")
    TWILIO_WHATSAPP_NUMBER: str = os.getenv("TWILIO_WHATSAPP_NUMBER", "")
    WHATSAPP_RECIPIENT: str = os.getenv("WHATSAPP_RECIPIENT", "")

    @property
    def reminder_interval_millis(self) -> int:
        return self.REMINDER_INTERVAL_SECONDS * 1000


# Create a global settings instance
settings = Settings()
