"""
Timezone Utilities - Centralized clock and timezone handling
"""
import time
from datetime import datetime
from typing import Optional

import pytz

from remindlink.core.config import settings


def get_app_tz():
    """
    Get the configured application timezone

    Returns:
        pytz timezone for settings.APP_TIMEZONE
    """
    return pytz.timezone(settings.APP_TIMEZONE)


def now_epoch_millis() -> int:
    """Current wall-clock time in milliseconds since the epoch"""
    return int(time.time() * 1000)


def epoch_millis_to_datetime(epoch_millis: int) -> datetime:
    """
    Convert epoch milliseconds to a datetime in the application timezone

    Args:
        epoch_millis: Milliseconds since the epoch

    Returns:
        Timezone-aware datetime object
    """
    return datetime.fromtimestamp(epoch_millis / 1000.0, tz=pytz.utc).astimezone(get_app_tz())


def format_epoch_millis(epoch_millis: Optional[int]) -> Optional[str]:
    """ISO-8601 rendering of epoch milliseconds, or None"""
    if epoch_millis is None:
        return None
    return epoch_millis_to_datetime(epoch_millis).isoformat()
