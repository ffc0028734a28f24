"""
Scheduler Job Definitions
The function every reminder job runs, plus the registry of fire handlers
"""
import logging
import threading
from typing import Any, Callable, Dict

from remindlink.core.constants import DEFAULT_HANDLER_KEY, PAYLOAD_REMINDER_ID
from remindlink.core.exceptions import SchedulerError

logger = logging.getLogger(__name__)

# Jobs are stored by reference to run_reminder_job (persistent jobstores
# cannot pickle bound methods), so the live handler is looked up by key.
_handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {}
_handlers_lock = threading.Lock()


def register_handler(handler_key: str, handler: Callable[[Dict[str, Any]], Any]) -> None:
    with _handlers_lock:
        _handlers[handler_key] = handler


def unregister_handler(handler_key: str) -> None:
    with _handlers_lock:
        _handlers.pop(handler_key, None)


def run_reminder_job(payload: Dict[str, Any], handler_key: str = DEFAULT_HANDLER_KEY) -> bool:
    """
    Entry point of a fired reminder job
    Called on a scheduler worker thread when the job's delay elapses

    Args:
        payload: Reminder payload stored with the job
        handler_key: Which registered handler processes the payload

    Returns:
        True if the notification was delivered, False otherwise

    Raises:
        SchedulerError: If no handler is registered under handler_key
    """
    with _handlers_lock:
        handler = _handlers.get(handler_key)

    if handler is None:
        logger.error(f"[SCHEDULER] No fire handler registered under '{handler_key}', "
                     f"dropping reminder {payload.get(PAYLOAD_REMINDER_ID)}")
        raise SchedulerError(f"No fire handler registered under '{handler_key}'")

    result = handler(payload)
    return bool(getattr(result, "delivered", result))
