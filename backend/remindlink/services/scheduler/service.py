"""
Scheduler Service - Background scheduler lifecycle management
Starts and stops the APScheduler backend the reminder chains run on
"""
import logging

from remindlink.core.dependencies import get_services

logger = logging.getLogger(__name__)


def start_scheduler():
    """
    Start the scheduler backend
    Pending jobs from a persistent jobstore resume firing once started
    """
    services = get_services()
    backend = services.backend

    if backend.running:
        logger.warning("Scheduler already running")
        return

    backend.start()
    logger.info(f"Scheduler started - reminders re-arm every {services.reminders.interval_millis // 1000} seconds")


def stop_scheduler():
    """Stop the scheduler backend"""
    backend = get_services().backend

    if backend.running:
        backend.shutdown()
        logger.info("Scheduler stopped")
