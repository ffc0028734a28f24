"""
Scheduler Backend - APScheduler-backed deferred job facility
One-shot jobs addressed by a unique name; a new job under an existing
name replaces the old one
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from remindlink.core.constants import DEFAULT_HANDLER_KEY
from remindlink.core.exceptions import JobSubmissionFailure, SchedulerError
from remindlink.utils.timezone import get_app_tz
from . import jobs

logger = logging.getLogger(__name__)


class SchedulerBackend:
    """
    Named deferred jobs on top of a BackgroundScheduler
    """

    def __init__(
        self,
        jobstore_url: str = "",
        max_workers: int = 10,
        timezone=None,
        handler_key: str = DEFAULT_HANDLER_KEY
    ):
        """
        Initialize the backend (not started)

        Args:
            jobstore_url: SQLAlchemy URL for persistent jobs; empty keeps jobs in memory
            max_workers: Size of the worker pool fired jobs run on
            timezone: Scheduler timezone, defaults to the application timezone
            handler_key: Key the fire handler is registered under
        """
        self.handler_key = handler_key
        self._timezone = timezone or get_app_tz()

        if jobstore_url:
            jobstore = SQLAlchemyJobStore(url=jobstore_url)
        else:
            jobstore = MemoryJobStore()

        self._scheduler = BackgroundScheduler(
            jobstores={"default": jobstore},
            executors={"default": ThreadPoolExecutor(max_workers)},
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                # Late fires still run; a job never runs early
                "misfire_grace_time": None
            },
            timezone=self._timezone
        )
        self._scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def register_handler(self, handler: Callable[[Dict[str, Any]], Any]) -> None:
        """Set the function fired jobs are handed to"""
        jobs.register_handler(self.handler_key, handler)

    def start(self) -> None:
        if self._scheduler.running:
            logger.warning("[SCHEDULER] Backend already running")
            return
        self._scheduler.start()
        logger.info(f"[SCHEDULER] Backend started with {len(self._scheduler.get_jobs())} pending job(s)")

    def shutdown(self, wait: bool = True) -> None:
        if not self._scheduler.running:
            return
        self._scheduler.shutdown(wait=wait)
        logger.info("[SCHEDULER] Backend stopped")

    def submit(self, job_name: str, delay_millis: int, payload: Dict[str, Any]) -> datetime:
        """
        Submit a one-shot job, replacing any job with the same name

        Args:
            job_name: Unique job name
            delay_millis: Delay before the job fires (negative values fire now)
            payload: JSON-compatible data handed to the fire handler

        Returns:
            The time the job is due

        Raises:
            JobSubmissionFailure: If the backend is not running or rejects the job
        """
        if not self._scheduler.running:
            raise JobSubmissionFailure(f"Scheduler backend is not running, cannot submit {job_name}")

        run_date = datetime.now(self._timezone) + timedelta(milliseconds=max(0, delay_millis))
        try:
            self._scheduler.add_job(
                func=jobs.run_reminder_job,
                trigger=DateTrigger(run_date=run_date, timezone=self._timezone),
                id=job_name,
                name=job_name,
                kwargs={"payload": dict(payload), "handler_key": self.handler_key},
                replace_existing=True
            )
        except Exception as e:
            logger.error(f"[SCHEDULER] Failed to submit job {job_name}: {e}")
            raise JobSubmissionFailure(f"Failed to submit job {job_name}: {e}") from e
        return run_date

    def cancel(self, job_name: str) -> bool:
        """
        Cancel a pending job

        Returns:
            True if a pending job was removed
        """
        try:
            self._scheduler.remove_job(job_name)
            return True
        except JobLookupError:
            return False

    def get_job(self, job_name: str):
        return self._scheduler.get_job(job_name)

    def next_fire_millis(self, job_name: str) -> Optional[int]:
        """Due time of a pending job in epoch milliseconds, or None"""
        job = self.get_job(job_name)
        if job is None or job.next_run_time is None:
            return None
        return int(job.next_run_time.timestamp() * 1000)

    def pending_jobs(self) -> Dict[str, Optional[int]]:
        """Job name -> due time in epoch milliseconds for every pending job"""
        if not self._scheduler.running:
            raise SchedulerError("Scheduler backend is not running")
        return {
            job.id: int(job.next_run_time.timestamp() * 1000) if job.next_run_time else None
            for job in self._scheduler.get_jobs()
        }

    def _on_job_error(self, event) -> None:
        logger.error(f"[SCHEDULER] Job {event.job_id} raised: {event.exception!r}")
