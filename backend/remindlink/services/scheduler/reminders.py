"""
Reminder Scheduler - Recurring reminder lifecycle
schedule -> (backend delay) -> on_fire -> notification -> schedule next cycle

Per reminder id the state moves UNSCHEDULED/PENDING/FIRING -> PENDING on
schedule(), PENDING -> FIRING -> PENDING on every fire, and to UNSCHEDULED
on cancel_work(). The backend's job index is the only record of pending
reminders: one job per id, named "reminder-<id>".
"""
import logging
import threading
from typing import Any, Callable, Dict, List, Set

from remindlink.core.constants import DEFAULT_REMINDER_INTERVAL_SECONDS, JOB_NAME_PREFIX
from remindlink.core.exceptions import DeliveryFailure, JobSubmissionFailure
from remindlink.models.reminder import FireResult, ReminderRequest, ReminderState, ReminderStatus
from remindlink.services.links.resolver import LinkResolver, to_route_link
from remindlink.services.notifications.service import NotificationDispatcher
from remindlink.utils.timezone import format_epoch_millis, now_epoch_millis

logger = logging.getLogger(__name__)


def job_name_for(reminder_id: int) -> str:
    return f"{JOB_NAME_PREFIX}{reminder_id}"


class ReminderScheduler:
    """
    Schedules recurring reminders on a scheduler backend
    """

    def __init__(
        self,
        backend,
        dispatcher: NotificationDispatcher,
        resolver: LinkResolver,
        interval_millis: int = DEFAULT_REMINDER_INTERVAL_SECONDS * 1000,
        clock: Callable[[], int] = now_epoch_millis
    ):
        """
        Initialize the reminder scheduler and register it as the backend's fire handler

        Args:
            backend: Scheduler backend (submit / cancel / next_fire_millis / register_handler)
            dispatcher: Delivers the notification of each fire
            resolver: Turns reminder links into click actions
            interval_millis: Delay between a fire and the next cycle
            clock: Returns the current time in epoch milliseconds
        """
        self.backend = backend
        self.dispatcher = dispatcher
        self.resolver = resolver
        self.interval_millis = interval_millis
        self._clock = clock

        # Lock order: this lock first, then the backend's
        self._lock = threading.RLock()
        # reminder id -> epoch at the start of its running fire
        self._firing: Dict[int, int] = {}
        # Bumped by schedule() and cancel_work(); a fire only re-arms if
        # nobody touched its reminder while the notification was going out
        self._epochs: Dict[int, int] = {}
        # Ids with a chain started here and not cancelled since
        self._live: Set[int] = set()
        # Ids cancelled since their last schedule(); a fire of a job the backend
        # dequeued before the cancel still delivers but never re-arms
        self._cancelled: Set[int] = set()

        backend.register_handler(self.on_fire)

    def schedule(self, request: ReminderRequest) -> ReminderStatus:
        """
        Schedule (or reschedule) a reminder to fire at request.fire_at_epoch_millis

        Args:
            request: The reminder cycle to schedule

        Returns:
            Status of the reminder after scheduling

        Raises:
            JobSubmissionFailure: If the backend rejects the job; the chain stops
        """
        job_name = job_name_for(request.reminder_id)
        with self._lock:
            now = self._clock()
            delay = max(0, request.fire_at_epoch_millis - now)
            try:
                self.backend.submit(job_name, delay, request.to_payload())
            except JobSubmissionFailure:
                logger.error(f"[SCHEDULER] Could not schedule reminder {request.reminder_id}")
                raise
            self._epochs[request.reminder_id] = self._epochs.get(request.reminder_id, 0) + 1
            self._live.add(request.reminder_id)
            self._cancelled.discard(request.reminder_id)

        logger.info(f"[SCHEDULER] Reminder {request.reminder_id} scheduled as {job_name} in {delay} ms")
        fire_at = now + delay
        return ReminderStatus(
            reminder_id=request.reminder_id,
            state=ReminderState.PENDING,
            job_name=job_name,
            next_fire_at_epoch_millis=fire_at,
            next_fire_at=format_epoch_millis(fire_at)
        )

    def cancel_work(self, reminder_id: int) -> bool:
        """
        Cancel a reminder. A fire already in progress still delivers its
        notification but does not schedule the next cycle.

        Returns:
            True if a pending job, a running fire or a chain whose job is
            about to run was cancelled
        """
        job_name = job_name_for(reminder_id)
        with self._lock:
            self._epochs[reminder_id] = self._epochs.get(reminder_id, 0) + 1
            was_firing = reminder_id in self._firing
            was_live = reminder_id in self._live
            self._live.discard(reminder_id)
            self._cancelled.add(reminder_id)
            removed = self.backend.cancel(job_name)

        if removed or was_firing or was_live:
            logger.info(f"[SCHEDULER] Reminder {reminder_id} cancelled")
        else:
            logger.info(f"[SCHEDULER] Reminder {reminder_id} had nothing to cancel")
        return removed or was_firing or was_live

    def on_fire(self, payload: Dict[str, Any]) -> FireResult:
        """
        Handle a fired reminder job: notify, then schedule the next cycle

        Delivery failures are logged and the chain keeps going; the next
        cycle may succeed once conditions change.

        Args:
            payload: Job payload ({reminder_id, title, content, link})

        Returns:
            FireResult describing this fire

        Raises:
            JobSubmissionFailure: If the next cycle cannot be scheduled
        """
        request = ReminderRequest.from_payload(payload, fire_at_epoch_millis=self._clock())
        reminder_id = request.reminder_id

        with self._lock:
            epoch = self._epochs.get(reminder_id, 0)
            self._firing[reminder_id] = epoch

        logger.info(f"[SCHEDULER] Reminder {reminder_id} firing: {request.title}")
        notify_id = None
        delivered = False
        try:
            try:
                target = self.resolver.build_launch_target(to_route_link(request.link), request_code=reminder_id)
                record = self.dispatcher.send(request.title, request.content, target)
                notify_id = record.notify_id
                delivered = True
            except DeliveryFailure as e:
                logger.warning(f"[SCHEDULER] Reminder {reminder_id} not delivered this cycle: {e}")

            with self._lock:
                if self._epochs.get(reminder_id, 0) != epoch or reminder_id in self._cancelled:
                    logger.info(f"[SCHEDULER] Reminder {reminder_id} was cancelled or rescheduled while firing, "
                                f"not scheduling the next cycle")
                    return FireResult(reminder_id=reminder_id, notify_id=notify_id, delivered=delivered)

                next_request = request.next_cycle(self._clock() + self.interval_millis)
                try:
                    status = self.schedule(next_request)
                except JobSubmissionFailure:
                    self._live.discard(reminder_id)
                    raise
        finally:
            with self._lock:
                self._firing.pop(reminder_id, None)

        return FireResult(
            reminder_id=reminder_id,
            notify_id=notify_id,
            delivered=delivered,
            rearmed=True,
            next_fire_at_epoch_millis=status.next_fire_at_epoch_millis
        )

    def get_state(self, reminder_id: int) -> ReminderState:
        with self._lock:
            fire_epoch = self._firing.get(reminder_id)
            if (fire_epoch is not None and fire_epoch == self._epochs.get(reminder_id, 0)
                    and reminder_id not in self._cancelled):
                return ReminderState.FIRING
            if self.backend.next_fire_millis(job_name_for(reminder_id)) is not None:
                return ReminderState.PENDING
            return ReminderState.UNSCHEDULED

    def get_status(self, reminder_id: int) -> ReminderStatus:
        job_name = job_name_for(reminder_id)
        with self._lock:
            state = self.get_state(reminder_id)
            next_fire = self.backend.next_fire_millis(job_name)
        return ReminderStatus(
            reminder_id=reminder_id,
            state=state,
            job_name=job_name,
            next_fire_at_epoch_millis=next_fire,
            next_fire_at=format_epoch_millis(next_fire)
        )

    def pending_reminders(self) -> List[ReminderStatus]:
        """
        Status of every reminder with a pending job, ordered by next fire time

        Raises:
            SchedulerError: If the backend cannot list its jobs
        """
        statuses = []
        for job_name, fire_at in self.backend.pending_jobs().items():
            if not job_name.startswith(JOB_NAME_PREFIX):
                continue
            try:
                reminder_id = int(job_name[len(JOB_NAME_PREFIX):])
            except ValueError:
                logger.warning(f"[SCHEDULER] Ignoring job with unexpected name {job_name}")
                continue
            statuses.append(ReminderStatus(
                reminder_id=reminder_id,
                state=self.get_state(reminder_id),
                job_name=job_name,
                next_fire_at_epoch_millis=fire_at,
                next_fire_at=format_epoch_millis(fire_at)
            ))
        return sorted(statuses, key=lambda s: (s.next_fire_at_epoch_millis is None, s.next_fire_at_epoch_millis or 0))
