"""Shared fixtures for the remindlink test suite."""

import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from remindlink.core.constants import DEFAULT_ROUTES
from remindlink.core.dependencies import Services
from remindlink.core.exceptions import DeliveryFailure, JobSubmissionFailure
from remindlink.services.links import LinkResolver, RouteTable
from remindlink.services.notifications import (
    InMemoryNotificationSink,
    NotificationDispatcher,
    NotificationSink
)
from remindlink.services.scheduler import ReminderScheduler

START_MILLIS = 1_700_000_000_000
INTERVAL_MILLIS = 2 * 60 * 1000


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = START_MILLIS):
        self.now = start
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            return self.now

    def advance(self, millis: int) -> None:
        with self._lock:
            self.now += millis


class FakeSchedulerBackend:
    """In-memory stand-in for the APScheduler backend; jobs fire only when told to."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.running = True
        self.handler: Optional[Callable[[Dict[str, Any]], Any]] = None
        self.jobs: Dict[str, Tuple[int, Dict[str, Any]]] = {}
        self.submissions: List[Tuple[str, int, Dict[str, Any]]] = []
        self.fail_submissions = False
        self._lock = threading.Lock()

    def register_handler(self, handler):
        self.handler = handler

    def submit(self, job_name, delay_millis, payload):
        if self.fail_submissions:
            raise JobSubmissionFailure(f"storage exhausted, cannot submit {job_name}")
        with self._lock:
            self.jobs[job_name] = (self.clock() + delay_millis, dict(payload))
            self.submissions.append((job_name, delay_millis, dict(payload)))

    def cancel(self, job_name):
        with self._lock:
            return self.jobs.pop(job_name, None) is not None

    def next_fire_millis(self, job_name):
        with self._lock:
            job = self.jobs.get(job_name)
        return job[0] if job else None

    def pending_jobs(self):
        with self._lock:
            return {name: fire_at for name, (fire_at, _) in self.jobs.items()}

    def start(self):
        self.running = True

    def shutdown(self, wait=True):
        self.running = False

    def fire(self, job_name):
        """Run a pending job the way the backend would once its delay elapsed."""
        with self._lock:
            _, payload = self.jobs.pop(job_name)
        return self.handler(payload)


class RecordingSink(NotificationSink):
    """Sink that records deliveries and can run a hook or fail inside delivery."""

    def __init__(self, clock=None):
        super().__init__(clock or FakeClock())
        self.delivered: List[Tuple[int, str, str, Any]] = []
        self.fail = False
        self.on_deliver: Optional[Callable[[int, str, str], None]] = None

    def _deliver(self, notify_id, title, body, click_action):
        if self.fail:
            raise DeliveryFailure("notification permission revoked")
        if self.on_deliver:
            self.on_deliver(notify_id, title, body)
        self.delivered.append((notify_id, title, body, click_action))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def router(clock):
    return RouteTable(DEFAULT_ROUTES, clock=clock)


@pytest.fixture
def resolver(router):
    return LinkResolver(router)


@pytest.fixture
def sink(clock):
    return InMemoryNotificationSink(clock=clock)


@pytest.fixture
def recording_sink(clock):
    return RecordingSink(clock)


@pytest.fixture
def dispatcher(sink, resolver, clock):
    return NotificationDispatcher(sink, resolver=resolver, clock=clock)


@pytest.fixture
def backend(clock):
    return FakeSchedulerBackend(clock)


@pytest.fixture
def reminders(backend, dispatcher, resolver, clock):
    return ReminderScheduler(backend, dispatcher, resolver, interval_millis=INTERVAL_MILLIS, clock=clock)


@pytest.fixture
def services(router, resolver, sink, dispatcher, backend, reminders):
    return Services(router, resolver, sink, dispatcher, backend, reminders)
