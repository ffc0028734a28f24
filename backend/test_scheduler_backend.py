"""Tests for the APScheduler-backed job backend and a real reminder chain on top of it."""

import time
import uuid

import pytest

from remindlink.core.constants import DEFAULT_ROUTES
from remindlink.core.exceptions import JobSubmissionFailure, SchedulerError
from remindlink.models.reminder import ReminderRequest, ReminderState
from remindlink.services.links import LinkResolver, RouteTable
from remindlink.services.notifications import InMemoryNotificationSink, NotificationDispatcher
from remindlink.services.scheduler import ReminderScheduler, SchedulerBackend, jobs
from remindlink.utils.timezone import now_epoch_millis

FAR_FUTURE_MILLIS = 60 * 60 * 1000


def wait_for(condition, timeout=3.0, interval=0.02):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return condition()


@pytest.fixture
def live_backend():
    key = f"test-{uuid.uuid4().hex}"
    backend = SchedulerBackend(max_workers=4, handler_key=key)
    backend.start()
    yield backend
    backend.shutdown(wait=False)
    jobs.unregister_handler(key)


@pytest.fixture
def live_reminders(live_backend):
    router = RouteTable(DEFAULT_ROUTES)
    resolver = LinkResolver(router)
    sink = InMemoryNotificationSink()
    dispatcher = NotificationDispatcher(sink, resolver=resolver)
    reminders = ReminderScheduler(live_backend, dispatcher, resolver, interval_millis=300)
    return reminders, sink


# ============================================================================
# Backend
# ============================================================================


def test_submit_on_stopped_backend_fails():
    backend = SchedulerBackend(handler_key=f"test-{uuid.uuid4().hex}")

    assert backend.running is False
    with pytest.raises(JobSubmissionFailure):
        backend.submit("reminder-1", 1000, {"reminder_id": 1})


def test_pending_jobs_on_stopped_backend_fails():
    with pytest.raises(SchedulerError):
        SchedulerBackend().pending_jobs()


def test_submit_replaces_job_with_same_name(live_backend):
    live_backend.submit("reminder-1", FAR_FUTURE_MILLIS, {"reminder_id": 1, "title": "first"})
    later = now_epoch_millis() + 2 * FAR_FUTURE_MILLIS
    live_backend.submit("reminder-1", 2 * FAR_FUTURE_MILLIS, {"reminder_id": 1, "title": "second"})

    pending = live_backend.pending_jobs()
    assert list(pending) == ["reminder-1"]
    assert abs(pending["reminder-1"] - later) < 1000
    assert live_backend.get_job("reminder-1").kwargs["payload"]["title"] == "second"


def test_cancel_reports_whether_a_job_was_removed(live_backend):
    live_backend.submit("reminder-2", FAR_FUTURE_MILLIS, {"reminder_id": 2})

    assert live_backend.cancel("reminder-2") is True
    assert live_backend.cancel("reminder-2") is False
    assert live_backend.next_fire_millis("reminder-2") is None


def test_fired_job_reaches_registered_handler(live_backend):
    received = []
    live_backend.register_handler(received.append)

    live_backend.submit("reminder-3", 50, {"reminder_id": 3, "title": "ping"})

    assert wait_for(lambda: received)
    assert received[0]["title"] == "ping"
    assert live_backend.next_fire_millis("reminder-3") is None


def test_run_reminder_job_without_handler_raises():
    with pytest.raises(SchedulerError):
        jobs.run_reminder_job({"reminder_id": 1}, handler_key=f"missing-{uuid.uuid4().hex}")


def test_run_reminder_job_reports_delivery():
    key = f"test-{uuid.uuid4().hex}"
    jobs.register_handler(key, lambda payload: True)
    try:
        assert jobs.run_reminder_job({"reminder_id": 1}, handler_key=key) is True
    finally:
        jobs.unregister_handler(key)


# ============================================================================
# Reminder chains on the real backend
# ============================================================================


def test_cancel_before_first_fire_posts_nothing(live_reminders):
    reminders, sink = live_reminders
    start = now_epoch_millis()
    reminders.schedule(ReminderRequest(
        reminder_id=7, title="Stretch", content="Stand up", link="/app/main",
        fire_at_epoch_millis=start + 1000
    ))

    time.sleep(0.5)
    assert reminders.cancel_work(7) is True
    time.sleep(2.5)

    assert sink.history() == []
    assert reminders.get_state(7) == ReminderState.UNSCHEDULED


def test_chain_rearms_until_cancelled(live_reminders):
    reminders, sink = live_reminders
    reminders.schedule(ReminderRequest(
        reminder_id=8, title="Water", content="One glass", link="/app/second",
        fire_at_epoch_millis=now_epoch_millis() + 100
    ))

    assert wait_for(lambda: len(sink.history()) >= 3, timeout=5.0)

    assert reminders.cancel_work(8) is True
    # A fire already handed to a worker still delivers, then the chain ends
    assert wait_for(lambda: reminders.get_state(8) == ReminderState.UNSCHEDULED)
    assert reminders.pending_reminders() == []
    time.sleep(0.2)
    settled = len(sink.history())
    time.sleep(0.8)

    history = sink.history()
    assert len(history) == settled
    assert [r.notify_id for r in history] == list(range(100, 100 + settled))
    assert all(r.click_action.destination.screen == "SecondScreen" for r in history)
