"""Tests for the notification dispatcher, its builder and the delivery sinks."""

import threading
import time
from unittest.mock import Mock

import pytest

from conftest import RecordingSink
from remindlink.core.exceptions import DeliveryFailure
from remindlink.services.notifications import (
    NotificationBuilder,
    NotificationDispatcher,
    WhatsAppNotificationSink,
    format_whatsapp_message
)


# ============================================================================
# Ids and delivery
# ============================================================================


def test_notify_ids_start_at_base_and_increase(dispatcher):
    records = [dispatcher.send(f"t{i}", f"c{i}") for i in range(3)]

    assert [r.notify_id for r in records] == [100, 101, 102]
    assert dispatcher.next_notify_id == 103


def test_cancel_all_clears_sink_but_keeps_counting(dispatcher, sink):
    dispatcher.send("a", "1")
    dispatcher.send("b", "2")

    assert dispatcher.cancel_all() == 2
    assert sink.live_notifications() == []

    assert dispatcher.send("c", "3").notify_id == 102


def test_send_posts_to_sink_with_click_action(dispatcher, sink, resolver, clock):
    target = resolver.build_launch_target("//route/app/second?x=1")
    record = dispatcher.send("Drink water", "Line one\nLine two", target)

    live = sink.live_notifications()
    assert [n.notify_id for n in live] == [record.notify_id]
    assert live[0].title == "Drink water"
    assert live[0].content == "Line one\nLine two"
    assert live[0].click_action == target
    assert record.posted_at_epoch_millis == clock()
    assert record.auto_cancel is True


def test_send_without_target_still_delivers(dispatcher, sink):
    record = dispatcher.send("No link", "body", None)

    assert record.click_action is None
    assert sink.live_notifications()[0].click_action is None


def test_send_link_with_dead_link_has_no_click_action(dispatcher, sink):
    record = dispatcher.send_link("Dead", "body", "//route/app/missing")

    assert record.click_action is None
    assert len(sink.live_notifications()) == 1


def test_send_link_resolves_click_action(dispatcher):
    record = dispatcher.send_link("Live", "body", "app://route/app/main?tab=today", request_code=3)

    assert record.click_action.destination.screen == "MainScreen"
    assert record.click_action.params == {"tab": "today"}
    assert record.click_action.request_code == 3


def test_builder_fields_are_overwritten_every_send(dispatcher, resolver, clock):
    first = dispatcher.send("first", "first body", resolver.build_launch_target("//route/app/main"))
    clock.advance(5000)
    second = dispatcher.send("second", "second body", None)

    assert first.click_action is not None
    assert second.title == "second"
    assert second.content == "second body"
    assert second.click_action is None
    assert second.posted_at_epoch_millis == first.posted_at_epoch_millis + 5000


# ============================================================================
# Failures
# ============================================================================


def test_sink_rejection_surfaces_delivery_failure(sink, clock):
    dispatcher = NotificationDispatcher(sink, clock=clock)
    sink.set_enabled(False)

    with pytest.raises(DeliveryFailure):
        dispatcher.send("t", "c")

    assert dispatcher.next_notify_id == 100
    assert sink.live_notifications() == []


def test_unexpected_sink_error_is_wrapped(clock):
    sink = RecordingSink(clock)
    sink.on_deliver = Mock(side_effect=RuntimeError("channel disabled"))
    dispatcher = NotificationDispatcher(sink, clock=clock)

    with pytest.raises(DeliveryFailure, match="channel disabled"):
        dispatcher.send("t", "c")


def test_ids_keep_increasing_after_a_failure(clock):
    sink = RecordingSink(clock)
    dispatcher = NotificationDispatcher(sink, clock=clock)

    dispatcher.send("a", "1")
    sink.fail = True
    with pytest.raises(DeliveryFailure):
        dispatcher.send("b", "2")
    sink.fail = False
    dispatcher.send("c", "3")

    assert [d[0] for d in sink.delivered] == [100, 101]


# ============================================================================
# Concurrency
# ============================================================================


def test_concurrent_sends_never_mix_title_and_body(clock):
    sink = RecordingSink(clock)
    sink.on_deliver = lambda *_: time.sleep(0.0005)
    dispatcher = NotificationDispatcher(sink, clock=clock)
    barrier = threading.Barrier(4)

    def worker(n):
        barrier.wait()
        for i in range(25):
            dispatcher.send(f"title-{n}-{i}", f"body-{n}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(sink.delivered) == 100
    assert sorted(d[0] for d in sink.delivered) == list(range(100, 200))
    for _, title, body, _ in sink.delivered:
        assert body == title.replace("title-", "body-")


# ============================================================================
# Sinks
# ============================================================================


def test_in_memory_sink_take_dismisses_notification(sink):
    sink.post(100, "t", "b")

    record = sink.take(100)
    assert record.notify_id == 100
    assert sink.take(100) is None
    assert sink.live_notifications() == []
    assert [r.notify_id for r in sink.history()] == [100]


def test_format_whatsapp_message():
    message = format_whatsapp_message("Stretch", "Stand up now", "app://route/app/main")

    assert message == "🔔 Stretch\n\nStand up now\n\nOpen: app://route/app/main"
    assert format_whatsapp_message("Stretch", "") == "🔔 Stretch"


def test_whatsapp_sink_sends_via_twilio(resolver, clock):
    client = Mock()
    client.messages.create.return_value = Mock(sid="SM123")
    sink = WhatsAppNotificationSink(client, "whatsapp:+14155238886", "whatsapp:+15550001111", clock=clock)
    dispatcher = NotificationDispatcher(sink, resolver=resolver, clock=clock)

    dispatcher.send_link("Stretch", "Stand up", "//route/app/second?x=1")

    client.messages.create.assert_called_once_with(
        from_="whatsapp:+14155238886",
        body="🔔 Stretch\n\nStand up\n\nOpen: app://route/app/second?x=1",
        to="whatsapp:+15550001111"
    )
    assert [r.notify_id for r in sink.live_notifications()] == [100]


def test_whatsapp_sink_wraps_twilio_errors(clock):
    client = Mock()
    client.messages.create.side_effect = RuntimeError("21608 unverified number")
    sink = WhatsAppNotificationSink(client, "whatsapp:+1", "whatsapp:+2", clock=clock)

    with pytest.raises(DeliveryFailure, match="21608"):
        sink.post(100, "t", "b")
    assert sink.live_notifications() == []


def test_whatsapp_sink_without_client_rejects(clock):
    sink = WhatsAppNotificationSink(None, "whatsapp:+1", "whatsapp:+2", clock=clock)

    with pytest.raises(DeliveryFailure):
        sink.post(100, "t", "b")


def test_whatsapp_sink_cancel_all_forgets_messages(clock):
    client = Mock()
    sink = WhatsAppNotificationSink(client, "whatsapp:+1", "whatsapp:+2", clock=clock)
    sink.post(100, "t", "b")

    assert sink.cancel_all() == 1
    assert sink.live_notifications() == []


def test_live_notification_keeps_builder_settings(sink, clock):
    dispatcher = NotificationDispatcher(sink, builder=NotificationBuilder(small_icon="ic_reminder"), clock=clock)
    dispatcher.send("t", "c")

    live = sink.live_notifications()[0]
    assert live.small_icon == "ic_reminder"
    assert live.auto_cancel is True
    assert live.style == "big_text"


def test_send_link_broadcast_keeps_raw_link(dispatcher):
    record = dispatcher.send_link("Later", "body", "//route/app/later?x=1", request_code=4, broadcast=True)

    assert record.click_action.kind.value == "broadcast"
    assert record.click_action.link == "//route/app/later?x=1"
    assert record.click_action.request_code == 4
