"""Domain tests for the Notification aggregate."""

from datetime import UTC, datetime, timedelta

import pytest
from notifications.notification.events import (
    NotificationClicked,
    NotificationCreated,
    NotificationOpened,
    NotificationPurged,
    NotificationRead,
    NotificationSent,
)
from notifications.notification.notification import (
    Notification,
    NotificationSource,
    NotificationType,
    TargetSegment,
    Variant,
    as_naive_utc,
)
from protean.exceptions import ValidationError


def _broadcast(**overrides):
    defaults = {
        "title": "Eid Sale",
        "message": "Up to 40% off on panjabis",
        "notification_type": NotificationType.PROMO.value,
    }
    defaults.update(overrides)
    return Notification.create(**defaults)


class TestCreate:
    def test_immediate_notification_is_sent_on_creation(self):
        n = _broadcast()
        assert n.is_sent is True
        assert n.sent_at is not None
        assert n.scheduled_at is None

    def test_scheduled_notification_waits(self):
        n = _broadcast(scheduled_at=datetime.now(UTC) + timedelta(hours=2))
        assert n.is_sent is False
        assert n.sent_at is None

    def test_defaults(self):
        n = _broadcast()
        assert n.is_global is True
        assert n.target_segment == TargetSegment.ALL.value
        assert n.source == NotificationSource.ADMIN.value
        assert n.delivered_count == 0
        assert n.opened_count == 0
        assert n.clicked_count == 0
        assert n.is_read is False

    def test_raises_created_event(self):
        n = _broadcast(send_email=True)
        events = [e for e in n._events if isinstance(e, NotificationCreated)]
        assert len(events) == 1
        assert events[0].notification_id == str(n.id)
        assert events[0].is_sent is True
        assert events[0].send_email is True

    def test_criteria_round_trip(self):
        n = _broadcast(target_segment=TargetSegment.HIGH_VALUE.value, target_criteria={"min_order_value": 5000})
        assert n.criteria == {"min_order_value": 5000}

    def test_empty_criteria(self):
        assert _broadcast().criteria == {}

    def test_personal_notification_requires_user(self):
        with pytest.raises(ValidationError) as exc:
            _broadcast(is_global=False)
        assert "user_id" in exc.value.messages

    def test_personal_notification(self):
        n = _broadcast(is_global=False, user_id="cust-1")
        assert n.is_global is False
        assert str(n.user_id) == "cust-1"

    def test_invalid_type_rejected(self):
        with pytest.raises(ValidationError):
            _broadcast(notification_type="sms")


class TestVariantLinkage:
    def test_variant_a_has_no_parent(self):
        n = _broadcast(is_ab_test=True, variant_id=Variant.A.value)
        assert n.is_ab_parent is True

    def test_variant_b_needs_parent(self):
        with pytest.raises(ValidationError):
            _broadcast(is_ab_test=True, variant_id=Variant.B.value)

    def test_variant_b_with_parent(self):
        parent = _broadcast(is_ab_test=True, variant_id=Variant.A.value)
        child = _broadcast(is_ab_test=True, variant_id=Variant.B.value, parent_id=str(parent.id))
        assert child.is_ab_parent is False

    def test_variant_a_cannot_reference_parent(self):
        with pytest.raises(ValidationError):
            _broadcast(is_ab_test=True, variant_id=Variant.A.value, parent_id="other")

    def test_plain_notification_cannot_carry_variant(self):
        with pytest.raises(ValidationError):
            _broadcast(variant_id=Variant.A.value)

    def test_ab_notification_needs_variant(self):
        with pytest.raises(ValidationError):
            _broadcast(is_ab_test=True)


class TestSchedule:
    def test_due_when_time_elapsed(self):
        now = datetime.now(UTC)
        n = _broadcast(scheduled_at=now - timedelta(minutes=1))
        assert n.is_due(now) is True

    def test_due_at_exact_time(self):
        at = datetime(2026, 5, 1, 9, 0, tzinfo=UTC)
        n = _broadcast(scheduled_at=at)
        assert n.is_due(at) is True

    def test_not_due_in_future(self):
        now = datetime.now(UTC)
        n = _broadcast(scheduled_at=now + timedelta(minutes=1))
        assert n.is_due(now) is False

    def test_sent_notification_never_due(self):
        assert _broadcast().is_due(datetime.now(UTC)) is False

    def test_naive_and_aware_times_compare(self):
        n = _broadcast(scheduled_at=datetime(2026, 5, 1, 9, 0))
        assert n.is_due(datetime(2026, 5, 1, 9, 30, tzinfo=UTC)) is True

    def test_as_naive_utc(self):
        aware = datetime(2026, 5, 1, 15, 0, tzinfo=UTC)
        assert as_naive_utc(aware) == datetime(2026, 5, 1, 15, 0)
        assert as_naive_utc(None) is None


class TestMarkSent:
    def test_mark_sent(self):
        n = _broadcast(scheduled_at=datetime.now(UTC) + timedelta(hours=1))
        n._events.clear()
        n.mark_sent()
        assert n.is_sent is True
        assert n.sent_at is not None
        assert any(isinstance(e, NotificationSent) for e in n._events)

    def test_cannot_send_twice(self):
        n = _broadcast()
        with pytest.raises(ValidationError) as exc:
            n.mark_sent()
        assert "is_sent" in exc.value.messages


class TestEngagement:
    def test_record_open_increments(self):
        n = _broadcast()
        n.record_open()
        n.record_open()
        assert n.opened_count == 2
        assert sum(isinstance(e, NotificationOpened) for e in n._events) == 2

    def test_record_click_increments(self):
        n = _broadcast()
        n.record_click()
        assert n.clicked_count == 1
        event = next(e for e in n._events if isinstance(e, NotificationClicked))
        assert event.notification_type == NotificationType.PROMO.value

    def test_record_delivery_accumulates(self):
        n = _broadcast()
        n.record_delivery(3, failed=1)
        n.record_delivery(2)
        assert n.delivered_count == 5

    def test_mark_read_is_idempotent(self):
        n = _broadcast(is_global=False, user_id="cust-1")
        n._events.clear()
        n.mark_read(read_by="cust-1")
        n.mark_read(read_by="cust-1")
        assert n.is_read is True
        assert sum(isinstance(e, NotificationRead) for e in n._events) == 1

    def test_visibility(self):
        personal = _broadcast(is_global=False, user_id="cust-1")
        assert personal.is_visible_to("cust-1") is True
        assert personal.is_visible_to("cust-2") is False
        assert personal.is_visible_to(None) is False
        assert _broadcast().is_visible_to(None) is True

    def test_purge_raises_event(self):
        parent = _broadcast(is_ab_test=True, variant_id=Variant.A.value)
        parent.purge(reason="admin")
        event = next(e for e in parent._events if isinstance(e, NotificationPurged))
        assert event.is_ab_test is True
        assert event.reason == "admin"
