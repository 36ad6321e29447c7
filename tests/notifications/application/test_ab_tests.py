"""Application tests for creating, reading and deleting A/B tests."""

import pytest
from notifications.experiment.ab_test import CreateABTest, DeleteABTest, get_ab_test, list_ab_tests
from notifications.notification.engagement import RecordNotificationClicked, RecordNotificationOpened
from notifications.notification.notification import Notification, NotificationSource
from notifications.notification.purge import PurgeNotification
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _create_test(**overrides):
    defaults = {
        "test_name": "Eid subject line",
        "variant_a_title": "Eid Mubarak! 20% off",
        "variant_a_message": "Celebrate with us",
        "variant_b_title": "Your Eid gift is inside",
        "variant_b_message": "Open for a surprise",
    }
    defaults.update(overrides)
    return current_domain.process(CreateABTest(**defaults), asynchronous=False)


def _variants(test_id):
    repo = current_domain.repository_for(Notification)
    parent = repo.get(test_id)
    child = repo._dao.query.filter(parent_id=test_id).all().items[0]
    return parent, child


def _engage(notification_id, opens, clicks):
    for _ in range(opens):
        current_domain.process(RecordNotificationOpened(notification_id=notification_id), asynchronous=False)
    for _ in range(clicks):
        current_domain.process(RecordNotificationClicked(notification_id=notification_id), asynchronous=False)


class TestCreateABTest:
    def test_creates_linked_variants(self):
        test_id = _create_test()
        parent, child = _variants(test_id)

        assert parent.variant_id == "A"
        assert parent.parent_id is None
        assert child.variant_id == "B"
        assert str(child.parent_id) == test_id
        for record in (parent, child):
            assert record.is_ab_test is True
            assert record.is_global is True
            assert record.is_sent is True
            assert record.ab_test_name == "Eid subject line"
            assert record.source == NotificationSource.AB_TEST.value
            assert record.notification_type == "promo"

    def test_variant_messages_may_be_empty(self):
        test_id = _create_test(variant_a_message="", variant_b_message="")
        parent, child = _variants(test_id)
        assert not parent.message
        assert not child.message
        assert child.title == "Your Eid gift is inside"

    def test_requires_name_and_titles(self):
        with pytest.raises(ValidationError) as exc:
            _create_test(test_name="", variant_b_title="")
        assert "test_name" in exc.value.messages
        assert "variant_b_title" in exc.value.messages
        assert current_domain.repository_for(Notification)._dao.query.all().items == []


class TestResults:
    def test_metrics_and_recommendation(self):
        test_id = _create_test()
        parent, child = _variants(test_id)
        _engage(str(parent.id), opens=20, clicks=4)
        _engage(str(child.id), opens=20, clicks=8)

        summary = get_ab_test(test_id)

        assert [v.variant_id for v in summary.variants] == ["A", "B"]
        assert summary.variants[0].ctr == pytest.approx(0.2)
        assert summary.variants[1].ctr == pytest.approx(0.4)
        assert summary.winner == "B"
        assert summary.recommendation == "B"

    def test_fresh_test_has_no_winner(self):
        summary = get_ab_test(_create_test())
        assert summary.total_opens == 0
        assert summary.winner is None
        assert summary.confident is False

    def test_variant_b_id_is_not_a_test(self):
        _, child = _variants(_create_test())
        with pytest.raises(ValidationError):
            get_ab_test(str(child.id))

    def test_list_newest_first(self):
        first = _create_test(test_name="First")
        second = _create_test(test_name="Second")
        tests = list_ab_tests()
        assert [t.test_id for t in tests] == [second, first]


class TestDeleteABTest:
    def test_deleting_the_test_removes_both_variants(self):
        test_id = _create_test()
        deleted = current_domain.process(DeleteABTest(test_id=test_id), asynchronous=False)

        assert deleted == 2
        assert current_domain.repository_for(Notification)._dao.query.all().items == []

    def test_purging_variant_a_cascades(self):
        test_id = _create_test()
        current_domain.process(PurgeNotification(notification_id=test_id), asynchronous=False)
        assert current_domain.repository_for(Notification)._dao.query.all().items == []

    def test_variant_b_cannot_be_deleted_alone(self):
        _, child = _variants(_create_test())
        with pytest.raises(ValidationError):
            current_domain.process(PurgeNotification(notification_id=str(child.id)), asynchronous=False)
        assert len(current_domain.repository_for(Notification)._dao.query.all().items) == 2

    def test_other_tests_are_untouched(self):
        keep = _create_test(test_name="Keep")
        drop = _create_test(test_name="Drop")
        current_domain.process(DeleteABTest(test_id=drop), asynchronous=False)
        assert [t.test_id for t in list_ab_tests()] == [keep]

    def test_unknown_test(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(DeleteABTest(test_id="missing"), asynchronous=False)
