"""Application tests for RequestRestockAlert."""

import pytest
from notifications.recovery.requests import RequestRestockAlert
from notifications.recovery.restock_alert import RestockAlert
from protean import current_domain
from protean.exceptions import ValidationError


def _request(**fields):
    return current_domain.process(RequestRestockAlert(**fields), asynchronous=False)


def _alerts():
    return current_domain.repository_for(RestockAlert)._dao.query.all().items


class TestRequestRestockAlert:
    def test_signed_in_request(self):
        alert_id = _request(product_id="prod-1", user_id="cust-1")
        alert = current_domain.repository_for(RestockAlert).get(alert_id)
        assert str(alert.user_id) == "cust-1"
        assert alert.notified is False

    def test_duplicate_request_returns_existing(self):
        first = _request(product_id="prod-1", email="Guest@Example.com")
        second = _request(product_id="prod-1", email="guest@example.com")
        assert first == second
        assert len(_alerts()) == 1

    def test_different_products_are_separate(self):
        _request(product_id="prod-1", user_id="cust-1")
        _request(product_id="prod-2", user_id="cust-1")
        assert len(_alerts()) == 2

    def test_needs_contact(self):
        with pytest.raises(ValidationError):
            _request(product_id="prod-1")
