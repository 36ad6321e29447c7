"""BDD tests for A/B test metrics."""

import pytest
from notifications.experiment.ab_test import ABTestSummary, VariantMetrics
from pytest_bdd import given, parsers, scenarios, then

scenarios("features/ab_test_results.feature")


@pytest.fixture()
def summary():
    return ABTestSummary(test_id="test-1", test_name="Subject line", created_at=None)


@given(parsers.cfparse("variant {variant_id} had {opens:d} opens and {clicks:d} clicks"))
def variant_had(summary, variant_id, opens, clicks):
    summary.variants.append(
        VariantMetrics(
            notification_id=f"n-{variant_id}",
            variant_id=variant_id,
            title=f"Title {variant_id}",
            message="",
            opened_count=opens,
            clicked_count=clicks,
        )
    )


@then(parsers.cfparse('the winner is "{variant_id}"'))
def winner_is(summary, variant_id):
    assert summary.winner == variant_id


@then("there is no winner")
def no_winner(summary):
    assert summary.winner is None


@then("the result is confident")
def confident(summary):
    assert summary.confident is True


@then("the result is not confident")
def not_confident(summary):
    assert summary.confident is False


@then(parsers.cfparse('the recommendation is "{variant_id}"'))
def recommendation_is(summary, variant_id):
    assert summary.recommendation == variant_id


@then("there is no recommendation")
def no_recommendation(summary):
    assert summary.recommendation is None


@then(parsers.cfparse("variant {variant_id} has a click-through rate of {rate:f}"))
def rate_is(summary, variant_id, rate):
    variant = next(v for v in summary.variants if v.variant_id == variant_id)
    assert variant.ctr == rate
