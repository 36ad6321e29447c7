"""Read side for the notification center and the admin list."""

from notifications.experiment.ab_test import assign_variant
from notifications.notification.notification import Notification, as_naive_utc
from notifications.utils.query import iterate_all
from protean.utils.globals import current_domain

FEED_LIMIT = 20
ADMIN_LIMIT = 50


def _newest_first(records):
    return sorted(records, key=lambda n: as_naive_utc(n.created_at), reverse=True)


def shows_variant(notification, audience_key) -> bool:
    """A/B records are shown only to the audience assigned to their variant."""
    if not notification.is_ab_test or audience_key is None:
        return True
    test_id = notification.parent_id or notification.id
    return assign_variant(str(test_id), str(audience_key)) == notification.variant_id


def recent_feed(user_id=None, limit: int = FEED_LIMIT, audience_key=None) -> list[Notification]:
    """Newest released notifications visible to ``user_id``: global plus their own."""
    dao = current_domain.repository_for(Notification)._dao
    records = list(iterate_all(dao.query.filter(is_sent=True, is_global=True)))
    if user_id:
        records += list(iterate_all(dao.query.filter(is_sent=True, is_global=False, user_id=str(user_id))))

    audience_key = audience_key or user_id
    visible = [n for n in _newest_first(records) if shows_variant(n, audience_key)]
    return visible[:limit]


def recent_for_admin(limit: int = ADMIN_LIMIT) -> list[Notification]:
    """The composer's history: newest global notifications, sent or scheduled."""
    query = current_domain.repository_for(Notification)._dao.query.filter(is_global=True)
    return _newest_first(iterate_all(query))[:limit]
