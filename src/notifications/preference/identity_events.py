"""Inbound Identity events for preferences — defaults for every new customer.

The external event type is registered in ``notifications.audience.identity_events``.
"""

import structlog
from notifications.domain import notifications
from notifications.preference.preference import NotificationPreference, preferences_for
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.identity import CustomerRegistered

logger = structlog.get_logger(__name__)


@notifications.event_handler(part_of=NotificationPreference, stream_category="identity::customer")
class PreferenceIdentityEventsHandler:
    @handle(CustomerRegistered)
    def on_customer_registered(self, event: CustomerRegistered) -> None:
        if preferences_for(event.customer_id) is not None:
            logger.info("Preferences already exist for customer", customer_id=str(event.customer_id))
            return

        current_domain.repository_for(NotificationPreference).add(
            NotificationPreference.create_default(event.customer_id)
        )
