"""Preference management command + handler — the customer's settings page."""

from notifications.domain import notifications
from notifications.preference.preference import NotificationPreference, preferences_for
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle


@notifications.command(part_of="NotificationPreference")
class UpdateNotificationPreferences:
    """Switch channels or topics on or off. Omitted fields are left as they are."""

    customer_id: Identifier(required=True)
    email_enabled: Boolean()
    push_enabled: Boolean()
    order_updates: Boolean()
    promotions: Boolean()
    new_products: Boolean()
    restock_alerts: Boolean()
    abandoned_cart: Boolean()


@notifications.command_handler(part_of=NotificationPreference)
class ManagePreferencesHandler:
    @handle(UpdateNotificationPreferences)
    def update_preferences(self, command: UpdateNotificationPreferences):
        # Customers who registered before preferences existed have no record yet
        preference = preferences_for(command.customer_id) or NotificationPreference.create_default(
            command.customer_id
        )
        preference.update(
            email_enabled=command.email_enabled,
            push_enabled=command.push_enabled,
            order_updates=command.order_updates,
            promotions=command.promotions,
            new_products=command.new_products,
            restock_alerts=command.restock_alerts,
            abandoned_cart=command.abandoned_cart,
        )
        current_domain.repository_for(NotificationPreference).add(preference)
        return str(preference.id)
