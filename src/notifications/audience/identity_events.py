"""Inbound cross-domain event handler — Notifications reacts to Identity events.

Keeps the customer profile and address read models current and fires the
welcome trigger when a customer registers.
"""

import structlog
from notifications.domain import notifications
from notifications.notification.notification import Notification
from notifications.projections.audience import CustomerAddress, CustomerProfile
from notifications.trigger.lifecycle import fire_personal_trigger
from notifications.trigger.trigger import TriggerType
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.identity import (
    AddressAdded,
    AddressRemoved,
    CustomerRegistered,
    ProfileUpdated,
)

logger = structlog.get_logger(__name__)

notifications.register_external_event(CustomerRegistered, "Identity.CustomerRegistered.v1")
notifications.register_external_event(ProfileUpdated, "Identity.ProfileUpdated.v1")
notifications.register_external_event(AddressAdded, "Identity.AddressAdded.v1")
notifications.register_external_event(AddressRemoved, "Identity.AddressRemoved.v1")


def full_name(first_name, last_name) -> str | None:
    return " ".join(part for part in (first_name, last_name) if part) or None


@notifications.event_handler(part_of=Notification, stream_category="identity::customer")
class IdentityEventsHandler:
    """Maintains customer read models from Identity events."""

    @handle(CustomerRegistered)
    def on_customer_registered(self, event: CustomerRegistered) -> None:
        repo = current_domain.repository_for(CustomerProfile)
        name = full_name(event.first_name, event.last_name)

        try:
            profile = repo.get(str(event.customer_id))
        except ObjectNotFoundError:
            profile = None

        if profile is not None and profile.created_at is not None:
            logger.info("Profile already exists for customer", customer_id=str(event.customer_id))
            return

        if profile is None:
            profile = CustomerProfile(customer_id=str(event.customer_id), updated_at=event.registered_at)
        # A ProfileUpdated that arrived first keeps its newer email and name
        profile.email = profile.email or event.email
        profile.full_name = profile.full_name or name
        profile.created_at = event.registered_at
        repo.add(profile)

        fire_personal_trigger(
            TriggerType.WELCOME.value,
            user_id=str(event.customer_id),
            context={"customer_name": profile.full_name or "there"},
        )

    @handle(ProfileUpdated)
    def on_profile_updated(self, event: ProfileUpdated) -> None:
        repo = current_domain.repository_for(CustomerProfile)
        try:
            profile = repo.get(str(event.customer_id))
        except ObjectNotFoundError:
            profile = CustomerProfile(customer_id=str(event.customer_id))

        if event.email:
            profile.email = event.email
        name = full_name(event.first_name, event.last_name)
        if name:
            profile.full_name = name
        profile.updated_at = event.updated_at
        repo.add(profile)

    @handle(AddressAdded)
    def on_address_added(self, event: AddressAdded) -> None:
        current_domain.repository_for(CustomerAddress).add(
            CustomerAddress(
                address_id=str(event.address_id),
                customer_id=str(event.customer_id),
                city=event.city,
                country=event.country,
            )
        )

    @handle(AddressRemoved)
    def on_address_removed(self, event: AddressRemoved) -> None:
        repo = current_domain.repository_for(CustomerAddress)
        try:
            address = repo.get(str(event.address_id))
        except ObjectNotFoundError:
            return
        repo._dao.delete(address)

