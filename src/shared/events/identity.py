"""Cross-domain event contracts for Identity domain events.

The Notifications domain consumes these to keep its customer read models
(profiles and addresses) current for audience resolution, and to fire the
welcome trigger. They are registered as external events via
domain.register_external_event() with matching __type__ strings so Protean's
stream deserialization works correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String


class CustomerRegistered(BaseEvent):
    """A new customer account was created on the platform."""

    __version__ = 1

    customer_id = Identifier(required=True)
    external_id = String()
    email = String()
    first_name = String()
    last_name = String()
    registered_at = DateTime(required=True)


class ProfileUpdated(BaseEvent):
    """A customer changed their profile details."""

    __version__ = 1

    customer_id = Identifier(required=True)
    email = String()
    first_name = String()
    last_name = String()
    updated_at = DateTime(required=True)


class AddressAdded(BaseEvent):
    """A customer saved a new address."""

    __version__ = 1

    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    street = String()
    city = String(required=True)
    postal_code = String()
    country = String()
    added_at = DateTime(required=True)


class AddressRemoved(BaseEvent):
    """A customer deleted a saved address."""

    __version__ = 1

    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    removed_at = DateTime(required=True)
