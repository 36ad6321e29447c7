"""Notifications bounded context — storefront notification pipeline.

Decides who receives a storefront message, when, and through which channel.
Resolves broadcast audiences from customer data owned by other domains
(Identity, Ordering, Marketing, Catalogue, Inventory), runs automated
triggers (abandoned carts, restocks, order status, welcome), dispatches
scheduled notifications, fans out email per recipient, and runs A/B
experiments on notification content.
"""

import structlog
from protean.domain import Domain

notifications = Domain(name="notifications")

logger = structlog.get_logger(__name__)
