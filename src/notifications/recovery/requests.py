"""RequestRestockAlert command + handler — the storefront "notify me" button."""

import structlog
from notifications.domain import notifications
from notifications.recovery.restock_alert import RestockAlert
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifications.command(part_of="RestockAlert")
class RequestRestockAlert:
    product_id: Identifier(required=True)
    user_id: Identifier()
    email: String(max_length=254)


@notifications.command_handler(part_of=RestockAlert)
class RestockAlertHandler:
    @handle(RequestRestockAlert)
    def request_restock_alert(self, command: RequestRestockAlert):
        """Create the alert unless an un-notified one already exists for this contact."""
        repo = current_domain.repository_for(RestockAlert)

        criteria = {"product_id": str(command.product_id), "notified": False}
        if command.user_id:
            criteria["user_id"] = str(command.user_id)
        elif command.email:
            criteria["email"] = command.email.strip().lower()

        existing = repo._dao.query.filter(**criteria).limit(1).all().items
        if existing and (command.user_id or command.email):
            logger.info(
                "Restock alert already pending",
                product_id=str(command.product_id),
                alert_id=str(existing[0].id),
            )
            return str(existing[0].id)

        alert = RestockAlert.request(product_id=command.product_id, user_id=command.user_id, email=command.email)
        repo.add(alert)
        return str(alert.id)
