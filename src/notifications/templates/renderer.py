"""Placeholder renderer for trigger title/message templates.

Templates use ``{{name}}`` placeholders. Each trigger type declares the
variables it can supply; a template that names anything else is rejected
when the trigger is configured, never silently rendered.
"""

import re

from protean.exceptions import ValidationError

PLACEHOLDER = re.compile(r"\{\{\s*([a-zA-Z_][a-zA-Z0-9_]*)\s*\}\}")

ALLOWED_PLACEHOLDERS: dict[str, frozenset[str]] = {
    "abandoned_cart": frozenset({"customer_name", "item_count", "cart_total"}),
    "restock": frozenset({"product_name"}),
    "order_status": frozenset({"order_number", "status", "customer_name"}),
    "welcome": frozenset({"customer_name"}),
}


def placeholders(template: str) -> set[str]:
    return set(PLACEHOLDER.findall(template or ""))


class TemplateRenderer:
    """Renders templates for one trigger type."""

    def __init__(self, trigger_type: str):
        if trigger_type not in ALLOWED_PLACEHOLDERS:
            raise ValidationError({"trigger_type": [f"Unknown trigger type: {trigger_type}"]})
        self.trigger_type = trigger_type
        self.allowed = ALLOWED_PLACEHOLDERS[trigger_type]

    def validate(self, template: str, field: str = "template") -> None:
        unknown = sorted(placeholders(template) - self.allowed)
        if unknown:
            raise ValidationError(
                {
                    field: [
                        f"Unknown placeholder(s) {', '.join(unknown)} for {self.trigger_type}; "
                        f"allowed: {', '.join(sorted(self.allowed))}"
                    ]
                }
            )

    def render(self, template: str, context: dict) -> str:
        """Substitute placeholders literally. Missing values render as ''."""
        self.validate(template)

        def substitute(match):
            value = context.get(match.group(1))
            return "" if value is None else str(value)

        return PLACEHOLDER.sub(substitute, template)
