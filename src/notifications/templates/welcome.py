"""Welcome template: sent after a customer signs up."""

from notifications.templates.layout import absolute_url, html_page, signature, storefront


class WelcomeTemplate:
    notification_type = "welcome"

    @staticmethod
    def render(context: dict) -> dict:
        store_name = storefront()["store_name"]
        name = context.get("customer_name") or "there"
        message = context.get("message") or "Thank you for joining us. Start exploring our latest collection."

        return {
            "subject": context.get("title") or f"Welcome to {store_name}, {name}!",
            "body": f"Hi {name},\n\n{message}" + signature(),
            "html_body": html_page(f"Welcome, {name}!", [message], "Start Shopping", absolute_url("/")),
        }
