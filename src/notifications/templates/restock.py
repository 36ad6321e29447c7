"""Restock template: the product a customer asked about is available again."""

from notifications.templates.layout import absolute_url, html_page, signature


class RestockTemplate:
    notification_type = "restock"

    @staticmethod
    def render(context: dict) -> dict:
        product_name = context.get("product_name") or "An item you wanted"
        slug = context.get("product_slug")
        product_url = absolute_url(f"/product/{slug}" if slug else "/")
        message = context.get("message") or f"{product_name} is back in stock. Grab it before it's gone!"

        return {
            "subject": context.get("title") or f"{product_name} is back in stock!",
            "body": f"Good news!\n\n{message}\n\nShop now: {product_url}" + signature(),
            "html_body": html_page(f"{product_name} is back!", [message], "Shop Now", product_url),
        }
