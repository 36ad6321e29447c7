"""Order status template: sent when an order moves to a new status."""

from notifications.templates.layout import absolute_url, html_page, signature


class OrderStatusTemplate:
    notification_type = "order_status"

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number") or ""
        status = context.get("status") or "updated"
        name = context.get("customer_name")
        message = context.get("message") or f"Your order {order_number} is now {status}."
        orders_url = absolute_url("/account/orders")
        greeting = f"Hi {name}," if name else "Hi,"

        return {
            "subject": context.get("title") or f"Order {order_number}: {status}",
            "body": f"{greeting}\n\n{message}\n\nTrack your order: {orders_url}" + signature(),
            "html_body": html_page(f"Order {order_number}", [greeting, message], "View Order", orders_url),
        }
