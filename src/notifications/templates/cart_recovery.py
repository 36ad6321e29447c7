"""Cart recovery template: escalates across the three allowed reminders."""

from html import escape

from notifications.templates.layout import absolute_url, html_page, money, signature

SUBJECTS = [
    "You left something behind!",
    "Your cart misses you! Complete your order",
    "Last chance! Your cart is waiting",
]
MAX_LISTED_ITEMS = 3


class CartRecoveryTemplate:
    notification_type = "abandoned_cart"

    @staticmethod
    def render(context: dict) -> dict:
        reminder_number = max(1, min(int(context.get("reminder_number") or 1), len(SUBJECTS)))
        items = context.get("items") or []
        listed = items[:MAX_LISTED_ITEMS]
        checkout_url = absolute_url("/checkout")
        name = context.get("customer_name")

        lines = [f"- {item.get('name')} x{item.get('quantity', 1)}" for item in listed]
        if len(items) > len(listed):
            lines.append(f"...and {len(items) - len(listed)} more")

        urgency = "Items in your cart may sell out soon. Don't miss out!" if reminder_number >= 2 else None

        body = f"Hi {name},\n\n" if name else "Hi,\n\n"
        body += "You left these items in your cart:\n" + "\n".join(lines)
        body += f"\n\nTotal: {money(context.get('cart_total'))}"
        if urgency:
            body += f"\n\n{urgency}"
        body += f"\n\nComplete your purchase: {checkout_url}" + signature()

        rows = "".join(
            f"<tr><td>{escape(str(item.get('name')))}</td><td>Qty: {escape(str(item.get('quantity', 1)))}</td>"
            f"<td style=\"text-align:right;\">{money(float(item.get('price') or 0) * int(item.get('quantity') or 1))}</td></tr>"
            for item in listed
        )
        table = f'<table style="width:100%;">{rows}<tr><td colspan="2"><b>Total</b></td>' \
                f'<td style="text-align:right;"><b>{money(context.get("cart_total"))}</b></td></tr></table>'
        paragraphs = ["Don't let these items slip away."]
        if urgency:
            paragraphs.append(urgency)

        return {
            "subject": SUBJECTS[reminder_number - 1],
            "body": body,
            "html_body": html_page(
                "You left something in your cart!",
                paragraphs,
                "Complete Your Purchase",
                checkout_url,
                extra_html=table,
            ),
        }
