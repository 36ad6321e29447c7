"""Flash sale campaign emails: the subscriber offer and the admin summary."""

from html import escape

from notifications.templates.layout import absolute_url, html_page, money, signature


def discount_percent(original_price, sale_price) -> int:
    return round((float(original_price) - float(sale_price)) / float(original_price) * 100)


class SaleTemplate:
    notification_type = "sale"

    @staticmethod
    def render(context: dict) -> dict:
        product_name = context.get("product_name") or "A favourite"
        original, sale = context.get("original_price"), context.get("sale_price")
        discount = discount_percent(original, sale)
        slug = context.get("product_slug")
        product_url = absolute_url(f"/product/{slug}" if slug else "/")
        unsubscribe_url = context.get("unsubscribe_url")

        price_line = f"Was {money(original)}, now {money(sale)}."
        body = f"{discount}% OFF {product_name}!\n\n{price_line}\n\nShop now: {product_url}"
        footer = "You're receiving this because you subscribed to our newsletter."
        extra_html = ""
        if unsubscribe_url:
            body += f"\n\n{footer}\nUnsubscribe: {unsubscribe_url}"
            extra_html = (
                f'<p style="color:#999;font-size:11px;text-align:center;">{escape(footer)} '
                f'<a href="{escape(unsubscribe_url, quote=True)}" style="color:#999;">Unsubscribe</a></p>'
            )

        return {
            "subject": f"Flash Sale: {discount}% OFF {product_name}!",
            "body": body + signature(),
            "html_body": html_page(
                f"{discount}% OFF {product_name}",
                ["Don't miss this amazing deal!", price_line],
                "Shop Now",
                product_url,
                extra_html=extra_html,
            ),
        }


class SaleSummaryTemplate:
    """Sent to the store admin once a campaign has gone out."""

    notification_type = "sale_summary"

    @staticmethod
    def render(context: dict) -> dict:
        product_name = context.get("product_name") or "Unnamed product"
        original, sale = context.get("original_price"), context.get("sale_price")
        lines = [
            f"Product: {product_name}",
            f"Discount: {discount_percent(original, sale)}% OFF",
            f"Original price: {money(original)}",
            f"Sale price: {money(sale)}",
            f"Subscribers notified: {context.get('sent', 0)} of {context.get('total', 0)}",
        ]
        return {
            "subject": f"Sale campaign sent: {product_name}",
            "body": "\n".join(lines) + signature(),
            "html_body": html_page("Sale notification campaign sent", lines),
        }
