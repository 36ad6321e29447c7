"""Shared email layout: plain-text signature and a minimal HTML shell."""

from datetime import UTC, datetime
from html import escape

from notifications.config import get_settings


def storefront() -> dict:
    settings = get_settings()
    return {"store_name": settings.storefront_name, "store_url": settings.storefront_url}


def absolute_url(path_or_url: str | None) -> str | None:
    if not path_or_url:
        return None
    if path_or_url.startswith(("http://", "https://")):
        return path_or_url
    return f"{get_settings().storefront_url}/{path_or_url.lstrip('/')}"


def signature() -> str:
    return f"\n\nThe {storefront()['store_name']} Team"


def html_page(heading: str, paragraphs: list[str], cta_label: str | None = None, cta_url: str | None = None,
              extra_html: str = "") -> str:
    """Wrap escaped text content in the storefront's email shell."""
    store = storefront()
    body = "".join(f'<p style="color:#444;">{escape(p)}</p>' for p in paragraphs)
    cta = ""
    if cta_label and cta_url:
        cta = (
            f'<p style="text-align:center;margin:30px 0;">'
            f'<a href="{escape(cta_url, quote=True)}" style="background:#000;color:#fff;padding:14px 28px;'
            f'text-decoration:none;border-radius:8px;font-weight:bold;">{escape(cta_label)}</a></p>'
        )
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"></head>"
        '<body style="font-family:sans-serif;max-width:600px;margin:0 auto;padding:20px;">'
        f'<h1 style="text-align:center;">{escape(store["store_name"])}</h1>'
        f"<h2>{escape(heading)}</h2>{body}{extra_html}{cta}"
        '<p style="color:#999;font-size:12px;text-align:center;border-top:1px solid #eee;padding-top:20px;">'
        f"&copy; {datetime.now(UTC).year} {escape(store['store_name'])}. All rights reserved.</p>"
        "</body></html>"
    )


def money(amount) -> str:
    return f"{get_settings().currency_symbol}{float(amount or 0):,.0f}"
