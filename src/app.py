"""Storefront Notifications FastAPI application.

Serves the admin composer, the notification center feed and the
maintenance endpoints that an external cron calls.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000
"""

# PROTEAN_ENV picks the domain.toml overlay. Under "production" handlers run
# in the engine process (server.py); everywhere else they run inline.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from notifications.config import get_settings
from notifications.domain import notifications
from notifications.utils.logging import bind_request, clear_request, configure_logging
from protean.integrations.fastapi import register_exception_handlers

configure_logging(log_file_prefix="notifications-api")
notifications.init()

# Routes import domain elements; load them once the domain is initialized
from notifications.api.routes import router as notifications_router  # noqa: E402

app = FastAPI(
    title="Storefront Notifications API",
    description="Targeting, scheduling, delivery and A/B testing of storefront notifications",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def notifications_context(request: Request, call_next):
    """Bind log context for every request; push the domain for notification routes."""
    bind_request(method=request.method, path=request.url.path, user_id=request.query_params.get("user_id"))
    try:
        if not request.url.path.startswith(notifications_router.prefix):
            return await call_next(request)
        with notifications.domain_context():
            return await call_next(request)
    finally:
        clear_request()


app.include_router(notifications_router)
register_exception_handlers(app)


@app.get("/health")
async def health():
    settings = get_settings()
    return {
        "status": "ok",
        "domain": notifications.name,
        "storefront": settings.storefront_name,
        "email": settings.email_provider if settings.email_configured else None,
    }
