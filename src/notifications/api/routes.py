"""FastAPI routes for the Notifications domain.

Thin adapters that translate HTTP requests into domain commands and
read-side queries. No business logic: schema→command→response.

Fixed paths (``/admin``, ``/feed``, ``/triggers`` ...) are registered
before the ``/{notification_id}`` routes so they are never captured by them.
"""

from urllib.parse import urlencode

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse
from notifications.api.schemas import (
    ABTestListResponse,
    ABTestResponse,
    ContactResponse,
    CountResponse,
    CreateABTestRequest,
    CreatedResponse,
    MarkAllReadRequest,
    MarkReadRequest,
    NotificationListResponse,
    NotificationResponse,
    PreferencesResponse,
    ProcessRequest,
    ProcessScheduledResponse,
    ProcessTriggersResponse,
    RestockAlertRequest,
    SaleCampaignRequest,
    SaleCampaignResponse,
    SegmentPreviewRequest,
    SegmentPreviewResponse,
    SendNotificationRequest,
    StatusResponse,
    TriggerListResponse,
    TriggerRequest,
    TriggerResponse,
    UpdatePreferencesRequest,
    UpdateTriggerRequest,
    VariantResponse,
)
from notifications.audience.segments import SegmentResolutionError, SegmentResolver
from notifications.campaign.newsletter import ResubscribeNewsletter, UnsubscribeNewsletter
from notifications.campaign.sale import SendSaleCampaign
from notifications.experiment.ab_test import ABTestSummary, CreateABTest, DeleteABTest, get_ab_test, list_ab_tests
from notifications.notification.engagement import (
    ClearGlobalNotifications,
    MarkAllNotificationsRead,
    MarkNotificationRead,
    RecordNotificationClicked,
    RecordNotificationOpened,
)
from notifications.notification.feed import recent_feed, recent_for_admin
from notifications.notification.notification import Notification
from notifications.notification.purge import PurgeNotification
from notifications.notification.scheduler import ProcessScheduledNotifications
from notifications.notification.sending import SendNotification
from notifications.preference.management import UpdateNotificationPreferences
from notifications.preference.preference import PREFERENCE_FIELDS, preferences_for
from notifications.recovery.requests import RequestRestockAlert
from notifications.templates.layout import html_page
from notifications.trigger.engine import ProcessNotificationTriggers
from notifications.trigger.management import ConfigureTrigger, UpdateTrigger
from notifications.trigger.trigger import TriggerConfig
from notifications.utils.query import iterate_all
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=str(n.id),
        title=n.title,
        message=n.message or "",
        notification_type=n.notification_type,
        link=n.link,
        image_url=n.image_url,
        is_global=bool(n.is_global),
        user_id=str(n.user_id) if n.user_id else None,
        target_segment=n.target_segment,
        scheduled_at=n.scheduled_at,
        send_email=bool(n.send_email),
        is_sent=bool(n.is_sent),
        is_read=bool(n.is_read),
        delivered_count=n.delivered_count or 0,
        opened_count=n.opened_count or 0,
        clicked_count=n.clicked_count or 0,
        is_ab_test=bool(n.is_ab_test),
        variant_id=n.variant_id,
        parent_id=str(n.parent_id) if n.parent_id else None,
        created_at=n.created_at,
    )


def _trigger_response(t: TriggerConfig) -> TriggerResponse:
    return TriggerResponse(
        id=str(t.id),
        trigger_type=t.trigger_type,
        is_active=bool(t.is_active),
        delay_minutes=t.delay_minutes or 0,
        title_template=t.title_template,
        message_template=t.message_template,
        send_email=bool(t.send_email),
        send_push=bool(t.send_push),
    )


def _ab_test_response(summary: ABTestSummary) -> ABTestResponse:
    return ABTestResponse(
        test_id=summary.test_id,
        test_name=summary.test_name,
        created_at=summary.created_at,
        variants=[
            VariantResponse(
                notification_id=v.notification_id,
                variant_id=v.variant_id,
                title=v.title,
                message=v.message,
                opened_count=v.opened_count,
                clicked_count=v.clicked_count,
                ctr=v.ctr,
            )
            for v in summary.variants
        ],
        total_opens=summary.total_opens,
        winner=summary.winner,
        confident=summary.confident,
        recommendation=summary.recommendation,
    )


# ---------------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------------
@router.post("", status_code=201, response_model=CreatedResponse)
async def send_notification(body: SendNotificationRequest) -> CreatedResponse:
    """Send a notification now, or schedule it when ``scheduled_at`` is given."""
    command = SendNotification(
        title=body.title,
        message=body.message,
        notification_type=body.notification_type,
        link=body.link,
        image_url=body.image_url,
        is_global=body.is_global,
        user_id=body.user_id,
        target_segment=body.target_segment,
        target_criteria=body.target_criteria,
        scheduled_at=body.scheduled_at,
        send_email=body.send_email,
    )
    notification_id = current_domain.process(command, asynchronous=False)
    return CreatedResponse(id=str(notification_id))


@router.get("/admin", response_model=NotificationListResponse)
async def admin_notifications(limit: int = Query(50, ge=1, le=200)) -> NotificationListResponse:
    """Newest global notifications, sent and scheduled."""
    return NotificationListResponse(notifications=[_notification_response(n) for n in recent_for_admin(limit)])


# ---------------------------------------------------------------------------
# Notification center
# ---------------------------------------------------------------------------
@router.get("/feed", response_model=NotificationListResponse)
async def notification_feed(
    user_id: str | None = None,
    device_id: str | None = None,
    limit: int = Query(20, ge=1, le=100),
) -> NotificationListResponse:
    """Released notifications visible to the caller, newest first."""
    records = recent_feed(user_id=user_id, limit=limit, audience_key=user_id or device_id)
    return NotificationListResponse(notifications=[_notification_response(n) for n in records])


@router.post("/read-all", response_model=CountResponse)
async def mark_all_read(body: MarkAllReadRequest) -> CountResponse:
    command = MarkAllNotificationsRead(user_id=body.user_id, notification_ids=body.notification_ids)
    marked = current_domain.process(command, asynchronous=False)
    return CountResponse(count=marked or 0)


@router.delete("/global", response_model=CountResponse)
async def clear_global_notifications(user_id: str = Query(..., min_length=1)) -> CountResponse:
    """Delete every global notification (an authenticated clear-all)."""
    command = ClearGlobalNotifications(user_id=user_id)
    deleted = current_domain.process(command, asynchronous=False)
    return CountResponse(count=deleted or 0)


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------
@router.get("/triggers", response_model=TriggerListResponse)
async def list_triggers() -> TriggerListResponse:
    triggers = iterate_all(current_domain.repository_for(TriggerConfig)._dao.query)
    return TriggerListResponse(triggers=[_trigger_response(t) for t in triggers])


@router.post("/triggers", status_code=201, response_model=CreatedResponse)
async def configure_trigger(body: TriggerRequest) -> CreatedResponse:
    command = ConfigureTrigger(
        trigger_type=body.trigger_type,
        title_template=body.title_template,
        message_template=body.message_template,
        delay_minutes=body.delay_minutes,
        send_email=body.send_email,
        send_push=body.send_push,
        is_active=body.is_active,
    )
    trigger_id = current_domain.process(command, asynchronous=False)
    return CreatedResponse(id=str(trigger_id))


@router.put("/triggers/{trigger_id}", response_model=StatusResponse)
async def update_trigger(trigger_id: str, body: UpdateTriggerRequest) -> StatusResponse:
    command = UpdateTrigger(trigger_id=trigger_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# A/B tests
# ---------------------------------------------------------------------------
@router.get("/ab-tests", response_model=ABTestListResponse)
async def ab_tests(limit: int = Query(20, ge=1, le=100)) -> ABTestListResponse:
    return ABTestListResponse(tests=[_ab_test_response(s) for s in list_ab_tests(limit)])


@router.post("/ab-tests", status_code=201, response_model=CreatedResponse)
async def create_ab_test(body: CreateABTestRequest) -> CreatedResponse:
    command = CreateABTest(
        test_name=body.test_name,
        variant_a_title=body.variant_a.title,
        variant_a_message=body.variant_a.message,
        variant_b_title=body.variant_b.title,
        variant_b_message=body.variant_b.message,
        notification_type=body.notification_type,
        link=body.link,
        image_url=body.image_url,
    )
    test_id = current_domain.process(command, asynchronous=False)
    return CreatedResponse(id=str(test_id))


@router.get("/ab-tests/{test_id}", response_model=ABTestResponse)
async def ab_test_results(test_id: str) -> ABTestResponse:
    return _ab_test_response(get_ab_test(test_id))


@router.delete("/ab-tests/{test_id}", response_model=CountResponse)
async def delete_ab_test(test_id: str) -> CountResponse:
    deleted = current_domain.process(DeleteABTest(test_id=test_id), asynchronous=False)
    return CountResponse(count=deleted or 0)


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------
@router.get("/preferences/{customer_id}", response_model=PreferencesResponse)
async def get_preferences(customer_id: str) -> PreferencesResponse:
    """A customer without saved preferences gets the defaults: everything on."""
    preference = preferences_for(customer_id)
    if preference is None:
        return PreferencesResponse(customer_id=customer_id)
    return PreferencesResponse(
        customer_id=customer_id,
        **{field: bool(getattr(preference, field)) for field in PREFERENCE_FIELDS},
    )


@router.put("/preferences/{customer_id}", response_model=PreferencesResponse)
async def update_preferences(customer_id: str, body: UpdatePreferencesRequest) -> PreferencesResponse:
    command = UpdateNotificationPreferences(customer_id=customer_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return await get_preferences(customer_id)


# ---------------------------------------------------------------------------
# Campaigns & newsletter
# ---------------------------------------------------------------------------
@router.post("/campaigns/sale", response_model=SaleCampaignResponse)
async def send_sale_campaign(body: SaleCampaignRequest) -> SaleCampaignResponse:
    result = current_domain.process(SendSaleCampaign(**body.model_dump(exclude_none=True)), asynchronous=False)
    return SaleCampaignResponse(**result)


@router.get("/newsletter/unsubscribe", response_class=HTMLResponse)
async def newsletter_unsubscribe(email: str, token: str, action: str = "unsubscribe") -> HTMLResponse:
    """Target of the link in every campaign email; ``action=resubscribe`` undoes it."""
    if action == "resubscribe":
        current_domain.process(ResubscribeNewsletter(email=email, token=token), asynchronous=False)
        return HTMLResponse(html_page("Welcome back!", ["You have been re-subscribed to our newsletter."]))

    current_domain.process(UnsubscribeNewsletter(email=email, token=token), asynchronous=False)
    return HTMLResponse(
        html_page(
            "Unsubscribed successfully",
            ["You will no longer receive promotional emails from us.", "Changed your mind?"],
            "Re-subscribe",
            f"{router.prefix}/newsletter/unsubscribe?{urlencode({'email': email, 'token': token, 'action': 'resubscribe'})}",
        )
    )


# ---------------------------------------------------------------------------
# Restock alerts & audience
# ---------------------------------------------------------------------------
@router.post("/restock-alerts", status_code=201, response_model=CreatedResponse)
async def request_restock_alert(body: RestockAlertRequest) -> CreatedResponse:
    command = RequestRestockAlert(product_id=body.product_id, user_id=body.user_id, email=body.email)
    alert_id = current_domain.process(command, asynchronous=False)
    return CreatedResponse(id=str(alert_id))


@router.post("/segments/preview", response_model=SegmentPreviewResponse)
async def preview_segment(body: SegmentPreviewRequest) -> SegmentPreviewResponse:
    """Count the recipients a segment would reach, with a small sample."""
    try:
        preview = SegmentResolver().preview(body.target_segment, body.target_criteria, sample_size=body.sample_size)
    except SegmentResolutionError as exc:
        raise ValidationError({"target_segment": [str(exc)]}) from exc

    return SegmentPreviewResponse(
        count=preview["count"],
        sample=[ContactResponse(email=c.email, display_name=c.display_name, user_id=c.user_id) for c in preview["sample"]],
    )


# ---------------------------------------------------------------------------
# Maintenance (called by an external scheduler)
# ---------------------------------------------------------------------------
@router.post("/maintenance/process-scheduled", response_model=ProcessScheduledResponse)
async def process_scheduled_notifications(body: ProcessRequest | None = None) -> ProcessScheduledResponse:
    """Release due scheduled notifications.

    Designed to be called periodically by an external scheduler (e.g., every minute).
    Already-sent notifications are never picked up again.
    """
    command = ProcessScheduledNotifications(as_of=body.as_of if body else None)
    result = current_domain.process(command, asynchronous=False)
    return ProcessScheduledResponse(**result)


@router.post("/maintenance/process-triggers", response_model=ProcessTriggersResponse)
async def process_notification_triggers(body: ProcessRequest | None = None) -> ProcessTriggersResponse:
    """Send abandoned-cart reminders and back-in-stock alerts that are due."""
    command = ProcessNotificationTriggers(as_of=body.as_of if body else None)
    result = current_domain.process(command, asynchronous=False)
    return ProcessTriggersResponse(**result)


# ---------------------------------------------------------------------------
# Single notification
# ---------------------------------------------------------------------------
@router.delete("/{notification_id}", response_model=CountResponse)
async def delete_notification(notification_id: str) -> CountResponse:
    """Hard-delete a notification; deleting variant A removes its variant B too."""
    deleted = current_domain.process(PurgeNotification(notification_id=notification_id), asynchronous=False)
    return CountResponse(count=deleted or 0)


@router.post("/{notification_id}/read", response_model=StatusResponse)
async def mark_read(notification_id: str, body: MarkReadRequest) -> StatusResponse:
    command = MarkNotificationRead(notification_id=notification_id, user_id=body.user_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.post("/{notification_id}/open", response_model=StatusResponse)
async def record_open(notification_id: str) -> StatusResponse:
    current_domain.process(RecordNotificationOpened(notification_id=notification_id), asynchronous=False)
    return StatusResponse()


@router.post("/{notification_id}/click", response_model=StatusResponse)
async def record_click(notification_id: str) -> StatusResponse:
    current_domain.process(RecordNotificationClicked(notification_id=notification_id), asynchronous=False)
    return StatusResponse()
