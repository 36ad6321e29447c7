"""Pydantic request/response models for the Notifications API.

API schemas are separate from Protean commands (anti-corruption pattern).
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class SendNotificationRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    notification_type: str = Field("info", examples=["info", "product", "order", "promo"])
    link: str | None = Field(None, max_length=500)
    image_url: str | None = Field(None, max_length=1000)
    is_global: bool = True
    user_id: str | None = None
    target_segment: str = Field("all", examples=["all", "high_value", "by_location"])
    target_criteria: dict = Field(default_factory=dict, examples=[{"min_order_value": 5000}, {"city": "Dhaka"}])
    scheduled_at: datetime | None = None
    send_email: bool = False


class MarkReadRequest(BaseModel):
    user_id: str


class MarkAllReadRequest(BaseModel):
    user_id: str
    notification_ids: list[str] = Field(default_factory=list)


class TriggerRequest(BaseModel):
    trigger_type: str = Field(..., examples=["abandoned_cart", "order_status", "restock", "welcome"])
    title_template: str = Field(..., min_length=1, max_length=255)
    message_template: str = Field(..., min_length=1)
    delay_minutes: int = Field(0, ge=0)
    send_email: bool = False
    send_push: bool = False
    is_active: bool = True


class UpdateTriggerRequest(BaseModel):
    title_template: str | None = Field(None, min_length=1, max_length=255)
    message_template: str | None = Field(None, min_length=1)
    delay_minutes: int | None = Field(None, ge=0)
    send_email: bool | None = None
    send_push: bool | None = None
    is_active: bool | None = None


class VariantContent(BaseModel):
    title: str = ""
    message: str = ""


class CreateABTestRequest(BaseModel):
    test_name: str = ""
    variant_a: VariantContent
    variant_b: VariantContent
    notification_type: str = "promo"
    link: str | None = None
    image_url: str | None = None


class RestockAlertRequest(BaseModel):
    product_id: str
    user_id: str | None = None
    email: str | None = Field(None, max_length=254)


class SegmentPreviewRequest(BaseModel):
    target_segment: str
    target_criteria: dict = Field(default_factory=dict)
    sample_size: int = Field(5, ge=0, le=50)


class ProcessRequest(BaseModel):
    as_of: datetime | None = None


class UpdatePreferencesRequest(BaseModel):
    email_enabled: bool | None = None
    push_enabled: bool | None = None
    order_updates: bool | None = None
    promotions: bool | None = None
    new_products: bool | None = None
    restock_alerts: bool | None = None
    abandoned_cart: bool | None = None


class SaleCampaignRequest(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=255)
    original_price: float = Field(..., gt=0)
    sale_price: float = Field(..., ge=0)
    product_slug: str = Field(..., min_length=1, max_length=255)
    product_image: str | None = Field(None, max_length=1000)


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class CreatedResponse(BaseModel):
    id: str
    status: str = "ok"


class CountResponse(BaseModel):
    count: int
    status: str = "ok"


class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str
    notification_type: str
    link: str | None = None
    image_url: str | None = None
    is_global: bool
    user_id: str | None = None
    target_segment: str | None = None
    scheduled_at: datetime | None = None
    send_email: bool = False
    is_sent: bool
    is_read: bool = False
    delivered_count: int = 0
    opened_count: int = 0
    clicked_count: int = 0
    is_ab_test: bool = False
    variant_id: str | None = None
    parent_id: str | None = None
    created_at: datetime | None = None


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]


class TriggerResponse(BaseModel):
    id: str
    trigger_type: str
    is_active: bool
    delay_minutes: int
    title_template: str
    message_template: str
    send_email: bool
    send_push: bool


class TriggerListResponse(BaseModel):
    triggers: list[TriggerResponse]


class VariantResponse(BaseModel):
    notification_id: str
    variant_id: str
    title: str
    message: str
    opened_count: int
    clicked_count: int
    ctr: float


class ABTestResponse(BaseModel):
    test_id: str
    test_name: str
    created_at: datetime | None = None
    variants: list[VariantResponse]
    total_opens: int
    winner: str | None = None
    confident: bool
    recommendation: str | None = None


class ABTestListResponse(BaseModel):
    tests: list[ABTestResponse]


class ContactResponse(BaseModel):
    email: str
    display_name: str | None = None
    user_id: str | None = None


class SegmentPreviewResponse(BaseModel):
    count: int
    sample: list[ContactResponse]


class ProcessScheduledResponse(BaseModel):
    count: int
    emailsSent: int  # noqa: N815
    ids: list[str]


class ProcessTriggersResponse(BaseModel):
    abandoned_carts: int
    restock_alerts: int
    emails_sent: int


class PreferencesResponse(BaseModel):
    customer_id: str
    email_enabled: bool = True
    push_enabled: bool = True
    order_updates: bool = True
    promotions: bool = True
    new_products: bool = True
    restock_alerts: bool = True
    abandoned_cart: bool = True


class SaleCampaignResponse(BaseModel):
    notification_id: str
    total: int
    sent: int
    failed: int
    skipped: int
