# =============================================================================
# core/models/subscription.py - Subscription Schemas
# =============================================================================
# A merchant's subscription as stored in `shopify_user_subscriptions`.
# Billing itself (Shopify charges) happens elsewhere; these models only
# describe the stored result so the viewer tier can be resolved.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .media import Tier


class SubscriptionStatus(str, Enum):
    """
    Lifecycle of a subscription row.

    Flow: pending -> active -> (cancelled | expired)
    """
    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class UserSubscription(BaseModel):
    """One subscription row."""
    id: str
    trayve_user_id: str
    shop: str | None = None
    plan_tier: Tier = Tier.FREE
    status: SubscriptionStatus = SubscriptionStatus.PENDING
    images_allocated: int = 0
    credits_allocated: int | None = None
    billing_period_start: datetime | None = None
    billing_period_end: datetime | None = None
    subscribed_at: datetime | None = None
    cancelled_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("plan_tier", mode="before")
    @classmethod
    def _parse_plan_tier(cls, value: Any) -> Tier:
        return Tier.parse(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_metadata_is_empty(cls, value: Any) -> Any:
        return value or {}


class CurrentSubscriptionResponse(BaseModel):
    """Response for GET /subscription/current."""
    subscription: UserSubscription | None = None
    plan_tier: Tier = Tier.FREE
    plan_name: str = "Free Plan"
