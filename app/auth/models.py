# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for the merchant behind a request.
# =============================================================================

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from core.models.media import Tier


class ShopUser(BaseModel):
    """
    Trayve user linked to the requesting Shopify shop.

    Resolved from the `shopify_users` table; this is what route handlers
    receive as the current user.
    """
    id: UUID = Field(..., description="Trayve user ID (owner of projects and credits)")
    shop_domain: str
    email: str | None = None

    model_config = ConfigDict(frozen=True)


class ShopUserResponse(BaseModel):
    """
    Response for GET /auth/me.

    Includes the viewer tier so clients can render tier-dependent UI
    without a second request.
    """
    id: UUID
    shop_domain: str
    email: str | None = None
    tier: Tier
    plan_name: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
