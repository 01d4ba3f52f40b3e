# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for the current merchant.
#
# Note: Shopify OAuth and app installation are handled by the embedding app.
# These routes only describe the already-identified shop.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_shop_user, get_viewer_tier
from app.auth.models import ShopUser, ShopUserResponse
from core.display.tiers import plan_name
from core.models.media import Tier
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=ShopUserResponse)
async def get_current_user_info(
    user: ShopUser = Depends(get_current_shop_user),
    tier: Tier = Depends(get_viewer_tier),
) -> ShopUserResponse:
    """
    Get the current merchant with their subscription tier.

    Returns:
        ShopUserResponse: Shop, Trayve user ID, tier and plan name

    Raises:
        401: If the shop header is missing
        404: If the shop has no linked Trayve user
    """
    row = SupabaseClient.fetch_shop_user(user.shop_domain) or {}

    return ShopUserResponse(
        id=user.id,
        shop_domain=user.shop_domain,
        email=user.email,
        tier=tier,
        plan_name=plan_name(tier),
        metadata=row.get("metadata") or {},
        created_at=row.get("created_at"),
    )
