# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for identifying the merchant.
#
# The app runs embedded in Shopify admin behind a proxy that verifies the
# Shopify session token and forwards the shop domain in a header
# (settings.SHOP_DOMAIN_HEADER). The shop is mapped to its Trayve user
# through the `shopify_users` table.
#
# Usage:
#   from app.auth import get_current_shop_user, ShopUser
#
#   @router.get("/protected")
#   async def protected(user: ShopUser = Depends(get_current_shop_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging

from fastapi import Depends, Request

from app.auth.models import ShopUser
from app.config import settings
from app.exceptions import ShopNotIdentifiedError, ShopUserNotFoundError
from core.models.media import Tier
from core.services.subscription_service import SubscriptionService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


def get_shop_domain(request: Request) -> str:
    """
    Read the shop domain forwarded by the proxy.

    Raises:
        ShopNotIdentifiedError: 401 if the header is missing or blank
    """
    shop = (request.headers.get(settings.SHOP_DOMAIN_HEADER) or "").strip().lower()
    if not shop:
        raise ShopNotIdentifiedError(settings.SHOP_DOMAIN_HEADER)
    return shop


async def get_current_shop_user(
    shop: str = Depends(get_shop_domain),
) -> ShopUser:
    """
    Resolve the Trayve user for the requesting shop.

    Args:
        shop: Shop domain from the forwarded header

    Returns:
        ShopUser: The merchant's Trayve user

    Raises:
        ShopUserNotFoundError: 404 if the shop has no linked user or the
            app was uninstalled

    Usage:
        @router.get("/protected")
        async def protected_route(user: ShopUser = Depends(get_current_shop_user)):
            return {"user_id": user.id}
    """
    row = SupabaseClient.fetch_shop_user(shop)

    if not row or not row.get("trayve_user_id") or row.get("is_active") is False:
        logger.warning(f"No active Trayve user for shop {shop}")
        raise ShopUserNotFoundError(shop)

    logger.debug(f"Authenticated shop: {shop}")
    return ShopUser(
        id=row["trayve_user_id"],
        shop_domain=row.get("shop_domain") or shop,
        email=row.get("email"),
    )


async def get_viewer_tier(
    user: ShopUser = Depends(get_current_shop_user),
) -> Tier:
    """Subscription tier of the current merchant (free without a plan)."""
    return SubscriptionService.get_viewer_tier(user.id)

