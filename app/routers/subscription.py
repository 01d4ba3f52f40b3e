# =============================================================================
# app/routers/subscription.py - Subscription Endpoints
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import ShopUser, get_current_shop_user
from core.models.subscription import CurrentSubscriptionResponse
from core.services.subscription_service import SubscriptionService

router = APIRouter()


@router.get("/current", response_model=CurrentSubscriptionResponse)
async def get_current_subscription(
    user: ShopUser = Depends(get_current_shop_user),
):
    """
    Get the shop's active subscription.

    `subscription` is null and the tier is free when no plan is active.
    """
    return SubscriptionService.get_current(user.id)
