# =============================================================================
# core/services/subscription_service.py - Subscription Lookup
# =============================================================================
# Resolves a user's active subscription and the viewer tier derived from it.
# Creating and cancelling subscriptions belongs to the billing flow.
# =============================================================================

import logging
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.display.tiers import plan_name
from core.models.media import Tier
from core.models.subscription import (
    CurrentSubscriptionResponse,
    SubscriptionStatus,
    UserSubscription,
)

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Service for reading subscriptions."""

    @staticmethod
    def get_active_subscription(user_id: UUID | str) -> UserSubscription | None:
        """
        Get the newest active subscription for a user.

        Returns:
            UserSubscription, or None when the user has no active plan

        Raises:
            SupabaseClientError: If query fails
        """
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("shopify_user_subscriptions")
                .select("*")
                .eq("trayve_user_id", str(user_id))
                .eq("status", SubscriptionStatus.ACTIVE.value)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch subscription: {e}",
                code="FETCH_SUBSCRIPTION_FAILED",
                details={"user_id": str(user_id)}
            )

        rows = response.data or []
        if not rows:
            return None
        return UserSubscription(**rows[0])

    @staticmethod
    def get_viewer_tier(user_id: UUID | str) -> Tier:
        """
        Tier used to resolve what a user can see.

        Users without an active subscription are on the free tier.
        """
        subscription = SubscriptionService.get_active_subscription(user_id)
        tier = subscription.plan_tier if subscription else Tier.FREE
        logger.debug(f"Viewer tier for {user_id}: {tier.value}")
        return tier

    @staticmethod
    def get_current(user_id: UUID | str) -> CurrentSubscriptionResponse:
        subscription = SubscriptionService.get_active_subscription(user_id)
        tier = subscription.plan_tier if subscription else Tier.FREE
        return CurrentSubscriptionResponse(
            subscription=subscription,
            plan_tier=tier,
            plan_name=plan_name(tier),
        )
