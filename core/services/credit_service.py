# =============================================================================
# core/services/credit_service.py - Credit Ledger
# =============================================================================
# Reads balances from `user_credits`, consumes credits through the
# `consume_user_credits` Postgres function (atomic check-and-debit) and
# lists the `credit_transactions` ledger. It never grants credits.
# =============================================================================

import logging
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError, is_no_rows_error
from core.models.credits import (
    CREDIT_COSTS,
    CreditBalance,
    CreditFeature,
    CreditTransaction,
    CreditUsageResult,
)

logger = logging.getLogger(__name__)


class CreditService:
    """Service for credit balance and ledger operations."""

    @staticmethod
    def get_balance(user_id: UUID | str) -> CreditBalance:
        """
        Get a user's credit balance.

        A user without a `user_credits` row has a zero balance.

        Raises:
            SupabaseClientError: If query fails
        """
        client = SupabaseClient.get_client()
        user_id_str = str(user_id)

        try:
            response = (
                client.table("user_credits")
                .select("user_id, total_credits, used_credits, updated_at")
                .eq("user_id", user_id_str)
                .maybe_single()
                .execute()
            )
            data = response.data if response is not None else None

        except Exception as e:
            if is_no_rows_error(e):
                data = None
            else:
                raise SupabaseClientError(
                    message=f"Failed to fetch credits: {e}",
                    code="FETCH_CREDITS_FAILED",
                    details={"user_id": user_id_str}
                )

        if not data:
            return CreditBalance(user_id=user_id_str)

        return CreditBalance(
            user_id=user_id_str,
            total_credits=data.get("total_credits") or 0,
            used_credits=data.get("used_credits") or 0,
            updated_at=data.get("updated_at"),
        )

    @staticmethod
    def consume(
        user_id: UUID | str,
        amount: int,
        description: str,
        feature: CreditFeature | str = CreditFeature.AI_GENERATION,
    ) -> CreditUsageResult:
        """
        Consume credits for an action.

        The check and the debit happen inside `consume_user_credits`, so two
        concurrent requests cannot overdraw a balance.

        Args:
            user_id: The paying user
            amount: Credits to consume (> 0)
            description: Ledger description
            feature: Feature being paid for

        Returns:
            CreditUsageResult (success=False with an error when rejected)
        """
        feature_type = feature.value if isinstance(feature, CreditFeature) else feature

        try:
            data = SupabaseClient.rpc("consume_user_credits", {
                "p_user_id": str(user_id),
                "p_amount": amount,
                "p_description": description,
                "p_reference_type": feature_type,
            })
        except SupabaseClientError as e:
            logger.error(f"Error consuming credits for {user_id}: {e}")
            return CreditUsageResult(success=False, error=e.message)

        if not data or not data.get("success"):
            error = (data or {}).get("error") or "Insufficient credits"
            logger.info(f"Credit consumption rejected for {user_id}: {error}")
            return CreditUsageResult(success=False, error=error)

        logger.info(f"Consumed {amount} credits from {user_id} for {feature_type}")
        return CreditUsageResult(
            success=True,
            credits_consumed=amount,
            remaining_balance=data.get("new_balance"),
        )

    @staticmethod
    def consume_for(
        user_id: UUID | str,
        feature: CreditFeature,
        description: str,
        quantity: int = 1,
    ) -> CreditUsageResult:
        """Consume the listed price of a feature (times quantity)."""
        return CreditService.consume(
            user_id, CREDIT_COSTS[feature] * quantity, description, feature
        )

    @staticmethod
    def get_transactions(
        user_id: UUID | str,
        limit: int = 20,
    ) -> list[CreditTransaction]:
        """Most recent ledger entries for a user, newest first."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("credit_transactions")
                .select("*")
                .eq("user_id", str(user_id))
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch credit transactions: {e}",
                code="FETCH_TRANSACTIONS_FAILED",
                details={"user_id": str(user_id), "limit": limit}
            )

        return [CreditTransaction(**row) for row in response.data or []]
