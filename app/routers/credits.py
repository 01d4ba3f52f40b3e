# =============================================================================
# app/routers/credits.py - Credit Endpoints
# =============================================================================
# Balance, deduction and ledger history for the current shop.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.auth import ShopUser, get_current_shop_user, get_viewer_tier
from app.exceptions import CreditDeductionError, InsufficientCreditsError
from core.display.tiers import plan_name
from core.models.credits import CreditDeductRequest, CreditTransaction
from core.models.media import Tier
from core.services.credit_service import CreditService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class CreditBalanceResponse(BaseModel):
    """Credit balance with the plan it belongs to."""
    total_credits: int
    used_credits: int
    available_credits: int
    tier: Tier
    plan_name: str


class CreditDeductResponse(BaseModel):
    """Response when credits are consumed."""
    success: bool = True
    credits_deducted: int
    remaining_balance: int | None = None


class CreditTransactionsResponse(BaseModel):
    """Most recent ledger entries."""
    transactions: list[CreditTransaction] = Field(default_factory=list)
    count: int = 0


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/balance", response_model=CreditBalanceResponse)
async def get_balance(
    user: ShopUser = Depends(get_current_shop_user),
    tier: Tier = Depends(get_viewer_tier),
):
    """Get the shop's credit balance. Shops without credits get zeros."""
    balance = CreditService.get_balance(user.id)

    return CreditBalanceResponse(
        total_credits=balance.total_credits,
        used_credits=balance.used_credits,
        available_credits=balance.available_credits,
        tier=tier,
        plan_name=plan_name(tier),
    )


@router.post("/deduct", response_model=CreditDeductResponse)
async def deduct_credits(
    request: CreditDeductRequest,
    user: ShopUser = Depends(get_current_shop_user),
):
    """
    Consume credits for an action.

    Returns 402 when the balance is too low and 400 when the ledger
    rejects the deduction for another reason.
    """
    balance = CreditService.get_balance(user.id)
    if not balance.covers(request.amount):
        raise InsufficientCreditsError(request.amount, balance.available_credits)

    usage = CreditService.consume(
        user.id,
        request.amount,
        request.description,
        request.feature_type,
    )
    if not usage.success:
        raise CreditDeductionError(usage.error or "Unknown error")

    return CreditDeductResponse(
        credits_deducted=usage.credits_consumed,
        remaining_balance=usage.remaining_balance,
    )


@router.get("/transactions", response_model=CreditTransactionsResponse)
async def list_transactions(
    user: ShopUser = Depends(get_current_shop_user),
    limit: Annotated[int, Query(ge=1, le=100, description="Max entries")] = 20,
):
    """List the shop's most recent credit transactions, newest first."""
    transactions = CreditService.get_transactions(user.id, limit=limit)
    return CreditTransactionsResponse(transactions=transactions, count=len(transactions))
