# =============================================================================
# core/models/credits.py - Credit Schemas
# =============================================================================
# API contract for the credit ledger:
# - CreditBalance: Totals for one user
# - CreditTransaction: One ledger entry
# - CreditUsageResult: Outcome of a consume call
# - CreditFeature / CREDIT_COSTS: Price list per feature
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class CreditFeature(str, Enum):
    """Billable features."""
    AI_GENERATION = "ai_generation"
    IMAGE_VARIATION = "image_variation"
    STYLE_TRANSFER = "style_transfer"
    HIGH_RES_GENERATION = "high_res_generation"
    BULK_GENERATION = "bulk_generation"
    UPSCALE = "upscale"
    BACKGROUND_CHANGE = "background_change"
    BACKGROUND_REMOVAL = "background_removal"


# Credits charged per use. Bulk generation is charged per image.
CREDIT_COSTS: dict[CreditFeature, int] = {
    CreditFeature.AI_GENERATION: 1000,
    CreditFeature.IMAGE_VARIATION: 1000,
    CreditFeature.STYLE_TRANSFER: 1000,
    CreditFeature.HIGH_RES_GENERATION: 1000,
    CreditFeature.BULK_GENERATION: 1000,
    CreditFeature.UPSCALE: 1000,
    CreditFeature.BACKGROUND_CHANGE: 1000,
    CreditFeature.BACKGROUND_REMOVAL: 500,
}


class CreditBalance(BaseModel):
    """
    Credit totals for a user.

    `available_credits` is always derived as total minus used.
    """
    user_id: str
    total_credits: int = Field(default=0, ge=0)
    used_credits: int = Field(default=0, ge=0)
    updated_at: datetime | None = None

    @property
    def available_credits(self) -> int:
        return self.total_credits - self.used_credits

    def covers(self, amount: int) -> bool:
        return self.available_credits >= amount


class CreditTransaction(BaseModel):
    """One row of the `credit_transactions` ledger."""
    id: str | None = None
    user_id: str
    transaction_type: str = Field(..., pattern="^(credit|debit)$")
    amount: int
    description: str = ""
    feature_type: str = ""
    created_at: datetime | None = None


class CreditUsageResult(BaseModel):
    """Outcome of consuming credits."""
    success: bool
    credits_consumed: int = 0
    remaining_balance: int | None = None
    error: str | None = None


class CreditDeductRequest(BaseModel):
    """Request body for POST /credits/deduct."""
    amount: int = Field(..., gt=0, description="Credits to consume")
    description: str = Field(default="AI Generation", max_length=500)
    feature_type: CreditFeature = Field(default=CreditFeature.AI_GENERATION)
