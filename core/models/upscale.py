# =============================================================================
# core/models/upscale.py - On-Demand Upscale Schemas
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field, field_validator

MIN_SCALE_FACTOR = 1
MAX_SCALE_FACTOR = 4
DEFAULT_SCALE_FACTOR = 2


class UpscaleState(str, Enum):
    """Outcome of an upscale request."""
    QUEUED = "queued"
    ALREADY_UPSCALED = "already_upscaled"


class UpscaleRequest(BaseModel):
    """
    Request body for POST /images/{id}/upscale.

    Fractional factors are floored and everything is clamped to 1-4, so
    `{"scale_factor": 7.5}` upscales 4x.
    """
    scale_factor: int = Field(default=DEFAULT_SCALE_FACTOR)

    @field_validator("scale_factor", mode="before")
    @classmethod
    def _clamp_scale(cls, value) -> int:
        try:
            value = int(float(value))
        except (TypeError, OverflowError):
            raise ValueError("scale_factor must be a number")
        return min(max(value, MIN_SCALE_FACTOR), MAX_SCALE_FACTOR)


class UpscaleResponse(BaseModel):
    """Response for POST /images/{id}/upscale."""
    image_id: str
    status: UpscaleState
    upscaled_url: str | None = None
    task_id: str | None = None
    scale_factor: int | None = None
    credits_required: int = Field(default=0, ge=0)
