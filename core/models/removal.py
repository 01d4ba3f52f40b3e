# =============================================================================
# core/models/removal.py - Background Removal Schemas
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class RemovalState(str, Enum):
    """Outcome of a remove-background request."""
    QUEUED = "queued"
    ALREADY_REMOVED = "already_removed"


class BackgroundRemovalResponse(BaseModel):
    """
    Response for POST /images/{id}/remove-background.

    A queued removal returns the worker task ID; poll /tasks/{task_id} or
    refresh the project results to see the cutout.
    """
    image_id: str
    status: RemovalState
    removed_bg_url: str | None = None
    task_id: str | None = None
    credits_required: int = Field(default=0, ge=0)
