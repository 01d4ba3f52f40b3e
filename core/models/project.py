# =============================================================================
# core/models/project.py - Project & Result Schemas
# =============================================================================
# These models define the API contract for generation projects:
# - ProjectResponse: A project owned by a merchant
# - ProjectRenameRequest: Input for renaming a project
# - ResultImage: One generated image with its display decision
# - PoseResult / ProjectResultsResponse: Results grouped by pose
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .display import DisplayDecision
from .media import MediaRecord, Tier


class ProjectResponse(BaseModel):
    """
    A generation project.

    Example:
        {
            "id": "7a1c...",
            "name": "Summer dresses",
            "clothing_image_url": "https://.../dress.png",
            "created_at": "2025-06-01T10:30:00Z"
        }
    """
    id: str
    user_id: str | None = None
    name: str | None = None
    clothing_image_url: str | None = None
    created_at: datetime | None = None


class ProjectRenameRequest(BaseModel):
    """Request body for renaming a project. Whitespace is trimmed."""

    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Project name cannot be blank")
        return value


class ResultImage(BaseModel):
    """
    One generated image plus how the viewer should see it.

    `upscaled_url` / `upscale_status` track an on-demand upscale, which is
    separate from the pipeline's own 4K stage.
    """
    record: MediaRecord
    display: DisplayDecision
    upscaled_url: str | None = None
    upscale_status: str | None = None
    created_at: datetime | None = None


class PoseResult(BaseModel):
    """Images generated for one pose."""
    pose_id: int | str | None = None
    pose_name: str = "Unknown Pose"
    images: list[ResultImage] = Field(default_factory=list)


class ProjectResultsResponse(BaseModel):
    """Response for GET /projects/{id}/results."""
    project_id: str
    tier: Tier
    results: list[PoseResult] = Field(default_factory=list)
    total: int = 0
