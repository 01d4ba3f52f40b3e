# =============================================================================
# core/models/display.py - Display Decision Schemas
# =============================================================================
# Derived, never-persisted views of a MediaRecord for one viewer:
# - BadgeStatus: The single summarizing label for a record
# - ActionState: Which actions the viewer can use right now
# - DownloadOption: One downloadable version of an image
# - DisplayDecision: Everything a client needs to render one image
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .media import Stage


class BadgeStatus(str, Enum):
    """
    Quality badge shown on a result.

    - processing: Nothing entitled is ready yet
    - 2k-ready: Basic upscale done (final state for free/creator)
    - 4k-processing: 4K enhancement running or still owed
    - finalizing: Face swap running
    - 4k-ready: Final entitled stage done (professional/enterprise)
    """
    PROCESSING = "processing"
    READY_2K = "2k-ready"
    PROCESSING_4K = "4k-processing"
    FINALIZING = "finalizing"
    READY_4K = "4k-ready"

    @property
    def label(self) -> str:
        """Text shown inside the badge."""
        return _BADGE_LABELS[self]


_BADGE_LABELS = {
    BadgeStatus.PROCESSING: "Processing",
    BadgeStatus.READY_2K: "Ready",
    BadgeStatus.PROCESSING_4K: "4K Processing",
    BadgeStatus.FINALIZING: "Finalizing...",
    BadgeStatus.READY_4K: "4K Ready",
}


class ActionState(BaseModel):
    """
    Enabled state of the per-image actions.

    `upgrade_required` is set for tiers where "Remove Background" is
    clickable but leads to an upgrade prompt instead of a removal.
    """

    download: bool = Field(
        default=True,
        description="Whether the download action is enabled"
    )

    remove_background: bool = Field(
        default=False,
        description="Whether the remove-background action is enabled"
    )

    upgrade_required: bool = Field(
        default=False,
        description="Remove-background click should open the upgrade prompt"
    )

    model_config = ConfigDict(frozen=True)


class DownloadOption(BaseModel):
    """One downloadable version of an image."""

    label: str = Field(..., description="Version label (Standard, 4K, BG Removed)")
    url: str = Field(..., description="Image URL to download")
    filename: str = Field(..., description="Suggested filename")

    model_config = ConfigDict(frozen=True)


class DisplayDecision(BaseModel):
    """
    Everything a client needs to render one result for one viewer.

    Recomputed on every read; a pure function of the record and the viewer.

    Example:
        {
            "badge": "4k-processing",
            "badge_label": "4K Processing",
            "display_url": "https://.../2k.png",
            "actions": {"download": true, "remove_background": true, "upgrade_required": false},
            "progress_label": "Enhancing to 4K...",
            "failed_stages": []
        }
    """

    badge: BadgeStatus
    badge_label: str
    display_url: str = Field(
        default="",
        description="URL of the image to show as the current preview"
    )
    actions: ActionState = Field(default_factory=ActionState)
    progress_label: str | None = Field(
        default=None,
        description="Human-readable step currently running, if any"
    )
    failed_stages: list[Stage] = Field(
        default_factory=list,
        description="Visible stages whose last run failed"
    )
    downloads: list[DownloadOption] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
