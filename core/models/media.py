# =============================================================================
# core/models/media.py - Media Pipeline Schemas
# =============================================================================
# These models describe one generated image and where it is in the
# enhancement pipeline:
# - StageStatus / Stage: Per-stage state and the fixed stage order
# - Tier: Subscription level of the viewer
# - StageState: URL + status of one enhancement stage
# - MediaRecord: Snapshot of one generated image's pipeline progress
#
# Records are written by external pipeline workers. This package only
# reads snapshots and derives views from them.
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StageStatus(str, Enum):
    """
    Possible states for one pipeline stage.

    - pending: Stage has not started yet
    - processing: A worker is running the stage
    - completed: Stage output is available
    - failed: Stage ran and failed
    - not_available: Stage is not offered to the viewer's tier
    """
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_AVAILABLE = "not_available"


class Stage(str, Enum):
    """
    Pipeline stages in declared order.

    Flow: try_on -> basic_upscale -> enhanced_upscale -> face_swap -> background_removal
    """
    TRY_ON = "try_on"
    BASIC_UPSCALE = "basic_upscale"
    ENHANCED_UPSCALE = "enhanced_upscale"
    FACE_SWAP = "face_swap"
    BACKGROUND_REMOVAL = "background_removal"


class Tier(str, Enum):
    """Subscription tier of the viewer."""
    FREE = "free"
    CREATOR = "creator"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"

    @classmethod
    def parse(cls, value: Any) -> Tier:
        """
        Map a plan identifier to a Tier.

        Accepts Tier values, plain tier names and the `plan_*` identifiers
        used by billing. "starter" is the legacy name of the creator plan.
        Anything unknown or missing is the free tier.

        Example:
            Tier.parse("plan_professional")  # Tier.PROFESSIONAL
            Tier.parse("starter")            # Tier.CREATOR
            Tier.parse(None)                 # Tier.FREE
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.FREE
        name = value.strip().lower()
        if name.startswith("plan_"):
            name = name[len("plan_"):]
        if name == "starter":
            return cls.CREATOR
        return cls._value2member_map_.get(name, cls.FREE)


class StageState(BaseModel):
    """
    URL and status of one enhancement stage.

    A URL is only expected once the stage is completed, but snapshots are
    best-effort so both fields are read defensively.
    """

    url: str | None = Field(
        default=None,
        description="Output image URL (present once the stage completes)"
    )

    status: StageStatus = Field(
        default=StageStatus.PENDING,
        description="Current stage status"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("url", mode="before")
    @classmethod
    def _blank_url_is_absent(cls, value: Any) -> Any:
        # Empty strings from the database mean "no URL yet"
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _unknown_status_is_pending(cls, value: Any) -> Any:
        if value is None:
            return StageStatus.PENDING
        if isinstance(value, str) and value not in StageStatus._value2member_map_:
            return StageStatus.PENDING
        return value

    @property
    def is_completed(self) -> bool:
        return self.status == StageStatus.COMPLETED

    @property
    def is_processing(self) -> bool:
        return self.status == StageStatus.PROCESSING

    @property
    def has_url(self) -> bool:
        return bool(self.url)


class MediaRecord(BaseModel):
    """
    Snapshot of one generated image's pipeline progress.

    Every enhancement stage defaults to pending with no URL, so a record
    built from a sparse database row never fails on missing fields.

    Example:
        {
            "id": "b1e0...",
            "base_image_url": "https://.../tryon.png",
            "basic_upscale": {"url": "https://.../2k.png", "status": "completed"},
            "enhanced_upscale": {"status": "processing"},
            "face_swap": {"status": "pending"},
            "background_removal": {"status": "pending"}
        }
    """

    id: str = Field(
        ...,
        description="Generation result identifier"
    )

    base_image_url: str | None = Field(
        default=None,
        description="Try-on output URL (present once the first stage completes)"
    )

    basic_upscale: StageState = Field(default_factory=StageState)
    enhanced_upscale: StageState = Field(default_factory=StageState)
    face_swap: StageState = Field(default_factory=StageState)
    background_removal: StageState = Field(default_factory=StageState)

    model_config = ConfigDict(frozen=True)

    @field_validator("base_image_url", mode="before")
    @classmethod
    def _blank_base_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator(
        "basic_upscale", "enhanced_upscale", "face_swap", "background_removal",
        mode="before",
    )
    @classmethod
    def _none_stage_is_default(cls, value: Any) -> Any:
        return StageState() if value is None else value

    def stage(self, stage: Stage) -> StageState:
        """
        Get the state of an enhancement stage.

        The try-on stage has no separate status column; it is completed
        once a base image exists.
        """
        if stage == Stage.TRY_ON:
            if self.base_image_url:
                return StageState(url=self.base_image_url, status=StageStatus.COMPLETED)
            return StageState()
        return getattr(self, stage.value)

    # -------------------------------------------------------------------------
    # Database Mapping
    # -------------------------------------------------------------------------

    @classmethod
    def from_generation_result(cls, row: dict[str, Any]) -> MediaRecord:
        """
        Build a record from a `generation_results` row.

        Stage fields live in the `generation_metadata` JSONB column using
        the pipeline workers' key names. The background removal URL has its
        own column, with the metadata copy as a fallback.

        Args:
            row: Row dict as returned by Supabase

        Returns:
            MediaRecord snapshot
        """
        metadata = row.get("generation_metadata") or {}

        removed_bg_url = row.get("removed_bg_url") or metadata.get("removed_bg_url")
        bg_status = metadata.get("bg_removal_status")
        if removed_bg_url and not bg_status:
            bg_status = StageStatus.COMPLETED.value

        return cls(
            id=str(row["id"]),
            base_image_url=metadata.get("tryon_url") or row.get("result_image_url"),
            basic_upscale=StageState(
                url=metadata.get("basic_upscale_url"),
                status=metadata.get("basic_upscale_status"),
            ),
            enhanced_upscale=StageState(
                url=metadata.get("upscaled_image_url"),
                status=metadata.get("upscale_status"),
            ),
            face_swap=StageState(
                url=metadata.get("face_swap_image_url"),
                status=metadata.get("face_swap_status"),
            ),
            background_removal=StageState(
                url=removed_bg_url,
                status=bg_status,
            ),
        )


class ViewerContext(BaseModel):
    """Who is looking at a record. Supplied per request, never stored."""

    tier: Tier = Field(
        default=Tier.FREE,
        description="Viewer's subscription tier"
    )

    model_config = ConfigDict(frozen=True)
