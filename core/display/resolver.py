# =============================================================================
# core/display/resolver.py - Display Decision
# =============================================================================
# Combines the badge, display URL and action gate into one DisplayDecision,
# plus the progress label and failure list shown next to the badge.
# =============================================================================

from core.models.display import DisplayDecision
from core.models.media import MediaRecord, Stage, StageStatus, Tier, ViewerContext

from .actions import resolve_actions
from .badge import resolve_badge
from .tiers import mask_for_tier
from .urls import resolve_display_url, resolve_download_options

# Checked in this order; the first visible stage that is processing wins
_PROGRESS_LABELS: tuple[tuple[Stage, str], ...] = (
    (Stage.FACE_SWAP, "Face enhancement..."),
    (Stage.ENHANCED_UPSCALE, "Enhancing to 4K..."),
    (Stage.BASIC_UPSCALE, "Upscaling image..."),
)

_ENHANCEMENT_STAGES = (
    Stage.BASIC_UPSCALE,
    Stage.ENHANCED_UPSCALE,
    Stage.FACE_SWAP,
    Stage.BACKGROUND_REMOVAL,
)


def describe_progress(record: MediaRecord, tier: Tier) -> str | None:
    """
    Label for the step currently running, or None when nothing is.

    A record with no try-on output yet is still in initial generation.
    """
    visible = mask_for_tier(record, tier)
    for stage, label in _PROGRESS_LABELS:
        if visible.stage(stage).is_processing:
            return label
    if not visible.base_image_url:
        return "Processing..."
    return None


def failed_stages(record: MediaRecord, tier: Tier) -> list[Stage]:
    visible = mask_for_tier(record, tier)
    return [
        stage for stage in _ENHANCEMENT_STAGES
        if visible.stage(stage).status == StageStatus.FAILED
    ]


def resolve_display(
    record: MediaRecord,
    viewer: ViewerContext | Tier,
    fallback_clothing_image_url: str | None = None,
    is_removing_now: bool = False,
    project_name: str = "image",
    index: int = 0,
) -> DisplayDecision:
    """
    Build the full DisplayDecision for one record and one viewer.

    Pure: no I/O, no hidden state, never raises on sparse records.

    Args:
        record: Pipeline snapshot
        viewer: ViewerContext or bare Tier
        fallback_clothing_image_url: Source garment shown before any output
        is_removing_now: A background removal is already in flight
        project_name: Prefix for download filenames
        index: Position of the image in its project

    Returns:
        DisplayDecision
    """
    tier = viewer.tier if isinstance(viewer, ViewerContext) else viewer
    badge = resolve_badge(record, tier)

    return DisplayDecision(
        badge=badge,
        badge_label=badge.label,
        display_url=resolve_display_url(record, tier, fallback_clothing_image_url),
        actions=resolve_actions(record, tier, is_removing_now),
        progress_label=describe_progress(record, tier),
        failed_stages=failed_stages(record, tier),
        downloads=resolve_download_options(record, tier, project_name, index),
    )
