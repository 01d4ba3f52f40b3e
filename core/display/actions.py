# =============================================================================
# core/display/actions.py - Action Gate
# =============================================================================
# Decides whether "Download" and "Remove Background" are usable for a record.
#
# Background removal is one-shot per record and at most one removal may be
# in flight; the caller tracks the in-flight state and passes it in.
# =============================================================================

from core.models.display import ActionState
from core.models.media import MediaRecord, Tier

from .tiers import grants_4k, mask_for_tier


def can_remove_background(
    record: MediaRecord,
    tier: Tier,
    is_removing_now: bool = False,
) -> bool:
    """
    Whether the remove-background action is enabled.

    Free tier is always enabled here; the click opens the upgrade prompt
    (see `requires_upgrade_for_background_removal`). Professional and
    enterprise fall back to the 2K output so a stalled 4K never blocks them.
    """
    visible = mask_for_tier(record, tier)

    if visible.background_removal.has_url:
        return False
    if is_removing_now:
        return False

    if tier == Tier.FREE:
        return True

    basic_ready = visible.basic_upscale.is_completed
    if grants_4k(tier):
        enhanced_ready = (
            visible.enhanced_upscale.is_completed or visible.face_swap.is_completed
        )
        return enhanced_ready or basic_ready

    return basic_ready


def requires_upgrade_for_background_removal(tier: Tier) -> bool:
    return tier == Tier.FREE


def can_download(record: MediaRecord, tier: Tier) -> bool:
    """
    Whether the download action is enabled.

    Disabled only while the viewer's highest entitled stage is processing.
    Otherwise the viewer downloads whatever the display URL currently is.
    """
    visible = mask_for_tier(record, tier)
    final_stage = visible.face_swap if grants_4k(tier) else visible.basic_upscale
    return not final_stage.is_processing


def resolve_actions(
    record: MediaRecord,
    tier: Tier,
    is_removing_now: bool = False,
) -> ActionState:
    return ActionState(
        download=can_download(record, tier),
        remove_background=can_remove_background(record, tier, is_removing_now),
        upgrade_required=requires_upgrade_for_background_removal(tier),
    )
