# =============================================================================
# core/display/badge.py - Status Resolver
# =============================================================================
# Picks the single quality badge for a record.
#
# Rules are evaluated in strict priority order and the first match wins.
# Viewers entitled to 4K never see a "done" badge until the final entitled
# stage has produced output; a finished 2K with 4K still owed reads as
# "4k-processing", never "2k-ready".
# =============================================================================

from core.models.display import BadgeStatus
from core.models.media import MediaRecord, Tier

from .tiers import grants_4k, mask_for_tier


def resolve_badge(record: MediaRecord, tier: Tier) -> BadgeStatus:
    """
    Compute the badge for a record as seen by a tier.

    Failed stages count as "not completed" and fall through to the next
    rule. Always returns one of the five BadgeStatus values.

    Args:
        record: Pipeline snapshot
        tier: Viewer tier

    Returns:
        BadgeStatus
    """
    visible = mask_for_tier(record, tier)
    face_swap = visible.face_swap
    enhanced = visible.enhanced_upscale
    basic = visible.basic_upscale

    if grants_4k(tier):
        if face_swap.is_completed and face_swap.has_url:
            return BadgeStatus.READY_4K
        if face_swap.is_processing:
            return BadgeStatus.FINALIZING
        if enhanced.is_completed and enhanced.has_url:
            return BadgeStatus.READY_4K
        if enhanced.is_processing:
            return BadgeStatus.PROCESSING_4K
        if basic.is_completed:
            return BadgeStatus.PROCESSING_4K

    if basic.is_completed and basic.has_url:
        return BadgeStatus.READY_2K

    return BadgeStatus.PROCESSING
