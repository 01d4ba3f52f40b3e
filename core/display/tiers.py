# =============================================================================
# core/display/tiers.py - Tier Capability Table
# =============================================================================
# Static mapping from subscription tier to the pipeline stages that tier can
# see. A stage that is not visible is treated as `not_available` no matter
# what the underlying record says.
#
# Usage:
#   from core.display.tiers import grants_4k, mask_for_tier
#   visible = mask_for_tier(record, Tier.CREATOR)
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.models.media import MediaRecord, Stage, StageState, StageStatus, Tier


@dataclass(frozen=True)
class TierCapabilities:
    """Which stages a tier can see."""
    basic_upscale: bool
    enhanced_stages: bool  # 4K upscale + face swap

    @property
    def visible_stages(self) -> tuple[Stage, ...]:
        stages = [Stage.TRY_ON]
        if self.basic_upscale:
            stages.append(Stage.BASIC_UPSCALE)
        if self.enhanced_stages:
            stages.extend([Stage.ENHANCED_UPSCALE, Stage.FACE_SWAP])
        stages.append(Stage.BACKGROUND_REMOVAL)
        return tuple(stages)


TIER_CAPABILITIES: dict[Tier, TierCapabilities] = {
    Tier.FREE: TierCapabilities(basic_upscale=True, enhanced_stages=False),
    Tier.CREATOR: TierCapabilities(basic_upscale=True, enhanced_stages=False),
    Tier.PROFESSIONAL: TierCapabilities(basic_upscale=True, enhanced_stages=True),
    Tier.ENTERPRISE: TierCapabilities(basic_upscale=True, enhanced_stages=True),
}

PLAN_NAMES: dict[Tier, str] = {
    Tier.FREE: "Free Plan",
    Tier.CREATOR: "Creator Plan",
    Tier.PROFESSIONAL: "Professional Plan",
    Tier.ENTERPRISE: "Enterprise Plan",
}


def capabilities(tier: Tier) -> TierCapabilities:
    return TIER_CAPABILITIES[tier]


def grants_4k(tier: Tier) -> bool:
    """True if the tier can see the 4K upscale and face-swap stages."""
    return TIER_CAPABILITIES[tier].enhanced_stages


def is_stage_visible(stage: Stage, tier: Tier) -> bool:
    return stage in TIER_CAPABILITIES[tier].visible_stages


def normalize_tier(value: Any) -> Tier:
    """Map a plan identifier to a Tier (unknown or missing is free)."""
    return Tier.parse(value)


def plan_name(tier: Tier) -> str:
    return PLAN_NAMES.get(tier, PLAN_NAMES[Tier.FREE])


_HIDDEN = StageState(url=None, status=StageStatus.NOT_AVAILABLE)


def _masked(state: StageState, visible: bool) -> StageState:
    # not_available stages are never displayed, even if the row has a URL
    if not visible or state.status == StageStatus.NOT_AVAILABLE:
        return _HIDDEN
    return state


def mask_for_tier(record: MediaRecord, tier: Tier) -> MediaRecord:
    """
    Return the record as the given tier is allowed to see it.

    Stages outside the tier's capabilities become `not_available` with no
    URL. Stages already marked `not_available` lose their URL too.

    Args:
        record: Raw snapshot
        tier: Viewer tier

    Returns:
        A new MediaRecord; the input is not modified
    """
    caps = TIER_CAPABILITIES[tier]
    return record.model_copy(update={
        "basic_upscale": _masked(record.basic_upscale, caps.basic_upscale),
        "enhanced_upscale": _masked(record.enhanced_upscale, caps.enhanced_stages),
        "face_swap": _masked(record.face_swap, caps.enhanced_stages),
        "background_removal": _masked(record.background_removal, True),
    })
