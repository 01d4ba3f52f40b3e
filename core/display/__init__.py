# =============================================================================
# core/display/ - Display Decision Engine
# =============================================================================
# Pure functions that turn a MediaRecord snapshot and a viewer tier into
# what the client renders:
# - tiers.py: Tier capability table and plan-name normalization
# - badge.py: Status resolver (quality badge)
# - urls.py: Display URL resolver and download options
# - actions.py: Action gate (download / remove background)
# - resolver.py: Combined DisplayDecision
# - access.py: Base model access per tier
#
# Nothing in this package performs I/O.
# =============================================================================

from .access import (
    FREE_TIER_MODELS,
    enrich_models_with_access,
    get_model_access_info,
    is_free_tier_model,
    is_model_locked,
)
from .actions import (
    can_download,
    can_remove_background,
    requires_upgrade_for_background_removal,
    resolve_actions,
)
from .badge import resolve_badge
from .resolver import describe_progress, failed_stages, resolve_display
from .tiers import (
    TIER_CAPABILITIES,
    TierCapabilities,
    capabilities,
    grants_4k,
    is_stage_visible,
    mask_for_tier,
    normalize_tier,
    plan_name,
)
from .urls import resolve_display_url, resolve_download_options

__all__ = [
    # Tiers
    "TIER_CAPABILITIES",
    "TierCapabilities",
    "capabilities",
    "grants_4k",
    "is_stage_visible",
    "mask_for_tier",
    "normalize_tier",
    "plan_name",
    # Resolvers
    "resolve_badge",
    "resolve_display_url",
    "resolve_download_options",
    "can_download",
    "can_remove_background",
    "requires_upgrade_for_background_removal",
    "resolve_actions",
    "describe_progress",
    "failed_stages",
    "resolve_display",
    # Model access
    "FREE_TIER_MODELS",
    "enrich_models_with_access",
    "get_model_access_info",
    "is_free_tier_model",
    "is_model_locked",
]
