# =============================================================================
# core/display/access.py - Model Access Rules
# =============================================================================
# Free tier can use a fixed set of base models; any paid tier unlocks them
# all.
# =============================================================================

from collections.abc import Iterable

from core.models.catalog import BaseModelInfo, CatalogModel, ModelAccessInfo
from core.models.media import Tier

FREE_TIER_MODELS: tuple[str, ...] = ("Chloe", "Emma", "Amara", "Grace")

UPGRADE_PROMPT = "Upgrade to any plan to unlock all models"


def is_free_tier_model(model_name: str) -> bool:
    return model_name in FREE_TIER_MODELS


def is_model_locked(model_name: str, tier: Tier) -> bool:
    """True when `tier` cannot use the model named `model_name`."""
    if tier != Tier.FREE:
        return False
    return not is_free_tier_model(model_name)


def get_model_access_info(model_name: str, tier: Tier) -> ModelAccessInfo:
    locked = is_model_locked(model_name, tier)
    return ModelAccessInfo(
        is_locked=locked,
        can_access=not locked,
        required_tier=Tier.FREE if is_free_tier_model(model_name) else Tier.CREATOR,
        upgrade_prompt=UPGRADE_PROMPT if locked else None,
    )


def enrich_models_with_access(
    models: Iterable[BaseModelInfo],
    tier: Tier,
) -> list[CatalogModel]:
    """Attach access info for `tier` to each model, keeping order."""
    return [
        CatalogModel(
            **model.model_dump(),
            access_info=get_model_access_info(model.name, tier),
        )
        for model in models
    ]
