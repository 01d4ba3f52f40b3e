# =============================================================================
# core/models/catalog.py - Model Catalog Schemas
# =============================================================================
# Base (fashion) models, their poses and per-tier access:
# - ModelPose: One pose photo of a base model
# - BaseModelInfo: A base model with its active poses
# - ModelAccessInfo: Lock state for the viewer's tier
# - CatalogModel / ModelListResponse: Models as returned to clients
# =============================================================================

from pydantic import BaseModel, Field

from .media import Tier


class ModelPose(BaseModel):
    """One pose of a base model."""
    id: str
    base_model_id: str | None = None
    name: str = ""
    description: str | None = None
    pose_type: str | None = None
    image_url: str = ""
    is_active: bool = True


class BaseModelInfo(BaseModel):
    """A base model from the `base_models` table."""
    id: str
    name: str = ""
    description: str | None = None
    gender: str | None = None
    body_type: str | None = None
    ethnicity: str | None = None
    age_range: str | None = None
    image_url: str = ""
    is_active: bool = True
    is_promoted: bool | None = None
    poses: list[ModelPose] = Field(default_factory=list)


class ModelAccessInfo(BaseModel):
    """
    Whether the viewer can use a model.

    `required_tier` is the cheapest tier that unlocks the model.
    """
    is_locked: bool
    can_access: bool
    required_tier: Tier
    upgrade_prompt: str | None = None


class CatalogModel(BaseModelInfo):
    """A base model annotated with the viewer's access."""
    access_info: ModelAccessInfo


class ModelListResponse(BaseModel):
    """Response for GET /models."""
    models: list[CatalogModel] = Field(default_factory=list)
    tier: Tier
    count: int = 0
