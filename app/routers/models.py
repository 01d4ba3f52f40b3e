# =============================================================================
# app/routers/models.py - Base Model Catalog Endpoints
# =============================================================================
# Base models and poses for the studio, with lock state per tier.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, ConfigDict, Field

from app.auth import ShopUser, get_current_shop_user, get_viewer_tier
from core.models.catalog import CatalogModel, ModelListResponse, ModelPose
from core.models.media import Tier
from core.services.model_service import ModelService

router = APIRouter()


class ModelPosesResponse(BaseModel):
    """Active poses of one base model."""
    model_id: str
    poses: list[ModelPose] = Field(default_factory=list)
    count: int = 0

    model_config = ConfigDict(protected_namespaces=())


@router.get("", response_model=ModelListResponse)
async def list_models(
    tier: Tier = Depends(get_viewer_tier),
    gender: Annotated[str | None, Query(description="Filter by gender")] = None,
    body_type: Annotated[str | None, Query(description="Filter by body type")] = None,
):
    """
    List promoted base models.

    Free plans can use Chloe, Emma, Amara and Grace; other models are
    returned with `access_info.is_locked = true`. Any paid plan unlocks all.
    """
    return ModelService.list_models(tier, gender=gender, body_type=body_type)


@router.get("/{model_id}", response_model=CatalogModel)
async def get_model(
    model_id: Annotated[str, Path(description="Base model ID")],
    tier: Tier = Depends(get_viewer_tier),
):
    """Get one base model with its active poses."""
    return ModelService.get_model(model_id, tier)


@router.get("/{model_id}/poses", response_model=ModelPosesResponse)
async def get_model_poses(
    model_id: Annotated[str, Path(description="Base model ID")],
    user: ShopUser = Depends(get_current_shop_user),
):
    """List the active poses of a base model, oldest first."""
    poses = ModelService.get_poses(model_id)
    return ModelPosesResponse(model_id=model_id, poses=poses, count=len(poses))
