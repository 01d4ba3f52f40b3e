# =============================================================================
# app/routers/images.py - Generated Image Actions
# =============================================================================
# Per-image actions on generation results. Both run on a worker and are
# charged when their output is stored.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path

from app.auth import ShopUser, get_current_shop_user, get_viewer_tier
from core.models.media import Tier
from core.models.removal import BackgroundRemovalResponse
from core.models.upscale import UpscaleRequest, UpscaleResponse
from core.services.background_service import BackgroundRemovalService
from core.services.upscale_service import UpscaleService

router = APIRouter()


@router.post(
    "/{image_id}/remove-background",
    response_model=BackgroundRemovalResponse,
    status_code=202,
)
async def remove_background(
    image_id: Annotated[UUID, Path(description="Generation result UUID")],
    user: ShopUser = Depends(get_current_shop_user),
    tier: Tier = Depends(get_viewer_tier),
):
    """
    Start removing the background of a generated image (500 credits).

    The removal runs on a worker; poll GET /tasks/{task_id} or the project
    results. Credits are charged when the cutout is stored.

    Errors:
    - 402 UPGRADE_REQUIRED: Free plan
    - 402 INSUFFICIENT_CREDITS: Balance below 500
    - 409 REMOVAL_IN_PROGRESS: A removal is already running for the image
    - 409 IMAGE_NOT_READY: The image has not finished upscaling

    An image that already has a cutout returns it with status
    `already_removed` and is not charged again.
    """
    return BackgroundRemovalService.start_removal(image_id, user_id=user.id, tier=tier)


@router.post(
    "/{image_id}/upscale",
    response_model=UpscaleResponse,
    status_code=202,
)
async def upscale(
    image_id: Annotated[UUID, Path(description="Generation result UUID")],
    request: Annotated[UpscaleRequest | None, Body()] = None,
    user: ShopUser = Depends(get_current_shop_user),
    tier: Tier = Depends(get_viewer_tier),
):
    """
    Start an on-demand upscale of a generated image (1000 credits).

    Body (optional): `{"scale_factor": 2}`, floored and clamped to 1-4.

    Errors:
    - 402 UPGRADE_REQUIRED: Free and Creator plans
    - 402 INSUFFICIENT_CREDITS: Balance below 1000
    - 409 UPSCALE_IN_PROGRESS: An upscale is already running for the image
    - 409 IMAGE_NOT_READY: Nothing to upscale yet

    An image that was already upscaled returns the result with status
    `already_upscaled` and is not charged again.
    """
    request = request or UpscaleRequest()
    return UpscaleService.start_upscale(
        image_id,
        user_id=user.id,
        tier=tier,
        scale_factor=request.scale_factor,
    )
