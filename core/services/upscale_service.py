# =============================================================================
# core/services/upscale_service.py - On-Demand Upscale Requests
# =============================================================================
# Starts a credit-charged upscale of one generated image on the 4K plans.
# The worker (workers.tasks.upscale_image) calls the upscale provider,
# stores the result under `manual_upscale_url` and charges the credits.
# =============================================================================

import logging
from uuid import UUID

from core.display import grants_4k, resolve_display_url
from core.models.credits import CREDIT_COSTS, CreditFeature
from core.models.jobs import JOB_KEYS, ImageJob
from core.models.media import MediaRecord, StageStatus, Tier
from core.models.upscale import DEFAULT_SCALE_FACTOR, UpscaleResponse, UpscaleState
from core.services.credit_service import CreditService
from core.services.image_jobs import queue_image_job
from core.services.project_service import ProjectService
from app.exceptions import (
    ImageNotReadyError,
    InsufficientCreditsError,
    UpgradeRequiredError,
    UpscaleInProgressError,
)

logger = logging.getLogger(__name__)

UPSCALE_COST = CREDIT_COSTS[CreditFeature.UPSCALE]
KEYS = JOB_KEYS[ImageJob.UPSCALE]


class UpscaleService:
    """Service for starting on-demand upscales."""

    @staticmethod
    def start_upscale(
        result_id: str | UUID,
        user_id: UUID | str,
        tier: Tier,
        scale_factor: int = DEFAULT_SCALE_FACTOR,
    ) -> UpscaleResponse:
        """
        Start upscaling one generated image.

        The source is the best version the viewer's plan can see. An image
        that was already upscaled returns the stored result and is not
        charged again.

        Raises:
            ResultNotFoundError / ProjectAccessDeniedError
            UpgradeRequiredError: Free and Creator plans
            UpscaleInProgressError: An upscale is already running
            ImageNotReadyError: No finished output yet
            InsufficientCreditsError: Balance below the upscale price
            TaskQueueUnavailableError: Worker queue unreachable
        """
        row = ProjectService.get_owned_result(result_id, user_id)
        record = MediaRecord.from_generation_result(row)
        metadata = row.get("generation_metadata") or {}

        if metadata.get(KEYS.url):
            logger.info(f"Image {record.id} already upscaled")
            return UpscaleResponse(
                image_id=record.id,
                status=UpscaleState.ALREADY_UPSCALED,
                upscaled_url=metadata[KEYS.url],
            )

        if not grants_4k(tier):
            raise UpgradeRequiredError("4K upscale", tier.value)

        if metadata.get(KEYS.status) == StageStatus.PROCESSING.value:
            raise UpscaleInProgressError(record.id)

        source_url = resolve_display_url(record, tier)
        if not source_url:
            raise ImageNotReadyError(record.id)

        balance = CreditService.get_balance(user_id)
        if not balance.covers(UPSCALE_COST):
            raise InsufficientCreditsError(UPSCALE_COST, balance.available_credits)

        from workers.tasks import upscale_image

        task_id = queue_image_job(ImageJob.UPSCALE, row, upscale_image, {
            "result_id": record.id,
            "user_id": str(user_id),
            "source_url": source_url,
            "scale_factor": scale_factor,
        })
        if task_id is None:
            raise UpscaleInProgressError(record.id)

        return UpscaleResponse(
            image_id=record.id,
            status=UpscaleState.QUEUED,
            task_id=task_id,
            scale_factor=scale_factor,
            credits_required=UPSCALE_COST,
        )
