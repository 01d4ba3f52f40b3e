# =============================================================================
# core/services/background_service.py - Background Removal Requests
# =============================================================================
# Validates a remove-background request and hands the work to a Celery
# worker. The worker (workers.tasks.remove_background) calls the provider,
# stores the cutout and charges the credits.
#
# Order of checks:
# 1. Image exists and belongs to the caller's project
# 2. Already removed -> return the stored cutout, no charge
# 3. Free tier -> upgrade required
# 4. Removal in flight -> conflict
# 5. Nothing finished to cut out -> not ready
# 6. Balance covers the price -> claim the image and enqueue
# =============================================================================

import logging
from uuid import UUID

from core.display import (
    can_remove_background,
    requires_upgrade_for_background_removal,
    resolve_display_url,
)
from core.models.credits import CREDIT_COSTS, CreditFeature
from core.models.jobs import ImageJob
from core.models.media import MediaRecord, Tier
from core.models.removal import BackgroundRemovalResponse, RemovalState
from core.services.credit_service import CreditService
from core.services.image_jobs import queue_image_job
from core.services.project_service import ProjectService
from app.exceptions import (
    BackgroundRemovalInProgressError,
    ImageNotReadyError,
    InsufficientCreditsError,
    UpgradeRequiredError,
)

logger = logging.getLogger(__name__)

REMOVAL_COST = CREDIT_COSTS[CreditFeature.BACKGROUND_REMOVAL]


class BackgroundRemovalService:
    """Service for starting background removals."""

    @staticmethod
    def start_removal(
        result_id: str | UUID,
        user_id: UUID | str,
        tier: Tier,
    ) -> BackgroundRemovalResponse:
        """
        Start removing the background of one generated image.

        The processing mark is claimed with a conditional update, so two
        concurrent requests for the same image queue one task.

        Args:
            result_id: generation_results row ID
            user_id: The paying user
            tier: Viewer tier

        Returns:
            BackgroundRemovalResponse (queued, or already_removed)

        Raises:
            ResultNotFoundError / ProjectAccessDeniedError
            UpgradeRequiredError: Free tier
            BackgroundRemovalInProgressError: A removal is already running
            ImageNotReadyError: No finished output yet
            InsufficientCreditsError: Balance below the removal price
            TaskQueueUnavailableError: Worker queue unreachable
        """
        row = ProjectService.get_owned_result(result_id, user_id)
        record = MediaRecord.from_generation_result(row)

        if record.background_removal.has_url:
            logger.info(f"Background already removed for {record.id}")
            return BackgroundRemovalResponse(
                image_id=record.id,
                status=RemovalState.ALREADY_REMOVED,
                removed_bg_url=record.background_removal.url,
            )

        if requires_upgrade_for_background_removal(tier):
            raise UpgradeRequiredError("Background removal", tier.value)

        is_removing_now = record.background_removal.is_processing
        if not can_remove_background(record, tier, is_removing_now=is_removing_now):
            if is_removing_now:
                raise BackgroundRemovalInProgressError(record.id)
            raise ImageNotReadyError(record.id)

        source_url = resolve_display_url(record, tier)
        if not source_url:
            raise ImageNotReadyError(record.id)

        balance = CreditService.get_balance(user_id)
        if not balance.covers(REMOVAL_COST):
            raise InsufficientCreditsError(REMOVAL_COST, balance.available_credits)

        from workers.tasks import remove_background

        task_id = queue_image_job(ImageJob.BACKGROUND_REMOVAL, row, remove_background, {
            "result_id": record.id,
            "user_id": str(user_id),
            "source_url": source_url,
        })
        if task_id is None:
            raise BackgroundRemovalInProgressError(record.id)

        return BackgroundRemovalResponse(
            image_id=record.id,
            status=RemovalState.QUEUED,
            task_id=task_id,
            credits_required=REMOVAL_COST,
        )
