# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks for image post-processing.
#
# Tasks:
# - remove_background: Cut out one generated image and charge for it
# - upscale_image: Upscale one generated image and charge for it
#
# The API claims the image (job status `processing`, task ID recorded in
# generation_metadata) before queueing. A task whose claim was released
# (cancelled) or whose image already has a result exits without calling the
# provider or charging.
# =============================================================================

import logging
from typing import Any

from celery import shared_task, current_task

from app.config import settings
from lib.background_removal import BackgroundRemovalError, remove_background as call_provider
from lib.supabase_client import SupabaseClient
from lib.upscale import UpscaleError, upscale_image as call_upscaler
from core.models.credits import CreditFeature
from core.models.jobs import JOB_KEYS, ImageJob, JobKeys
from core.models.media import StageStatus
from core.services.credit_service import CreditService

logger = logging.getLogger(__name__)

REMOVAL_KEYS = JOB_KEYS[ImageJob.BACKGROUND_REMOVAL]
UPSCALE_KEYS = JOB_KEYS[ImageJob.UPSCALE]


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Processing..."):
    """
    Update task progress for polling.

    Args:
        current: Current step number
        total: Total steps
        message: Status message
    """
    if current_task:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100),
                "message": message,
            }
        )


# =============================================================================
# Job Bookkeeping
# =============================================================================

def _holds_claim(metadata: dict[str, Any], keys: JobKeys, task_id: str | None) -> bool:
    """True if the row still has this task's job marked processing."""
    owner = metadata.get(keys.task_id)
    if task_id is None or owner is None:
        return True
    return owner == task_id and metadata.get(keys.status) == StageStatus.PROCESSING.value


def _base_metadata(metadata: dict[str, Any], keys: JobKeys) -> dict[str, Any]:
    base = dict(metadata)
    for key in (keys.status, keys.error, keys.url):
        base.pop(key, None)
    return base


def _mark_failed(result_id: str, job: ImageJob, base: dict[str, Any], error: str) -> None:
    """Drop any stored output and record the job as failed."""
    keys = JOB_KEYS[job]
    data: dict[str, Any] = {
        "generation_metadata": {
            **base,
            keys.status: StageStatus.FAILED.value,
            keys.error: error,
        },
    }
    if job == ImageJob.BACKGROUND_REMOVAL:
        data["removed_bg_url"] = None
    SupabaseClient.update_generation_result(result_id, data)


def _store_and_charge(
    result_id: str,
    user_id: str,
    job: ImageJob,
    base: dict[str, Any],
    output_url: str,
    feature: CreditFeature,
    description: str,
) -> dict[str, Any]:
    """
    Store a finished job's output, then charge for it.

    A rejected charge rolls the output back and marks the job failed, so the
    merchant never keeps a result they did not pay for.
    """
    keys = JOB_KEYS[job]
    data: dict[str, Any] = {
        "generation_metadata": {
            **base,
            keys.url: output_url,
            keys.status: StageStatus.COMPLETED.value,
        },
    }
    if job == ImageJob.BACKGROUND_REMOVAL:
        data["removed_bg_url"] = output_url

    update_progress(2, 3, "Saving result...")
    SupabaseClient.update_generation_result(result_id, data)

    update_progress(3, 3, "Charging credits...")
    usage = CreditService.consume_for(user_id, feature, description)

    if not usage.success:
        logger.error(f"Credit deduction failed for {job.value} on {result_id}, rolling back: {usage.error}")
        _mark_failed(result_id, job, base, f"Failed to deduct credits: {usage.error}")
        return {"success": False, "error": f"Failed to deduct credits: {usage.error}"}

    logger.info(f"{job.value} finished for {result_id}: {output_url}")
    return {
        "success": True,
        "result_id": result_id,
        keys.url: output_url,
        "credits_consumed": usage.credits_consumed,
        "remaining_balance": usage.remaining_balance,
    }


# =============================================================================
# Background Removal Task
# =============================================================================

@shared_task(bind=True, name="workers.tasks.remove_background")
def remove_background(
    self,
    result_id: str,
    user_id: str,
    source_url: str,
) -> dict[str, Any]:
    """
    Remove the background of one generated image.

    The task:
    1. Calls the removal provider (retried on timeouts and 5xx)
    2. Stores the cutout URL and marks the removal completed
    3. Charges the removal price

    Any other error marks the removal failed before it propagates, so the
    image never stays locked in `processing`.

    Args:
        result_id: generation_results row ID
        user_id: The paying user
        source_url: Image to cut out

    Returns:
        Dict with:
        - success: bool
        - removed_bg_url: Cutout URL (if successful)
        - remaining_balance: Credits left (if charged)
        - already_removed: True when an earlier task stored the cutout
        - error: Error message (if failed)
    """
    logger.info(f"Removing background for {result_id}")

    update_progress(1, 3, "Removing background...")

    row = SupabaseClient.fetch_generation_result(result_id)
    if not row:
        return {"success": False, "error": f"Image not found: {result_id}"}

    metadata = dict(row.get("generation_metadata") or {})
    existing_url = row.get("removed_bg_url") or metadata.get(REMOVAL_KEYS.url)
    if existing_url or metadata.get(REMOVAL_KEYS.status) == StageStatus.COMPLETED.value:
        logger.info(f"Background already removed for {result_id}, skipping")
        return {
            "success": True,
            "result_id": result_id,
            "removed_bg_url": existing_url,
            "credits_consumed": 0,
            "already_removed": True,
        }

    if not _holds_claim(metadata, REMOVAL_KEYS, self.request.id):
        logger.info(f"Background removal for {result_id} was cancelled, skipping")
        return {"success": False, "error": "Background removal was cancelled"}

    base = _base_metadata(metadata, REMOVAL_KEYS)

    try:
        cutout_url = call_provider(source_url)
        return _store_and_charge(
            result_id,
            user_id,
            ImageJob.BACKGROUND_REMOVAL,
            base,
            cutout_url,
            CreditFeature.BACKGROUND_REMOVAL,
            f"Background removal for image {result_id}",
        )

    except BackgroundRemovalError as e:
        if e.retryable and self.request.retries < self.max_retries:
            logger.warning(f"Background removal for {result_id} failed, retrying: {e}")
            raise self.retry(exc=e, countdown=settings.BG_REMOVAL_RETRY_DELAY_SECONDS)

        logger.error(f"Background removal for {result_id} failed: {e}")
        _mark_failed(result_id, ImageJob.BACKGROUND_REMOVAL, base, e.message)
        return {"success": False, "error": e.message}

    except Exception as e:
        logger.exception(f"Background removal for {result_id} crashed: {e}")
        _mark_failed(result_id, ImageJob.BACKGROUND_REMOVAL, base, f"Unexpected error: {e}")
        raise


# =============================================================================
# Upscale Task
# =============================================================================

@shared_task(bind=True, name="workers.tasks.upscale_image")
def upscale_image(
    self,
    result_id: str,
    user_id: str,
    source_url: str,
    scale_factor: int = 2,
) -> dict[str, Any]:
    """
    Upscale one generated image on demand.

    Same steps and failure handling as remove_background; the result is
    stored as `generation_metadata.manual_upscale_url`.

    Returns:
        Dict with success, manual_upscale_url, remaining_balance or error
    """
    logger.info(f"Upscaling {result_id} x{scale_factor}")

    update_progress(1, 3, "Upscaling image...")

    row = SupabaseClient.fetch_generation_result(result_id)
    if not row:
        return {"success": False, "error": f"Image not found: {result_id}"}

    metadata = dict(row.get("generation_metadata") or {})
    if metadata.get(UPSCALE_KEYS.url):
        logger.info(f"Image {result_id} already upscaled, skipping")
        return {
            "success": True,
            "result_id": result_id,
            UPSCALE_KEYS.url: metadata[UPSCALE_KEYS.url],
            "credits_consumed": 0,
            "already_upscaled": True,
        }

    if not _holds_claim(metadata, UPSCALE_KEYS, self.request.id):
        logger.info(f"Upscale for {result_id} was cancelled, skipping")
        return {"success": False, "error": "Upscale was cancelled"}

    base = _base_metadata(metadata, UPSCALE_KEYS)

    try:
        upscaled_url = call_upscaler(source_url, scale_factor=scale_factor)
        return _store_and_charge(
            result_id,
            user_id,
            ImageJob.UPSCALE,
            base,
            upscaled_url,
            CreditFeature.UPSCALE,
            f"4K Upscale (x{scale_factor}) for image {result_id}",
        )

    except UpscaleError as e:
        if e.retryable and self.request.retries < self.max_retries:
            logger.warning(f"Upscale for {result_id} failed, retrying: {e}")
            raise self.retry(exc=e, countdown=settings.UPSCALE_RETRY_DELAY_SECONDS)

        logger.error(f"Upscale for {result_id} failed: {e}")
        _mark_failed(result_id, ImageJob.UPSCALE, base, e.message)
        return {"success": False, "error": e.message}

    except Exception as e:
        logger.exception(f"Upscale for {result_id} crashed: {e}")
        _mark_failed(result_id, ImageJob.UPSCALE, base, f"Unexpected error: {e}")
        raise
