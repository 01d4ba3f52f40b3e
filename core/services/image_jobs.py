# =============================================================================
# core/services/image_jobs.py - Claiming and Queueing Image Jobs
# =============================================================================
# Shared by background removal and on-demand upscale:
# - queue_image_job: claim the row (job status -> processing, task ID stored)
#   and submit the worker task under that task ID
# - release_image_job: drop the processing mark of a cancelled job
#
# The task ID stays in generation_metadata after the job ends so the task
# endpoints can resolve which shop owns it.
# =============================================================================

import logging
from typing import Any
from uuid import uuid4

from lib.supabase_client import SupabaseClient
from core.models.jobs import JOB_KEYS, ImageJob
from core.models.media import StageStatus
from app.exceptions import TaskQueueUnavailableError

logger = logging.getLogger(__name__)


def queue_image_job(
    job: ImageJob,
    row: dict[str, Any],
    task: Any,
    task_kwargs: dict[str, Any],
) -> str | None:
    """
    Claim a generation result for a job and queue its worker task.

    Args:
        job: Which job is starting
        row: The generation_results row as read by the caller
        task: Celery task to submit
        task_kwargs: Keyword arguments for the task

    Returns:
        The task ID, or None if the job is already processing for this row

    Raises:
        TaskQueueUnavailableError: If the broker rejects the task (the claim
            is undone first)
    """
    keys = JOB_KEYS[job]
    task_id = str(uuid4())
    metadata = dict(row.get("generation_metadata") or {})

    claimed = SupabaseClient.claim_generation_result(row["id"], keys.status, {
        **metadata,
        keys.status: StageStatus.PROCESSING.value,
        keys.task_id: task_id,
    })
    if claimed is None:
        logger.info(f"{job.value} already running for {row['id']}")
        return None

    try:
        task.apply_async(kwargs=task_kwargs, task_id=task_id)
    except Exception as e:
        logger.exception(f"Failed to queue {job.value} for {row['id']}: {e}")
        SupabaseClient.update_generation_result(row["id"], {"generation_metadata": metadata})
        raise TaskQueueUnavailableError(job.value.replace("_", " "), str(e))

    logger.info(f"Queued {job.value} for {row['id']} [{task_id}]")
    return task_id


def release_image_job(job: ImageJob, row: dict[str, Any]) -> None:
    """Clear the processing mark and error of a job that will not run."""
    keys = JOB_KEYS[job]
    metadata = dict(row.get("generation_metadata") or {})
    metadata.pop(keys.status, None)
    metadata.pop(keys.error, None)

    SupabaseClient.update_generation_result(row["id"], {"generation_metadata": metadata})
    logger.info(f"Released {job.value} on {row['id']}")
