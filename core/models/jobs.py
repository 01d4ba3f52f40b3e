# =============================================================================
# core/models/jobs.py - Image Post-Processing Jobs
# =============================================================================
# On-demand work queued for one generated image (background removal, 4K
# upscale). Each job keeps its state in `generation_metadata` under its own
# keys; the API, the workers and the task endpoints all read them from here.
# =============================================================================

from dataclasses import dataclass
from enum import Enum


class ImageJob(str, Enum):
    """Worker jobs that post-process a generated image."""
    BACKGROUND_REMOVAL = "background_removal"
    UPSCALE = "upscale"


@dataclass(frozen=True)
class JobKeys:
    """`generation_metadata` keys owned by one job."""
    status: str
    error: str
    task_id: str
    url: str


JOB_KEYS: dict[ImageJob, JobKeys] = {
    ImageJob.BACKGROUND_REMOVAL: JobKeys(
        status="bg_removal_status",
        error="bg_removal_error",
        task_id="bg_removal_task_id",
        url="removed_bg_url",
    ),
    # upscale_status is the pipeline's own 4K stage
    ImageJob.UPSCALE: JobKeys(
        status="manual_upscale_status",
        error="manual_upscale_error",
        task_id="manual_upscale_task_id",
        url="manual_upscale_url",
    ),
}


def job_for_task(metadata: dict, task_id: str) -> ImageJob | None:
    """The job whose task ID in `metadata` is `task_id`, if any."""
    for job, keys in JOB_KEYS.items():
        if metadata.get(keys.task_id) == task_id:
            return job
    return None
