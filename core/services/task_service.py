# =============================================================================
# core/services/task_service.py - Worker Task Ownership
# =============================================================================
# Maps a Celery task ID back to the generation result it was queued for,
# so the task endpoints only answer the shop that owns the image.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.models.jobs import JOB_KEYS, ImageJob, job_for_task
from core.models.media import StageStatus
from core.services.image_jobs import release_image_job
from core.services.project_service import ProjectService
from app.exceptions import ProjectAccessDeniedError, ProjectNotFoundError, TaskNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnedTask:
    """A task ID resolved to its job and generation result."""
    task_id: str
    job: ImageJob
    row: dict[str, Any]

    @property
    def is_current(self) -> bool:
        """True while the row still shows this task as processing."""
        keys = JOB_KEYS[self.job]
        metadata = self.row.get("generation_metadata") or {}
        return (
            metadata.get(keys.task_id) == self.task_id
            and metadata.get(keys.status) == StageStatus.PROCESSING.value
        )


class TaskService:
    """Service for resolving and cancelling worker tasks."""

    @staticmethod
    def get_owned_task(task_id: str, user_id: UUID | str) -> OwnedTask:
        """
        Resolve a task ID for the calling user.

        Unknown IDs and tasks queued by another shop are both reported as
        not found.

        Raises:
            TaskNotFoundError
        """
        task_keys = [keys.task_id for keys in JOB_KEYS.values()]
        row = SupabaseClient.fetch_result_by_task(task_id, task_keys)
        if not row:
            raise TaskNotFoundError(task_id)

        try:
            ProjectService.get_project(row["project_id"], user_id=user_id)
        except (ProjectNotFoundError, ProjectAccessDeniedError):
            logger.warning(f"User {user_id} asked for task {task_id} it does not own")
            raise TaskNotFoundError(task_id)

        job = job_for_task(row.get("generation_metadata") or {}, task_id)
        if job is None:
            raise TaskNotFoundError(task_id)

        return OwnedTask(task_id, job, row)

    @staticmethod
    def release(task: OwnedTask) -> None:
        """Undo the processing mark of a revoked task, if it still holds it."""
        if task.is_current:
            release_image_job(task.job, task.row)
