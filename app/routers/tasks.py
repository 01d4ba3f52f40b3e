# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Status and cancellation of image worker tasks (background removal,
# upscale). A task is visible only to the shop that owns the image it was
# queued for.
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel

from app.auth import ShopUser, get_current_shop_user
from core.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter()

# Progress and message shown for each Celery state
_STATE_DEFAULTS = {
    "PENDING": (0, "Waiting in queue..."),
    "STARTED": (0, "Starting..."),
    "RETRY": (0, "Retrying..."),
    "SUCCESS": (100, "Complete"),
    "FAILURE": (None, "Failed"),
    "REVOKED": (None, "Cancelled"),
}

# States in which the task has not started running
_CANCELLABLE_STATES = {"PENDING", "RETRY"}


# =============================================================================
# Response Models
# =============================================================================

class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    job: str | None = None
    image_id: str | None = None
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict[str, Any] | None = None
    error: str | None = None


class TaskCancelResponse(BaseModel):
    """Response model for task cancellation."""
    task_id: str
    cancelled: bool
    message: str


def _async_result(task_id: str):
    from workers.celery_app import celery_app

    return celery_app.AsyncResult(task_id)


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: ShopUser = Depends(get_current_shop_user),
):
    """
    Get the status of a background task.

    States:
    - PENDING: Task is waiting in queue
    - STARTED / RETRY: Task is running or waiting to retry the provider
    - PROGRESS: Task is running (includes progress percentage)
    - SUCCESS: Task finished; `result.success` tells whether the job
      went through
    - FAILURE: Task crashed
    - REVOKED: Task was cancelled

    Unknown IDs and tasks of other shops return 404 TASK_NOT_FOUND.
    """
    task = TaskService.get_owned_task(task_id, user.id)

    try:
        result = _async_result(task_id)
        status = result.status
    except Exception as e:
        logger.error(f"Error getting task status: {e}")
        raise HTTPException(status_code=503, detail=f"Failed to get task status: {e}")

    response = TaskStatusResponse(
        task_id=task_id,
        job=task.job.value,
        image_id=str(task.row["id"]),
        status=status,
    )

    if status == "PROGRESS":
        info = result.info or {}
        response.progress = info.get("percent", 0)
        response.message = info.get("message", "Processing...")
        return response

    response.progress, response.message = _STATE_DEFAULTS.get(status, (None, None))

    if status == "SUCCESS" and isinstance(result.result, dict):
        response.result = result.result
        if not result.result.get("success", True):
            response.error = result.result.get("error")
    elif status == "FAILURE":
        response.error = str(result.result) if result.result else "Unknown error"

    return response


@router.delete("/{task_id}", response_model=TaskCancelResponse)
async def cancel_task(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: ShopUser = Depends(get_current_shop_user),
):
    """
    Cancel a task that has not started running.

    The image's processing mark is released, so the action can be requested
    again. Running and finished tasks are not cancelled.
    """
    task = TaskService.get_owned_task(task_id, user.id)

    try:
        result = _async_result(task_id)
        status = result.status

        if status not in _CANCELLABLE_STATES:
            return TaskCancelResponse(
                task_id=task_id,
                cancelled=False,
                message=f"Task already {status.lower()}, cannot cancel",
            )

        result.revoke()

    except Exception as e:
        logger.error(f"Error cancelling task: {e}")
        raise HTTPException(status_code=503, detail=f"Failed to cancel task: {e}")

    TaskService.release(task)

    logger.info(f"Task {task_id} ({task.job.value}) cancelled by {user.shop_domain}")
    return TaskCancelResponse(task_id=task_id, cancelled=True, message="Task cancelled")
