# =============================================================================
# workers/ - Image Post-Processing Workers
# =============================================================================
# Celery app and tasks that run outside the request cycle:
# - celery_app.py: The Celery app and task lifecycle logging
# - config.py: Broker, queues, limits and retry policy
# - tasks.py: remove_background and upscale_image (provider call, store,
#   charge)
#
# The API queues them through core.services.image_jobs.queue_image_job,
# which records the task ID on the image before submitting.
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
