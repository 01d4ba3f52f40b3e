# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# The Celery app that runs image post-processing for the API.
#
# Usage:
#   # Start a worker for both queues
#   celery -A workers.celery_app worker --loglevel=info -Q default,image_tasks
#
#   # Check that workers respond
#   celery -A workers.celery_app inspect ping
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun, task_retry
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _redact(url: str) -> str:
    """Drop credentials from a broker URL before logging it."""
    return url.split("@")[-1] if "@" in url else url


def create_celery_app() -> Celery:
    """Build the worker app from CeleryConfig and register workers.tasks."""
    from workers.config import CeleryConfig

    app = Celery("trayve_worker", include=["workers.tasks"])
    app.config_from_object(CeleryConfig)

    logger.info(f"Celery app created with broker: {_redact(CeleryConfig.broker_url)}")
    return app


celery_app = create_celery_app()


# =============================================================================
# Task Lifecycle Logging
# =============================================================================

@task_prerun.connect
def log_task_start(sender=None, task_id=None, task=None, kwargs=None, **extra):
    result_id = (kwargs or {}).get("result_id")
    suffix = f" for image {result_id}" if result_id else ""
    logger.info(f"Task started: {task.name} [{task_id}]{suffix}")


@task_postrun.connect
def log_task_end(sender=None, task_id=None, task=None, state=None, **extra):
    logger.info(f"Task finished: {task.name} [{task_id}] - State: {state}")


@task_retry.connect
def log_task_retry(sender=None, request=None, reason=None, **extra):
    logger.warning(f"Task retrying: {sender.name} [{request.id}] - Reason: {reason}")


@task_failure.connect
def log_task_failure(sender=None, task_id=None, exception=None, **extra):
    logger.error(f"Task failed: {sender.name} [{task_id}] - Error: {exception}")


if __name__ == "__main__":
    celery_app.start()
