# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Broker, queues and limits for the image post-processing workers. Applied
# with `celery_app.config_from_object(CeleryConfig)`.
#
# Queues:
# - image_tasks: Provider calls (background removal, upscale); slow, network bound
# - default: Any task without a route
# =============================================================================

from app.config import settings

IMAGE_QUEUE = "image_tasks"
DEFAULT_QUEUE = "default"


class CeleryConfig:
    """Celery settings for the Trayve workers."""

    # Redis serves as both broker and result store
    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL
    result_expires = settings.TASK_RESULT_TTL_SECONDS

    # Results must be JSON so /tasks/{id} can return them as-is
    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # Ack after the task body so a crashed worker redelivers the message
    task_acks_late = True
    worker_prefetch_multiplier = 1

    # Provider timeout plus headroom for the database writes
    task_soft_time_limit = int(settings.BG_REMOVAL_TIMEOUT_SECONDS) + 60
    task_time_limit = int(settings.BG_REMOVAL_TIMEOUT_SECONDS) + 120

    # Running tasks report STARTED, which DELETE /tasks/{id} will not revoke
    task_track_started = True

    task_default_queue = DEFAULT_QUEUE
    task_queues = {
        DEFAULT_QUEUE: {"exchange": DEFAULT_QUEUE, "routing_key": DEFAULT_QUEUE},
        IMAGE_QUEUE: {"exchange": IMAGE_QUEUE, "routing_key": IMAGE_QUEUE},
    }
    task_routes = {
        "workers.tasks.remove_background": {"queue": IMAGE_QUEUE},
        "workers.tasks.upscale_image": {"queue": IMAGE_QUEUE},
    }

    task_annotations = {
        "workers.tasks.remove_background": {
            "max_retries": settings.BG_REMOVAL_MAX_RETRIES,
            "default_retry_delay": settings.BG_REMOVAL_RETRY_DELAY_SECONDS,
        },
        "workers.tasks.upscale_image": {
            "max_retries": settings.UPSCALE_MAX_RETRIES,
            "default_retry_delay": settings.UPSCALE_RETRY_DELAY_SECONDS,
            # Polling can take the whole prediction timeout plus the create call
            "soft_time_limit": int(settings.UPSCALE_TIMEOUT_SECONDS) + 120,
            "time_limit": int(settings.UPSCALE_TIMEOUT_SECONDS) + 180,
        },
    }

    # Task events for Flower
    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
