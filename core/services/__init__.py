# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .project_service import ProjectService
from .credit_service import CreditService
from .subscription_service import SubscriptionService
from .pipeline_service import PipelineService
from .background_service import BackgroundRemovalService
from .upscale_service import UpscaleService
from .task_service import TaskService
from .model_service import ModelService

__all__ = [
    "ProjectService",
    "CreditService",
    "SubscriptionService",
    "PipelineService",
    "BackgroundRemovalService",
    "UpscaleService",
    "TaskService",
    "ModelService",
]
