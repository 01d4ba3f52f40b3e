# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - media.py: MediaRecord pipeline snapshot, stages, tiers
# - display.py: Derived DisplayDecision (badge, URL, actions)
# - project.py: Projects and grouped results
# - credits.py: Credit ledger schemas and price list
# - subscription.py: Stored subscription rows
# - pipeline.py: Execution status polling
# - removal.py: Background removal requests
# - upscale.py: On-demand upscale requests
# - jobs.py: Metadata keys of the per-image worker jobs
# - catalog.py: Base models, poses and access
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Media Models - Pipeline snapshots
# -----------------------------------------------------------------------------
from .media import (
    MediaRecord,
    Stage,
    StageState,
    StageStatus,
    Tier,
    ViewerContext,
)

# -----------------------------------------------------------------------------
# Display Models - Derived views
# -----------------------------------------------------------------------------
from .display import (
    ActionState,
    BadgeStatus,
    DisplayDecision,
    DownloadOption,
)

# -----------------------------------------------------------------------------
# Project Models
# -----------------------------------------------------------------------------
from .project import (
    PoseResult,
    ProjectRenameRequest,
    ProjectResponse,
    ProjectResultsResponse,
    ResultImage,
)

# -----------------------------------------------------------------------------
# Credit Models
# -----------------------------------------------------------------------------
from .credits import (
    CREDIT_COSTS,
    CreditBalance,
    CreditDeductRequest,
    CreditFeature,
    CreditTransaction,
    CreditUsageResult,
)

# -----------------------------------------------------------------------------
# Subscription Models
# -----------------------------------------------------------------------------
from .subscription import (
    CurrentSubscriptionResponse,
    SubscriptionStatus,
    UserSubscription,
)

# -----------------------------------------------------------------------------
# Pipeline Models - Execution status polling
# -----------------------------------------------------------------------------
from .pipeline import (
    MAX_EXECUTIONS_PER_REQUEST,
    ExecutionState,
    ExecutionStatusResponse,
    ExecutionSummary,
    MultiStatusRequest,
    MultiStatusResponse,
    PoseStatus,
)

# -----------------------------------------------------------------------------
# Background Removal Models
# -----------------------------------------------------------------------------
from .removal import BackgroundRemovalResponse, RemovalState

# -----------------------------------------------------------------------------
# Upscale & Job Models
# -----------------------------------------------------------------------------
from .upscale import UpscaleRequest, UpscaleResponse, UpscaleState
from .jobs import JOB_KEYS, ImageJob, JobKeys, job_for_task

# -----------------------------------------------------------------------------
# Catalog Models
# -----------------------------------------------------------------------------
from .catalog import (
    BaseModelInfo,
    CatalogModel,
    ModelAccessInfo,
    ModelListResponse,
    ModelPose,
)

__all__ = [
    # Media
    "MediaRecord",
    "Stage",
    "StageState",
    "StageStatus",
    "Tier",
    "ViewerContext",
    # Display
    "ActionState",
    "BadgeStatus",
    "DisplayDecision",
    "DownloadOption",
    # Project
    "PoseResult",
    "ProjectRenameRequest",
    "ProjectResponse",
    "ProjectResultsResponse",
    "ResultImage",
    # Credits
    "CREDIT_COSTS",
    "CreditBalance",
    "CreditDeductRequest",
    "CreditFeature",
    "CreditTransaction",
    "CreditUsageResult",
    # Subscription
    "CurrentSubscriptionResponse",
    "SubscriptionStatus",
    "UserSubscription",
    # Pipeline
    "MAX_EXECUTIONS_PER_REQUEST",
    "ExecutionState",
    "ExecutionStatusResponse",
    "ExecutionSummary",
    "MultiStatusRequest",
    "MultiStatusResponse",
    "PoseStatus",
    # Background removal
    "BackgroundRemovalResponse",
    "RemovalState",
    # Upscale & jobs
    "UpscaleRequest",
    "UpscaleResponse",
    "UpscaleState",
    "JOB_KEYS",
    "ImageJob",
    "JobKeys",
    "job_for_task",
    # Catalog
    "BaseModelInfo",
    "CatalogModel",
    "ModelAccessInfo",
    "ModelListResponse",
    "ModelPose",
]
