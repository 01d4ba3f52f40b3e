# =============================================================================
# core/models/pipeline.py - Pipeline Execution Schemas
# =============================================================================
# Read-side views of `pipeline_executions` used by status polling:
# - ExecutionState: Lifecycle of one execution
# - PoseStatus / ExecutionStatusResponse: Single-execution polling
# - ExecutionSummary / MultiStatusResponse: Batch polling
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# Batch polling is capped so one request stays a single cheap query
MAX_EXECUTIONS_PER_REQUEST = 50


class ExecutionState(str, Enum):
    """Lifecycle of one pipeline execution."""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PoseStatus(BaseModel):
    """Status of the result generated for one pose."""
    result_id: str
    pose_id: int | str | None = None
    pose_name: str | None = None
    status: str = "processing"
    final_image_url: str | None = None
    step_results: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class ExecutionStatusResponse(BaseModel):
    """Response for GET /pipeline/status/{execution_id}."""
    execution_id: str
    project_id: str | None = None
    status: str
    total_poses: int = 0
    completed_poses: int = 0
    failed_poses: int = 0
    generation_results: list[PoseStatus] = Field(default_factory=list)


class ExecutionSummary(BaseModel):
    """One execution in a batch status response."""
    execution_id: str
    project_id: str | None = None
    status: str
    progress: int = Field(default=0, ge=0, le=100)
    current_step: str | None = None
    tier: str | None = None
    credits_used: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None


class MultiStatusRequest(BaseModel):
    """Request body for POST /pipeline/multi-status."""
    execution_ids: list[str] = Field(
        ...,
        min_length=1,
        max_length=MAX_EXECUTIONS_PER_REQUEST,
        description="Execution IDs to poll"
    )


class MultiStatusResponse(BaseModel):
    """Response for POST /pipeline/multi-status."""
    executions: list[ExecutionSummary] = Field(default_factory=list)
    total_active: int = 0
    total_completed: int = 0
    total_failed: int = 0
    overall_progress: int = 0
    timestamp: datetime
