# =============================================================================
# core/services/pipeline_service.py - Pipeline Execution Status
# =============================================================================
# Read-side of `pipeline_executions`: single execution status with its pose
# results, batch polling and a project's active executions. Executions are
# created and driven by the generation pipeline, not by this API.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.pipeline import (
    ExecutionState,
    ExecutionStatusResponse,
    ExecutionSummary,
    MultiStatusResponse,
    PoseStatus,
)
from app.exceptions import ExecutionAccessDeniedError, ExecutionNotFoundError

logger = logging.getLogger(__name__)

_SUMMARY_COLUMNS = (
    "id, user_id, project_id, status, progress, current_step, "
    "subscription_tier, credits_used, started_at, completed_at, error_message"
)


def _summary_from_row(row: dict[str, Any]) -> ExecutionSummary:
    return ExecutionSummary(
        execution_id=str(row["id"]),
        project_id=str(row["project_id"]) if row.get("project_id") else None,
        status=row.get("status") or ExecutionState.PROCESSING.value,
        progress=row.get("progress") or 0,
        current_step=row.get("current_step"),
        tier=row.get("subscription_tier"),
        credits_used=row.get("credits_used") or 0,
        started_at=row.get("started_at"),
        completed_at=row.get("completed_at"),
        error_message=row.get("error_message"),
    )


class PipelineService:
    """Service for polling pipeline executions."""

    @staticmethod
    def get_execution(
        execution_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Get an execution row, optionally verifying ownership.

        Raises:
            ExecutionNotFoundError: If execution doesn't exist
            ExecutionAccessDeniedError: If another user owns it
        """
        execution = SupabaseClient.fetch_execution(execution_id)

        if not execution:
            raise ExecutionNotFoundError(str(execution_id))

        if user_id and str(execution.get("user_id")) != str(user_id):
            logger.warning(f"User {user_id} denied access to execution {execution_id}")
            raise ExecutionAccessDeniedError(str(execution_id))

        return execution

    @staticmethod
    def get_execution_status(
        execution_id: str | UUID,
        user_id: UUID | str,
    ) -> ExecutionStatusResponse:
        """
        Status of one execution with a per-pose breakdown.

        A pose result belongs to the execution when its `generation_config`
        carries the execution id. Completed and failed counts come from each
        result's `generation_metadata.status`.
        """
        execution = PipelineService.get_execution(execution_id, user_id=user_id)
        execution_id_str = str(execution["id"])
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("generation_results")
                .select("id, pose_id, pose_name, result_image_url, generation_metadata")
                .eq("project_id", str(execution["project_id"]))
                .contains("generation_config", {"pipeline_execution_id": execution_id_str})
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch execution results: {e}",
                code="FETCH_EXECUTION_RESULTS_FAILED",
                details={"execution_id": execution_id_str}
            )

        poses = []
        for row in response.data or []:
            metadata = row.get("generation_metadata") or {}
            poses.append(PoseStatus(
                result_id=str(row["id"]),
                pose_id=row.get("pose_id"),
                pose_name=row.get("pose_name"),
                status=metadata.get("status") or "processing",
                final_image_url=row.get("result_image_url"),
                step_results=metadata.get("step_results") or {},
                error=metadata.get("error_message"),
            ))

        completed = sum(1 for p in poses if p.status == "completed")
        failed = sum(1 for p in poses if p.status == "failed")
        logger.debug(
            f"Execution {execution_id_str}: {execution.get('status')} "
            f"{completed}/{len(poses)} completed"
        )

        return ExecutionStatusResponse(
            execution_id=execution_id_str,
            project_id=str(execution["project_id"]) if execution.get("project_id") else None,
            status=execution.get("status") or ExecutionState.PROCESSING.value,
            total_poses=len(poses),
            completed_poses=completed,
            failed_poses=failed,
            generation_results=poses,
        )

    @staticmethod
    def get_multiple_statuses(
        execution_ids: list[str],
        user_id: UUID | str,
    ) -> MultiStatusResponse:
        """
        Batch status for many executions in one query.

        Executions owned by other users are left out of the response.
        Overall progress is the rounded mean of the returned executions.
        """
        client = SupabaseClient.get_client()
        unique_ids = list(dict.fromkeys(execution_ids))

        try:
            response = (
                client.table("pipeline_executions")
                .select(_SUMMARY_COLUMNS)
                .in_("id", unique_ids)
                .eq("user_id", str(user_id))
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch execution statuses: {e}",
                code="FETCH_EXECUTIONS_FAILED",
                details={"count": len(unique_ids)}
            )

        executions = [_summary_from_row(row) for row in response.data or []]

        def count(state: ExecutionState) -> int:
            return sum(1 for e in executions if e.status == state.value)

        overall = 0
        if executions:
            overall = round(sum(e.progress for e in executions) / len(executions))

        return MultiStatusResponse(
            executions=executions,
            total_active=count(ExecutionState.PROCESSING),
            total_completed=count(ExecutionState.COMPLETED),
            total_failed=count(ExecutionState.FAILED),
            overall_progress=overall,
            timestamp=datetime.now(timezone.utc),
        )

    @staticmethod
    def get_project_active_executions(project_id: str | UUID) -> list[ExecutionSummary]:
        """Executions of a project that are still processing, newest first."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("pipeline_executions")
                .select(_SUMMARY_COLUMNS)
                .eq("project_id", str(project_id))
                .eq("status", ExecutionState.PROCESSING.value)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch project executions: {e}",
                code="FETCH_EXECUTIONS_FAILED",
                details={"project_id": str(project_id)}
            )

        return [_summary_from_row(row) for row in response.data or []]
