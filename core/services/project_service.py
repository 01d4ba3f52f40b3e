# =============================================================================
# core/services/project_service.py - Project Business Logic
# =============================================================================
# Handles project lookup, ownership checks, result listing (with the display
# decision for each image), renaming and deletion.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.display import resolve_display
from core.models.jobs import JOB_KEYS, ImageJob
from core.models.media import MediaRecord, Tier
from core.models.project import PoseResult, ProjectResultsResponse, ResultImage
from app.exceptions import ProjectNotFoundError, ProjectAccessDeniedError, ResultNotFoundError

logger = logging.getLogger(__name__)

UPSCALE_KEYS = JOB_KEYS[ImageJob.UPSCALE]


class ProjectService:
    """
    Service for generation project operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def get_project(
        project_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Get a project by ID.

        Args:
            project_id: The project UUID
            user_id: If provided, verify the project belongs to this user

        Returns:
            Project dict

        Raises:
            ProjectNotFoundError: If project doesn't exist
            ProjectAccessDeniedError: If another user owns it
        """
        project = SupabaseClient.fetch_project(project_id)

        if not project:
            raise ProjectNotFoundError(str(project_id))

        if user_id and str(project.get("user_id")) != str(user_id):
            logger.warning(f"User {user_id} denied access to project {project_id}")
            raise ProjectAccessDeniedError(str(project_id))

        return project

    @staticmethod
    def get_owned_result(
        result_id: str | UUID,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Fetch a generation result and verify the caller owns its project.

        Raises:
            ResultNotFoundError: If the result doesn't exist
            ProjectAccessDeniedError: If another user owns the project
        """
        row = SupabaseClient.fetch_generation_result(result_id)
        if not row:
            raise ResultNotFoundError(str(result_id))

        ProjectService.get_project(row["project_id"], user_id=user_id)
        return row

    @staticmethod
    def get_results(
        project_id: str | UUID,
        user_id: UUID | str,
        tier: Tier,
    ) -> ProjectResultsResponse:
        """
        List a project's generated images with their display decisions.

        Results are grouped by pose in generation order. Each image carries
        the badge, preview URL and action state for the viewer's tier. A
        removal already running for an image disables its remove-background
        action.

        Args:
            project_id: The project UUID
            user_id: Owner of the project
            tier: Viewer tier

        Returns:
            ProjectResultsResponse

        Raises:
            ProjectNotFoundError / ProjectAccessDeniedError
        """
        project = ProjectService.get_project(project_id, user_id=user_id)
        rows = SupabaseClient.fetch_generation_results(project["id"])

        clothing_url = project.get("clothing_image_url")
        project_name = project.get("name") or "image"

        groups: dict[Any, PoseResult] = {}
        for index, row in enumerate(rows):
            record = MediaRecord.from_generation_result(row)
            display = resolve_display(
                record,
                tier,
                fallback_clothing_image_url=clothing_url,
                is_removing_now=record.background_removal.is_processing,
                project_name=project_name,
                index=index,
            )

            pose_key = row.get("pose_id") if row.get("pose_id") is not None else row["id"]
            group = groups.get(pose_key)
            if group is None:
                pose = row.get("poses") or {}
                group = PoseResult(
                    pose_id=row.get("pose_id"),
                    pose_name=row.get("pose_name") or pose.get("name") or "Unknown Pose",
                )
                groups[pose_key] = group

            metadata = row.get("generation_metadata") or {}
            group.images.append(ResultImage(
                record=record,
                display=display,
                upscaled_url=metadata.get(UPSCALE_KEYS.url),
                upscale_status=metadata.get(UPSCALE_KEYS.status),
                created_at=row.get("created_at"),
            ))

        results = list(groups.values())
        logger.info(f"Resolved {len(rows)} results in {len(results)} poses for project {project['id']}")

        return ProjectResultsResponse(
            project_id=str(project["id"]),
            tier=tier,
            results=results,
            total=len(results),
        )

    @staticmethod
    def rename_project(
        project_id: str | UUID,
        user_id: UUID | str,
        name: str,
    ) -> dict[str, Any]:
        """
        Rename a project.

        Args:
            project_id: The project UUID
            user_id: Owner of the project
            name: New name (already trimmed and validated)

        Returns:
            Updated project dict (id, name, created_at)
        """
        project = ProjectService.get_project(project_id, user_id=user_id)
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("user_generation_projects")
                .update({"name": name})
                .eq("id", str(project["id"]))
                .eq("user_id", str(user_id))
                .execute()
            )

            if response.data:
                logger.info(f"Renamed project {project['id']} to {name!r}")
                return response.data[0]

            raise ProjectNotFoundError(str(project_id))

        except ProjectNotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to rename project: {e}")
            raise SupabaseClientError(
                message=f"Failed to rename project: {e}",
                code="RENAME_PROJECT_FAILED",
                details={"project_id": str(project_id)}
            )

    @staticmethod
    def delete_project(
        project_id: str | UUID,
        user_id: UUID | str,
    ) -> None:
        """
        Delete a project and everything generated for it.

        Child rows go first: generation results, then pipeline executions,
        then the project itself. Failing to delete executions is logged and
        does not stop the deletion.
        """
        project = ProjectService.get_project(project_id, user_id=user_id)
        project_id_str = str(project["id"])
        client = SupabaseClient.get_client()

        try:
            client.table("generation_results").delete().eq("project_id", project_id_str).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete generation results: {e}",
                code="DELETE_RESULTS_FAILED",
                details={"project_id": project_id_str}
            )

        try:
            client.table("pipeline_executions").delete().eq("project_id", project_id_str).execute()
        except Exception as e:
            logger.warning(f"Could not delete executions for project {project_id_str}: {e}")

        try:
            client.table("user_generation_projects").delete().eq("id", project_id_str).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete project: {e}",
                code="DELETE_PROJECT_FAILED",
                details={"project_id": project_id_str}
            )

        logger.info(f"Deleted project {project_id_str}")
