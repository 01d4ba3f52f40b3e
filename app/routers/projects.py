# =============================================================================
# app/routers/projects.py - Project Endpoints
# =============================================================================
# Results gallery (with the display decision per image), rename and delete.
# All endpoints require an identified shop.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from app.auth import ShopUser, get_current_shop_user, get_viewer_tier
from core.models.media import Tier
from core.models.pipeline import ExecutionSummary
from core.models.project import ProjectRenameRequest, ProjectResponse, ProjectResultsResponse
from core.services.pipeline_service import PipelineService
from core.services.project_service import ProjectService

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class ProjectRenameResponse(BaseModel):
    """Response when renaming a project."""
    success: bool = True
    project: ProjectResponse


class ProjectDeleteResponse(BaseModel):
    """Response when deleting a project."""
    success: bool = True
    project_id: str
    message: str = Field(default="Project deleted successfully")


class ActiveExecutionsResponse(BaseModel):
    """Executions of a project that are still running."""
    project_id: str
    executions: list[ExecutionSummary] = Field(default_factory=list)
    count: int = 0


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: ShopUser = Depends(get_current_shop_user),
):
    """Get project details. The shop must own the project."""
    project = ProjectService.get_project(project_id, user_id=user.id)
    return ProjectResponse(**project)


@router.get("/{project_id}/results", response_model=ProjectResultsResponse)
async def get_project_results(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: ShopUser = Depends(get_current_shop_user),
    tier: Tier = Depends(get_viewer_tier),
):
    """
    List the project's generated images grouped by pose.

    Each image carries its pipeline snapshot and the display decision for
    the shop's tier: quality badge, preview URL, enabled actions, progress
    label, failed stages and download options. Clients poll this endpoint
    while images are processing.
    """
    return ProjectService.get_results(project_id, user_id=user.id, tier=tier)


@router.get("/{project_id}/executions", response_model=ActiveExecutionsResponse)
async def get_project_active_executions(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: ShopUser = Depends(get_current_shop_user),
):
    """List the project's pipeline executions that are still processing."""
    project = ProjectService.get_project(project_id, user_id=user.id)
    executions = PipelineService.get_project_active_executions(project["id"])

    return ActiveExecutionsResponse(
        project_id=str(project["id"]),
        executions=executions,
        count=len(executions),
    )


@router.patch("/{project_id}", response_model=ProjectRenameResponse)
async def rename_project(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    request: ProjectRenameRequest,
    user: ShopUser = Depends(get_current_shop_user),
):
    """
    Rename a project.

    The name is trimmed; a blank name is rejected with 422.
    """
    project = ProjectService.rename_project(project_id, user_id=user.id, name=request.name)
    return ProjectRenameResponse(project=ProjectResponse(**project))


@router.delete("/{project_id}", response_model=ProjectDeleteResponse)
async def delete_project(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: ShopUser = Depends(get_current_shop_user),
):
    """
    Delete a project with all its generated images and executions.

    This cannot be undone.
    """
    ProjectService.delete_project(project_id, user_id=user.id)
    return ProjectDeleteResponse(project_id=str(project_id))
