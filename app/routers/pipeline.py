# =============================================================================
# app/routers/pipeline.py - Pipeline Status Endpoints
# =============================================================================
# Polling endpoints for generation pipeline executions.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import ShopUser, get_current_shop_user
from core.models.pipeline import (
    ExecutionStatusResponse,
    MultiStatusRequest,
    MultiStatusResponse,
)
from core.services.pipeline_service import PipelineService

router = APIRouter()


@router.get("/status/{execution_id}", response_model=ExecutionStatusResponse)
async def get_execution_status(
    execution_id: Annotated[UUID, Path(description="Pipeline execution UUID")],
    user: ShopUser = Depends(get_current_shop_user),
):
    """
    Get the status of one execution with a per-pose breakdown.

    The shop must own the execution.
    """
    return PipelineService.get_execution_status(execution_id, user_id=user.id)


@router.post("/multi-status", response_model=MultiStatusResponse)
async def get_multiple_statuses(
    request: MultiStatusRequest,
    user: ShopUser = Depends(get_current_shop_user),
):
    """
    Poll up to 50 executions in one request.

    Unknown IDs and executions of other shops are omitted from the result.
    """
    return PipelineService.get_multiple_statuses(request.execution_ids, user_id=user.id)
