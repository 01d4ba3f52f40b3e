# =============================================================================
# app/exceptions.py - API Errors
# =============================================================================
# Error types raised by services and dependencies, and the handlers that
# turn them into `{detail, code, suggestion?, details?}` JSON bodies.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class TrayveException(Exception):
    """
    Base exception for the Trayve API.

    Carries the HTTP status and a stable `code` the embedded app switches
    on (e.g. UPGRADE_REQUIRED opens the plan picker).
    """

    def __init__(
        self,
        message: str,
        code: str = "TRAYVE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Shop / User Exceptions
# =============================================================================

class ShopNotIdentifiedError(TrayveException):
    """Raised when a request carries no shop domain."""

    def __init__(self, header: str):
        super().__init__(
            message="Request is not associated with a shop",
            code="SHOP_NOT_IDENTIFIED",
            status_code=401,
            suggestion=f"Send requests through the app proxy so the {header} header is set",
            details={"header": header}
        )


class ShopUserNotFoundError(TrayveException):
    """Raised when no Trayve user is linked to a shop."""

    def __init__(self, shop: str):
        super().__init__(
            message=f"User not found for shop: {shop}",
            code="USER_NOT_FOUND",
            status_code=404,
            suggestion="Reinstall the app to link the shop to a Trayve account",
            details={"shop": shop}
        )


# =============================================================================
# Project Exceptions
# =============================================================================

class ProjectNotFoundError(TrayveException):
    """Raised when a project ID doesn't exist."""

    def __init__(self, project_id: str):
        super().__init__(
            message=f"Project not found: {project_id}",
            code="PROJECT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the project_id is correct and the project hasn't been deleted",
            details={"project_id": project_id}
        )


class ProjectAccessDeniedError(TrayveException):
    """Raised when a project belongs to another user."""

    def __init__(self, project_id: str):
        super().__init__(
            message=f"Access denied to project: {project_id}",
            code="PROJECT_ACCESS_DENIED",
            status_code=403,
            suggestion="Only the shop that created a project can view or change it",
            details={"project_id": project_id}
        )


class ResultNotFoundError(TrayveException):
    """Raised when a generation result doesn't exist."""

    def __init__(self, result_id: str):
        super().__init__(
            message=f"Image not found: {result_id}",
            code="IMAGE_NOT_FOUND",
            status_code=404,
            suggestion="Check that the image_id is correct",
            details={"image_id": result_id}
        )


# =============================================================================
# Pipeline Exceptions
# =============================================================================

class ExecutionNotFoundError(TrayveException):
    """Raised when a pipeline execution doesn't exist."""

    def __init__(self, execution_id: str):
        super().__init__(
            message=f"Execution not found: {execution_id}",
            code="EXECUTION_NOT_FOUND",
            status_code=404,
            suggestion="Check that the execution_id is correct",
            details={"execution_id": execution_id}
        )


class ExecutionAccessDeniedError(TrayveException):
    """Raised when an execution belongs to another user."""

    def __init__(self, execution_id: str):
        super().__init__(
            message=f"Access denied to execution: {execution_id}",
            code="EXECUTION_ACCESS_DENIED",
            status_code=403,
            details={"execution_id": execution_id}
        )


# =============================================================================
# Credit / Billing Exceptions
# =============================================================================

class InsufficientCreditsError(TrayveException):
    """Raised when a user cannot pay for an action."""

    def __init__(self, required: int, available: int):
        super().__init__(
            message="Insufficient credits",
            code="INSUFFICIENT_CREDITS",
            status_code=402,
            suggestion="Purchase more credits or upgrade your plan to continue",
            details={"required": required, "available": available}
        )


class CreditDeductionError(TrayveException):
    """Raised when the credit ledger rejects a deduction."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to deduct credits: {error}",
            code="CREDIT_DEDUCTION_FAILED",
            status_code=400,
            suggestion="Check your balance and try again",
            details={"error": error}
        )


class UpgradeRequiredError(TrayveException):
    """Raised when the viewer's tier does not include a feature."""

    def __init__(self, feature: str, tier: str):
        super().__init__(
            message=f"{feature} is not available on the {tier} plan",
            code="UPGRADE_REQUIRED",
            status_code=402,
            suggestion="Upgrade to any paid plan to unlock this feature",
            details={"feature": feature, "tier": tier}
        )


# =============================================================================
# Background Removal Exceptions
# =============================================================================

class BackgroundRemovalInProgressError(TrayveException):
    """Raised when a removal is already running for an image."""

    def __init__(self, result_id: str):
        super().__init__(
            message=f"Background removal already in progress for image: {result_id}",
            code="REMOVAL_IN_PROGRESS",
            status_code=409,
            suggestion="Wait for the current removal to finish, then refresh the results",
            details={"image_id": result_id}
        )


class ImageNotReadyError(TrayveException):
    """Raised when an image has no finished output to post-process."""

    def __init__(self, result_id: str):
        super().__init__(
            message=f"Image is still processing: {result_id}",
            code="IMAGE_NOT_READY",
            status_code=409,
            suggestion="Wait until the image has finished upscaling",
            details={"image_id": result_id}
        )


class TaskQueueUnavailableError(TrayveException):
    """Raised when a background task cannot be submitted to the worker queue."""

    def __init__(self, task: str, error: str):
        super().__init__(
            message=f"Could not queue {task}",
            code="QUEUE_UNAVAILABLE",
            status_code=503,
            suggestion="Try again in a moment. If it keeps failing, check that Redis and the workers are running",
            details={"task": task, "error": error}
        )


# =============================================================================
# Upscale Exceptions
# =============================================================================

class UpscaleInProgressError(TrayveException):
    """Raised when an on-demand upscale is already running for an image."""

    def __init__(self, result_id: str):
        super().__init__(
            message=f"Upscale already in progress for image: {result_id}",
            code="UPSCALE_IN_PROGRESS",
            status_code=409,
            suggestion="Wait for the current upscale to finish, then refresh the results",
            details={"image_id": result_id}
        )


# =============================================================================
# Task Exceptions
# =============================================================================

class TaskNotFoundError(TrayveException):
    """Raised when a task ID is unknown or was queued for another shop."""

    def __init__(self, task_id: str):
        super().__init__(
            message=f"Task not found: {task_id}",
            code="TASK_NOT_FOUND",
            status_code=404,
            suggestion="Use the task_id returned when the work was queued",
            details={"task_id": task_id}
        )


# =============================================================================
# Model Catalog Exceptions
# =============================================================================

class ModelNotFoundError(TrayveException):
    """Raised when a base model ID doesn't exist."""

    def __init__(self, model_id: str):
        super().__init__(
            message=f"Model not found: {model_id}",
            code="MODEL_NOT_FOUND",
            status_code=404,
            suggestion="List available models with GET /api/v1/models",
            details={"model_id": model_id}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def trayve_exception_handler(
    request: Request,
    exc: TrayveException
) -> JSONResponse:
    """Render a TrayveException with its own status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": jsonable_encoder(errors)
        }
    )
