# =============================================================================
# core/services/model_service.py - Base Model Catalog
# =============================================================================
# Lists the base models and poses merchants pick from in the studio, with
# each model's lock state for the viewer's tier. Images stored only as a
# storage path are resolved to public URLs of the `models` bucket.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError, is_no_rows_error
from core.display.access import enrich_models_with_access, get_model_access_info
from core.models.catalog import (
    BaseModelInfo,
    CatalogModel,
    ModelListResponse,
    ModelPose,
)
from core.models.media import Tier
from app.exceptions import ModelNotFoundError

logger = logging.getLogger(__name__)

MODELS_BUCKET = "models"


def _public_url(path: str | None) -> str:
    if not path:
        return ""
    client = SupabaseClient.get_client()
    return client.storage.from_(MODELS_BUCKET).get_public_url(path)


def _pose_from_row(row: dict[str, Any]) -> ModelPose:
    return ModelPose(
        id=str(row["id"]),
        base_model_id=str(row["base_model_id"]) if row.get("base_model_id") else None,
        name=row.get("name") or "",
        description=row.get("description"),
        pose_type=row.get("pose_type"),
        image_url=row.get("image_url") or _public_url(row.get("supabase_path")),
        is_active=row.get("is_active", True),
    )


def _model_from_row(row: dict[str, Any]) -> BaseModelInfo:
    poses = [
        _pose_from_row(pose)
        for pose in row.get("poses") or []
        if pose.get("is_active")
    ]
    return BaseModelInfo(
        id=str(row["id"]),
        name=row.get("name") or "",
        description=row.get("description"),
        gender=row.get("gender"),
        body_type=row.get("body_type"),
        ethnicity=row.get("ethnicity"),
        age_range=row.get("age_range"),
        image_url=row.get("image_url") or _public_url(row.get("supabase_path")),
        is_active=row.get("is_active", True),
        is_promoted=row.get("is_promoted"),
        poses=poses,
    )


class ModelService:
    """Service for the base model catalog."""

    @staticmethod
    def list_models(
        tier: Tier,
        gender: str | None = None,
        body_type: str | None = None,
    ) -> ModelListResponse:
        """
        List active, promoted base models with their poses.

        Promoted models come first, then newest first.

        Args:
            tier: Viewer tier (decides which models are locked)
            gender: Optional gender filter
            body_type: Optional body type filter
        """
        client = SupabaseClient.get_client()

        try:
            query = (
                client.table("base_models")
                .select("*, poses:model_poses(*)")
                .eq("is_active", True)
                .eq("is_promoted", True)
            )
            if gender:
                query = query.eq("gender", gender)
            if body_type:
                query = query.eq("body_type", body_type)

            response = (
                query
                .order("is_promoted", desc=True)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch base models: {e}",
                code="FETCH_MODELS_FAILED",
                details={"gender": gender, "body_type": body_type}
            )

        models = [_model_from_row(row) for row in response.data or []]
        catalog = enrich_models_with_access(models, tier)
        logger.debug(f"Listed {len(catalog)} models for tier {tier.value}")

        return ModelListResponse(models=catalog, tier=tier, count=len(catalog))

    @staticmethod
    def get_model(model_id: str, tier: Tier) -> CatalogModel:
        """
        Get one base model with its poses.

        Raises:
            ModelNotFoundError: If the model doesn't exist
        """
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("base_models")
                .select("*, poses:model_poses(*)")
                .eq("id", model_id)
                .single()
                .execute()
            )
            row = response.data
        except Exception as e:
            if is_no_rows_error(e):
                row = None
            else:
                raise SupabaseClientError(
                    message=f"Failed to fetch base model: {e}",
                    code="FETCH_MODEL_FAILED",
                    details={"model_id": model_id}
                )

        if not row:
            raise ModelNotFoundError(model_id)

        model = _model_from_row(row)
        return CatalogModel(
            **model.model_dump(),
            access_info=get_model_access_info(model.name, tier),
        )

    @staticmethod
    def get_poses(model_id: str) -> list[ModelPose]:
        """Active poses of a base model, oldest first."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("model_poses")
                .select("*")
                .eq("base_model_id", model_id)
                .eq("is_active", True)
                .order("created_at", desc=False)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch model poses: {e}",
                code="FETCH_POSES_FAILED",
                details={"model_id": model_id}
            )

        return [_pose_from_row(row) for row in response.data or []]
