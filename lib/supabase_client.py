# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# One shared Supabase client (service role) plus the row lookups that more
# than one service needs:
# - Shop → Trayve user mappings
# - Generation projects and their results
# - Pipeline executions
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   user = SupabaseClient.fetch_shop_user("my-store.myshopify.com")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    A PostgREST or RPC call failed.

    `code` names the failing lookup (e.g. FETCH_PROJECT_FAILED) and is
    returned to clients by the 502 handler.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def is_no_rows_error(error: Exception) -> bool:
    """True if a PostgREST error means "no matching row"."""
    return NO_ROWS_CODE in str(error)


class SupabaseClient:
    """
    Shared access to the Trayve Supabase project.

    The client is created lazily on first use and reused by every service
    and worker in the process.

    Example:
        user = SupabaseClient.fetch_shop_user("my-store.myshopify.com")
        project = SupabaseClient.fetch_project(project_id)
        rows = SupabaseClient.fetch_generation_results(project_id)
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Return the process-wide client, creating it on first call.

        The service_role key bypasses Row Level Security, so every service
        verifies ownership itself.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        return str(uuid_value)

    @classmethod
    def _fetch_single(
        cls,
        table: str,
        columns: str,
        column: str,
        value: str,
        error_code: str,
    ) -> dict[str, Any] | None:
        client = cls.get_client()
        try:
            response = (
                client.table(table)
                .select(columns)
                .eq(column, value)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code=error_code,
                details={"table": table, column: value}
            )

    # -------------------------------------------------------------------------
    # Shop Users
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_shop_user(cls, shop_domain: str) -> dict[str, Any] | None:
        """
        Fetch the Trayve user linked to a Shopify shop.

        Args:
            shop_domain: e.g. "my-store.myshopify.com"

        Returns:
            Row from `shopify_users` with keys:
            - trayve_user_id: Trayve user UUID
            - shop_domain: The shop
            - is_active: Whether the app is installed
            - metadata: Additional JSONB data
            or None if the shop is unknown

        Raises:
            SupabaseClientError: If query fails
        """
        return cls._fetch_single(
            "shopify_users",
            "id, trayve_user_id, shop_domain, email, is_active, metadata, created_at",
            "shop_domain",
            shop_domain,
            "FETCH_SHOP_USER_FAILED",
        )

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_project(cls, project_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a generation project by ID.

        Returns:
            Project dict (id, user_id, name, clothing_image_url, created_at),
            or None if not found
        """
        return cls._fetch_single(
            "user_generation_projects",
            "id, user_id, name, clothing_image_url, created_at",
            "id",
            cls._normalize_uuid(project_id),
            "FETCH_PROJECT_FAILED",
        )

    @classmethod
    def fetch_generation_results(cls, project_id: str | UUID) -> list[dict[str, Any]]:
        """
        Fetch all generation results for a project, oldest first.

        Includes the joined pose name so results can be grouped by pose.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        project_id_str = cls._normalize_uuid(project_id)

        try:
            response = (
                client.table("generation_results")
                .select(
                    "id, project_id, pose_id, pose_name, result_image_url, "
                    "generation_tier, generation_metadata, removed_bg_url, created_at, "
                    "poses:pose_id (id, name)"
                )
                .eq("project_id", project_id_str)
                .order("created_at", desc=False)
                .execute()
            )

            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} results for project {project_id_str}")
            return rows

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch generation results: {e}",
                code="FETCH_RESULTS_FAILED",
                suggestion="Check that the project exists and generation_results is accessible",
                details={"project_id": project_id_str}
            )

    @classmethod
    def fetch_generation_result(cls, result_id: str | UUID) -> dict[str, Any] | None:
        """Fetch one generation result with its project ID."""
        return cls._fetch_single(
            "generation_results",
            "id, project_id, result_image_url, generation_metadata, removed_bg_url, created_at",
            "id",
            cls._normalize_uuid(result_id),
            "FETCH_RESULT_FAILED",
        )

    @classmethod
    def update_generation_result(
        cls,
        result_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Update columns of one generation result.

        Raises:
            SupabaseClientError: If the update fails or matches no row
        """
        client = cls.get_client()
        result_id_str = cls._normalize_uuid(result_id)

        try:
            response = (
                client.table("generation_results")
                .update(data)
                .eq("id", result_id_str)
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Update matched no rows",
                code="UPDATE_NO_DATA",
                details={"result_id": result_id_str}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update generation result: {e}",
                code="UPDATE_RESULT_FAILED",
                details={"result_id": result_id_str, "columns": sorted(data)}
            )

    @classmethod
    def claim_generation_result(
        cls,
        result_id: str | UUID,
        status_key: str,
        metadata: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Replace `generation_metadata` unless `status_key` is already processing.

        The status test and the write are one UPDATE, so of two concurrent
        claims on the same row only one matches.

        Returns:
            The updated row, or None if the row was already claimed

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        result_id_str = cls._normalize_uuid(result_id)
        status_column = f"generation_metadata->>{status_key}"

        try:
            response = (
                client.table("generation_results")
                .update({"generation_metadata": metadata})
                .eq("id", result_id_str)
                .or_(f"{status_column}.is.null,{status_column}.neq.processing")
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to claim generation result: {e}",
                code="CLAIM_RESULT_FAILED",
                details={"result_id": result_id_str, "status_key": status_key}
            )

        return response.data[0] if response.data else None

    @classmethod
    def fetch_result_by_task(
        cls,
        task_id: str,
        task_keys: list[str],
    ) -> dict[str, Any] | None:
        """
        Find the generation result a worker task was queued for.

        Args:
            task_id: Celery task ID
            task_keys: `generation_metadata` keys that may hold the task ID

        Returns:
            The result row (with project_id), or None if no row references it
        """
        client = cls.get_client()
        filters = ",".join(f"generation_metadata->>{key}.eq.{task_id}" for key in task_keys)

        try:
            response = (
                client.table("generation_results")
                .select("id, project_id, result_image_url, generation_metadata, removed_bg_url, created_at")
                .or_(filters)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to look up task {task_id}: {e}",
                code="FETCH_TASK_RESULT_FAILED",
                details={"task_id": task_id}
            )

        rows = response.data or []
        return rows[0] if rows else None

    # -------------------------------------------------------------------------
    # Pipeline Executions
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_execution(cls, execution_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a pipeline execution by ID."""
        return cls._fetch_single(
            "pipeline_executions",
            "id, user_id, project_id, status, progress, current_step, "
            "subscription_tier, credits_used, config, started_at, completed_at, error_message",
            "id",
            cls._normalize_uuid(execution_id),
            "FETCH_EXECUTION_FAILED",
        )

    # -------------------------------------------------------------------------
    # RPC
    # -------------------------------------------------------------------------

    @classmethod
    def rpc(cls, function: str, params: dict[str, Any]) -> Any:
        """
        Call a Postgres function.

        Raises:
            SupabaseClientError: If the call fails
        """
        client = cls.get_client()
        try:
            return client.rpc(function, params).execute().data
        except Exception as e:
            raise SupabaseClientError(
                message=f"RPC {function} failed: {e}",
                code="RPC_FAILED",
                details={"function": function}
            )
