# =============================================================================
# tests/test_services.py - Service Layer Tests
# =============================================================================
# Tests for the Supabase-backed services. The SupabaseClient used by each
# service module is patched, so no database is needed.
#
# Run with: pytest tests/test_services.py -v
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import (
    ExecutionAccessDeniedError,
    ExecutionNotFoundError,
    ModelNotFoundError,
    ProjectAccessDeniedError,
    ProjectNotFoundError,
    ResultNotFoundError,
    TaskNotFoundError,
)
from core.models.credits import CreditFeature
from core.models.display import BadgeStatus
from core.models.jobs import ImageJob
from core.models.media import Tier
from core.services.credit_service import CreditService
from core.services.model_service import ModelService
from core.services.pipeline_service import PipelineService
from core.services.project_service import ProjectService
from core.services.subscription_service import SubscriptionService
from core.services.task_service import TaskService
from lib.supabase_client import SupabaseClient, SupabaseClientError

from tests.conftest import make_query


# =============================================================================
# CreditService
# =============================================================================

class TestCreditService:
    """Tests for balances and consumption."""

    def test_missing_row_is_zero_balance(self, user_id):
        with patch("core.services.credit_service.SupabaseClient") as mock_client:
            mock_client.get_client.return_value.table.return_value = make_query(None)

            balance = CreditService.get_balance(user_id)

        assert balance.available_credits == 0
        assert balance.user_id == user_id

    def test_balance_from_row(self, user_id):
        row = {"user_id": user_id, "total_credits": 5000, "used_credits": 4800}
        with patch("core.services.credit_service.SupabaseClient") as mock_client:
            mock_client.get_client.return_value.table.return_value = make_query(row)

            balance = CreditService.get_balance(user_id)

        assert balance.available_credits == 200
        assert balance.covers(500) is False

    def test_consume_success(self, user_id):
        with patch("core.services.credit_service.SupabaseClient") as mock_client:
            mock_client.rpc.return_value = {"success": True, "new_balance": 3500}

            result = CreditService.consume(user_id, 1000, "Try-on", CreditFeature.AI_GENERATION)

        assert result.success is True
        assert result.credits_consumed == 1000
        assert result.remaining_balance == 3500
        mock_client.rpc.assert_called_once_with("consume_user_credits", {
            "p_user_id": user_id,
            "p_amount": 1000,
            "p_description": "Try-on",
            "p_reference_type": "ai_generation",
        })

    def test_consume_rejected(self, user_id):
        with patch("core.services.credit_service.SupabaseClient") as mock_client:
            mock_client.rpc.return_value = {"success": False, "error": "Insufficient credits"}

            result = CreditService.consume(user_id, 1000, "Try-on")

        assert result.success is False
        assert result.error == "Insufficient credits"
        assert result.credits_consumed == 0

    def test_consume_rpc_failure_is_reported(self, user_id):
        """Test a database error becomes an unsuccessful result."""
        with patch("core.services.credit_service.SupabaseClient") as mock_client:
            mock_client.rpc.side_effect = SupabaseClientError("connection reset")

            result = CreditService.consume(user_id, 1000, "Try-on")

        assert result.success is False
        assert result.error == "connection reset"

    def test_consume_for_uses_price_list(self, user_id):
        with patch("core.services.credit_service.SupabaseClient") as mock_client:
            mock_client.rpc.return_value = {"success": True, "new_balance": 0}

            result = CreditService.consume_for(
                user_id, CreditFeature.BACKGROUND_REMOVAL, "Background removal"
            )

        assert result.credits_consumed == 500
        params = mock_client.rpc.call_args[0][1]
        assert params["p_amount"] == 500
        assert params["p_reference_type"] == "background_removal"


# =============================================================================
# SubscriptionService
# =============================================================================

class TestSubscriptionService:

    def test_no_subscription_is_free(self, user_id):
        with patch("core.services.subscription_service.SupabaseClient") as mock_client:
            mock_client.get_client.return_value.table.return_value = make_query([])

            assert SubscriptionService.get_viewer_tier(user_id) == Tier.FREE
            current = SubscriptionService.get_current(user_id)

        assert current.subscription is None
        assert current.plan_name == "Free Plan"

    def test_active_plan_sets_tier(self, user_id):
        row = {
            "id": "sub-1",
            "trayve_user_id": user_id,
            "plan_tier": "plan_professional",
            "status": "active",
        }
        with patch("core.services.subscription_service.SupabaseClient") as mock_client:
            query = make_query([row])
            mock_client.get_client.return_value.table.return_value = query

            current = SubscriptionService.get_current(user_id)

        assert current.plan_tier == Tier.PROFESSIONAL
        assert current.plan_name == "Professional Plan"
        query.eq.assert_any_call("status", "active")

    def test_query_failure_raises(self, user_id):
        with patch("core.services.subscription_service.SupabaseClient") as mock_client:
            mock_client.get_client.return_value.table.side_effect = RuntimeError("down")

            with pytest.raises(SupabaseClientError):
                SubscriptionService.get_viewer_tier(user_id)


# =============================================================================
# ProjectService
# =============================================================================

class TestProjectService:
    """Tests for ownership checks and result listing."""

    def test_missing_project(self, user_id):
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_project.return_value = None

            with pytest.raises(ProjectNotFoundError):
                ProjectService.get_project("project-1", user_id=user_id)

    def test_other_users_project(self, sample_project):
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_project.return_value = sample_project

            with pytest.raises(ProjectAccessDeniedError):
                ProjectService.get_project("project-1", user_id="someone-else")

    def test_results_grouped_by_pose(self, user_id, sample_project, sample_result_row):
        second = {**sample_result_row, "id": "result-2"}
        other_pose = {
            **sample_result_row,
            "id": "result-3",
            "pose_id": 8,
            "poses": None,
            "pose_name": "Side",
        }
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_project.return_value = sample_project
            mock_client.fetch_generation_results.return_value = [sample_result_row, second, other_pose]

            response = ProjectService.get_results("project-1", user_id, Tier.PROFESSIONAL)

        assert response.tier == Tier.PROFESSIONAL
        assert [group.pose_name for group in response.results] == ["Front", "Side"]
        assert [img.record.id for img in response.results[0].images] == ["result-1", "result-2"]

        display = response.results[0].images[0].display
        assert display.badge == BadgeStatus.PROCESSING_4K
        assert display.display_url == "https://cdn.test/2k.png"

    def test_results_for_free_tier_hide_4k_progress(self, user_id, sample_project, sample_result_row):
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_project.return_value = sample_project
            mock_client.fetch_generation_results.return_value = [sample_result_row]

            response = ProjectService.get_results("project-1", user_id, Tier.FREE)

        display = response.results[0].images[0].display
        assert display.badge == BadgeStatus.READY_2K
        assert display.actions.upgrade_required is True

    def test_rename(self, user_id, sample_project):
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_project.return_value = sample_project
            mock_client.get_client.return_value.table.return_value = make_query(
                [{"id": "project-1", "name": "Winter"}]
            )

            updated = ProjectService.rename_project("project-1", user_id, "Winter")

        assert updated["name"] == "Winter"

    def test_delete_removes_children_first(self, user_id, sample_project):
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_project.return_value = sample_project
            table = mock_client.get_client.return_value.table
            table.return_value = make_query([])

            ProjectService.delete_project("project-1", user_id)

        tables = [c.args[0] for c in table.call_args_list]
        assert tables == ["generation_results", "pipeline_executions", "user_generation_projects"]

    def test_owned_result(self, user_id, sample_project, sample_result_row):
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_generation_result.return_value = sample_result_row
            mock_client.fetch_project.return_value = sample_project

            assert ProjectService.get_owned_result("result-1", user_id) == sample_result_row

        mock_client.fetch_project.assert_called_once_with("project-1")

    def test_owned_result_missing(self, user_id):
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_generation_result.return_value = None

            with pytest.raises(ResultNotFoundError):
                ProjectService.get_owned_result("result-1", user_id)

    def test_results_carry_on_demand_upscale(self, user_id, sample_project, sample_result_row):
        sample_result_row["generation_metadata"].update({
            "manual_upscale_url": "https://cdn.test/big.png",
            "manual_upscale_status": "completed",
        })
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_project.return_value = sample_project
            mock_client.fetch_generation_results.return_value = [sample_result_row]

            response = ProjectService.get_results("project-1", user_id, Tier.PROFESSIONAL)

        image = response.results[0].images[0]
        assert image.upscaled_url == "https://cdn.test/big.png"
        assert image.upscale_status == "completed"
        # The pipeline 4K stage is still the one being displayed
        assert image.display.display_url == "https://cdn.test/2k.png"


# =============================================================================
# PipelineService
# =============================================================================

class TestPipelineService:
    """Tests for execution status polling."""

    @pytest.fixture
    def execution(self, user_id):
        return {
            "id": "exec-1",
            "user_id": user_id,
            "project_id": "project-1",
            "status": "processing",
        }

    def test_missing_execution(self, user_id):
        with patch("core.services.pipeline_service.SupabaseClient") as mock_client:
            mock_client.fetch_execution.return_value = None

            with pytest.raises(ExecutionNotFoundError):
                PipelineService.get_execution_status("exec-1", user_id)

    def test_other_users_execution(self, execution):
        with patch("core.services.pipeline_service.SupabaseClient") as mock_client:
            mock_client.fetch_execution.return_value = execution

            with pytest.raises(ExecutionAccessDeniedError):
                PipelineService.get_execution_status("exec-1", "someone-else")

    def test_status_counts_poses(self, user_id, execution):
        rows = [
            {"id": "r1", "pose_id": 1, "generation_metadata": {"status": "completed"}},
            {"id": "r2", "pose_id": 2, "generation_metadata": {"status": "failed", "error_message": "nsfw"}},
            {"id": "r3", "pose_id": 3, "generation_metadata": None},
        ]
        with patch("core.services.pipeline_service.SupabaseClient") as mock_client:
            mock_client.fetch_execution.return_value = execution
            query = make_query(rows)
            mock_client.get_client.return_value.table.return_value = query

            status = PipelineService.get_execution_status("exec-1", user_id)

        assert status.total_poses == 3
        assert status.completed_poses == 1
        assert status.failed_poses == 1
        assert status.generation_results[1].error == "nsfw"
        assert status.generation_results[2].status == "processing"
        query.contains.assert_called_once_with(
            "generation_config", {"pipeline_execution_id": "exec-1"}
        )

    def test_multi_status(self, user_id):
        rows = [
            {"id": "e1", "project_id": "p1", "status": "processing", "progress": 40},
            {"id": "e2", "project_id": "p1", "status": "completed", "progress": 100},
            {"id": "e3", "project_id": "p2", "status": "failed", "progress": 15},
        ]
        with patch("core.services.pipeline_service.SupabaseClient") as mock_client:
            query = make_query(rows)
            mock_client.get_client.return_value.table.return_value = query

            response = PipelineService.get_multiple_statuses(["e1", "e2", "e1", "e3"], user_id)

        query.in_.assert_called_once_with("id", ["e1", "e2", "e3"])
        query.eq.assert_called_once_with("user_id", user_id)
        assert response.total_active == 1
        assert response.total_completed == 1
        assert response.total_failed == 1
        assert response.overall_progress == 52

    def test_multi_status_empty(self, user_id):
        with patch("core.services.pipeline_service.SupabaseClient") as mock_client:
            mock_client.get_client.return_value.table.return_value = make_query([])

            response = PipelineService.get_multiple_statuses(["e1"], user_id)

        assert response.executions == []
        assert response.overall_progress == 0


# =============================================================================
# ModelService
# =============================================================================

class TestModelService:
    """Tests for the base model catalog."""

    @pytest.fixture
    def model_rows(self):
        return [
            {
                "id": "m1",
                "name": "Sofia",
                "gender": "female",
                "supabase_path": "sofia/cover.png",
                "is_active": True,
                "is_promoted": True,
                "poses": [
                    {"id": "p1", "base_model_id": "m1", "name": "Front", "is_active": True,
                     "image_url": "https://cdn.test/front.png"},
                    {"id": "p2", "base_model_id": "m1", "name": "Old", "is_active": False},
                ],
            },
            {"id": "m2", "name": "Chloe", "image_url": "https://cdn.test/chloe.png", "poses": []},
        ]

    def test_list_models_with_access(self, model_rows):
        with patch("core.services.model_service.SupabaseClient") as mock_client:
            client = mock_client.get_client.return_value
            query = make_query(model_rows)
            client.table.return_value = query
            client.storage.from_.return_value.get_public_url.return_value = (
                "https://storage.test/models/sofia/cover.png"
            )

            response = ModelService.list_models(Tier.FREE, gender="female")

        assert response.count == 2
        sofia, chloe = response.models
        assert sofia.access_info.is_locked is True
        assert chloe.access_info.is_locked is False
        assert sofia.image_url == "https://storage.test/models/sofia/cover.png"
        assert [pose.id for pose in sofia.poses] == ["p1"]
        query.eq.assert_any_call("gender", "female")
        client.storage.from_.assert_called_with("models")

    def test_missing_model(self):
        with patch("core.services.model_service.SupabaseClient") as mock_client:
            query = make_query()
            query.execute.side_effect = Exception("PGRST116: 0 rows")
            mock_client.get_client.return_value.table.return_value = query

            with pytest.raises(ModelNotFoundError):
                ModelService.get_model("missing", Tier.CREATOR)



# =============================================================================
# TaskService
# =============================================================================

class TestTaskService:
    """Tests for resolving task IDs to the shop that queued them."""

    @pytest.fixture
    def queued_row(self, sample_result_row):
        sample_result_row["generation_metadata"].update({
            "bg_removal_status": "processing",
            "bg_removal_task_id": "task-1",
        })
        return sample_result_row

    def test_owned_task(self, user_id, sample_project, queued_row):
        with patch("core.services.task_service.SupabaseClient") as mock_client, \
             patch("core.services.project_service.SupabaseClient") as project_client:
            mock_client.fetch_result_by_task.return_value = queued_row
            project_client.fetch_project.return_value = sample_project

            task = TaskService.get_owned_task("task-1", user_id)

        assert task.job == ImageJob.BACKGROUND_REMOVAL
        assert task.is_current is True
        keys = mock_client.fetch_result_by_task.call_args[0][1]
        assert keys == ["bg_removal_task_id", "manual_upscale_task_id"]

    def test_unknown_task(self, user_id):
        with patch("core.services.task_service.SupabaseClient") as mock_client:
            mock_client.fetch_result_by_task.return_value = None

            with pytest.raises(TaskNotFoundError):
                TaskService.get_owned_task("task-9", user_id)

    def test_other_shops_task_is_not_found(self, sample_project, queued_row):
        with patch("core.services.task_service.SupabaseClient") as mock_client, \
             patch("core.services.project_service.SupabaseClient") as project_client:
            mock_client.fetch_result_by_task.return_value = queued_row
            project_client.fetch_project.return_value = sample_project

            with pytest.raises(TaskNotFoundError):
                TaskService.get_owned_task("task-1", "22222222-2222-2222-2222-222222222222")

    def test_release_clears_processing_mark(self, user_id, sample_project, queued_row):
        with patch("core.services.task_service.SupabaseClient") as mock_client, \
             patch("core.services.project_service.SupabaseClient") as project_client, \
             patch("core.services.image_jobs.SupabaseClient") as jobs_client:
            mock_client.fetch_result_by_task.return_value = queued_row
            project_client.fetch_project.return_value = sample_project

            TaskService.release(TaskService.get_owned_task("task-1", user_id))

        result_id, data = jobs_client.update_generation_result.call_args[0]
        assert result_id == "result-1"
        assert "bg_removal_status" not in data["generation_metadata"]
        assert data["generation_metadata"]["bg_removal_task_id"] == "task-1"
        assert data["generation_metadata"]["basic_upscale_status"] == "completed"

    def test_release_leaves_newer_task_alone(self, user_id, sample_project, queued_row):
        queued_row["generation_metadata"]["bg_removal_status"] = "completed"
        with patch("core.services.task_service.SupabaseClient") as mock_client, \
             patch("core.services.project_service.SupabaseClient") as project_client, \
             patch("core.services.image_jobs.SupabaseClient") as jobs_client:
            mock_client.fetch_result_by_task.return_value = queued_row
            project_client.fetch_project.return_value = sample_project

            TaskService.release(TaskService.get_owned_task("task-1", user_id))

        jobs_client.update_generation_result.assert_not_called()


# =============================================================================
# SupabaseClient
# =============================================================================

class TestClaimGenerationResult:
    """Tests for the conditional processing claim."""

    def test_claim_filters_on_status(self):
        query = make_query([{"id": "result-1"}])
        with patch.object(SupabaseClient, "get_client") as get_client:
            get_client.return_value.table.return_value = query

            row = SupabaseClient.claim_generation_result(
                "result-1", "bg_removal_status", {"bg_removal_status": "processing"}
            )

        assert row == {"id": "result-1"}
        query.update.assert_called_once_with({"generation_metadata": {"bg_removal_status": "processing"}})
        query.or_.assert_called_once_with(
            "generation_metadata->>bg_removal_status.is.null,"
            "generation_metadata->>bg_removal_status.neq.processing"
        )

    def test_already_claimed(self):
        with patch.object(SupabaseClient, "get_client") as get_client:
            get_client.return_value.table.return_value = make_query([])

            assert SupabaseClient.claim_generation_result("result-1", "bg_removal_status", {}) is None

    def test_lookup_by_task(self):
        query = make_query([{"id": "result-1", "project_id": "project-1"}])
        with patch.object(SupabaseClient, "get_client") as get_client:
            get_client.return_value.table.return_value = query

            row = SupabaseClient.fetch_result_by_task("task-1", ["bg_removal_task_id", "manual_upscale_task_id"])

        assert row["project_id"] == "project-1"
        query.or_.assert_called_once_with(
            "generation_metadata->>bg_removal_task_id.eq.task-1,"
            "generation_metadata->>manual_upscale_task_id.eq.task-1"
        )
