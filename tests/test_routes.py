# =============================================================================
# tests/test_routes.py - API Route Tests
# =============================================================================
# Exercises the FastAPI app through TestClient. Shop authentication is
# overridden with dependency_overrides except where the auth flow itself is
# under test; services are patched at the database boundary.
#
# Run with: pytest tests/test_routes.py -v
# =============================================================================

from unittest.mock import MagicMock, patch
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from app.auth import ShopUser, get_current_shop_user, get_viewer_tier
from app.main import app
from core.models.credits import CreditBalance, CreditUsageResult
from core.models.media import Tier
from core.models.removal import BackgroundRemovalResponse, RemovalState
from core.models.upscale import UpscaleResponse, UpscaleState

PROJECT_ID = "7a1c0f4e-52b1-4c55-9a0b-2f3e8e1d9c01"
SHOP = "my-store.myshopify.com"


@pytest.fixture
def shop_user(user_id):
    return ShopUser(id=UUID(user_id), shop_domain=SHOP, email="owner@my-store.test")


@pytest.fixture
def client_for(shop_user):
    """Build a TestClient authenticated as shop_user on the given tier."""

    def build(tier: Tier = Tier.FREE) -> TestClient:
        app.dependency_overrides[get_current_shop_user] = lambda: shop_user
        app.dependency_overrides[get_viewer_tier] = lambda: tier
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()


# =============================================================================
# Shop Authentication
# =============================================================================

class TestShopAuth:
    """Tests for resolving the merchant from the shop header."""

    def test_missing_header_is_401(self):
        response = TestClient(app).get("/api/v1/credits/balance")

        assert response.status_code == 401
        assert response.json()["code"] == "SHOP_NOT_IDENTIFIED"

    def test_unknown_shop_is_404(self):
        with patch("app.auth.dependencies.SupabaseClient") as mock_client:
            mock_client.fetch_shop_user.return_value = None

            response = TestClient(app).get(
                "/api/v1/credits/balance",
                headers={"X-Shopify-Shop-Domain": SHOP},
            )

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_uninstalled_shop_is_404(self, user_id):
        with patch("app.auth.dependencies.SupabaseClient") as mock_client:
            mock_client.fetch_shop_user.return_value = {
                "trayve_user_id": user_id,
                "shop_domain": SHOP,
                "is_active": False,
            }

            response = TestClient(app).get(
                "/api/v1/credits/balance",
                headers={"X-Shopify-Shop-Domain": SHOP},
            )

        assert response.status_code == 404

    def test_header_resolves_user_and_tier(self, user_id):
        """Test the full dependency chain: header -> user -> tier."""
        with patch("app.auth.dependencies.SupabaseClient") as mock_client, \
             patch("app.auth.dependencies.SubscriptionService") as subscriptions, \
             patch("app.routers.credits.CreditService") as credits:
            mock_client.fetch_shop_user.return_value = {
                "trayve_user_id": user_id,
                "shop_domain": SHOP,
                "is_active": True,
            }
            subscriptions.get_viewer_tier.return_value = Tier.CREATOR
            credits.get_balance.return_value = CreditBalance(
                user_id=user_id, total_credits=5000, used_credits=1000
            )

            response = TestClient(app).get(
                "/api/v1/credits/balance",
                headers={"X-Shopify-Shop-Domain": "  My-Store.myshopify.com "},
            )

        assert response.status_code == 200
        assert response.json() == {
            "total_credits": 5000,
            "used_credits": 1000,
            "available_credits": 4000,
            "tier": "creator",
            "plan_name": "Creator Plan",
        }
        mock_client.fetch_shop_user.assert_called_once_with(SHOP)


# =============================================================================
# Projects
# =============================================================================

class TestProjectRoutes:

    def test_results_carry_display_decision(self, client_for, sample_project, sample_result_row):
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_project.return_value = sample_project
            mock_client.fetch_generation_results.return_value = [sample_result_row]

            response = client_for(Tier.PROFESSIONAL).get(f"/api/v1/projects/{PROJECT_ID}/results")

        assert response.status_code == 200
        body = response.json()
        assert body["tier"] == "professional"

        image = body["results"][0]["images"][0]
        assert image["display"]["badge"] == "4k-processing"
        assert image["display"]["display_url"] == "https://cdn.test/2k.png"
        assert image["display"]["progress_label"] == "Enhancing to 4K..."

    def test_foreign_project_is_403(self, client_for, sample_project):
        sample_project["user_id"] = "22222222-2222-2222-2222-222222222222"
        with patch("core.services.project_service.SupabaseClient") as mock_client:
            mock_client.fetch_project.return_value = sample_project

            response = client_for().get(f"/api/v1/projects/{PROJECT_ID}/results")

        assert response.status_code == 403
        assert response.json()["code"] == "PROJECT_ACCESS_DENIED"

    def test_invalid_project_id_is_422(self, client_for):
        response = client_for().get("/api/v1/projects/not-a-uuid/results")

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_blank_rename_is_422(self, client_for):
        response = client_for().patch(f"/api/v1/projects/{PROJECT_ID}", json={"name": "   "})

        assert response.status_code == 422

    def test_rename(self, client_for, user_id):
        with patch("app.routers.projects.ProjectService") as projects:
            projects.rename_project.return_value = {"id": PROJECT_ID, "name": "Winter"}

            response = client_for().patch(f"/api/v1/projects/{PROJECT_ID}", json={"name": " Winter "})

        assert response.status_code == 200
        assert response.json()["project"]["name"] == "Winter"
        assert projects.rename_project.call_args.kwargs["name"] == "Winter"


# =============================================================================
# Images
# =============================================================================

class TestRemoveBackgroundRoute:

    def test_queued_is_202(self, client_for):
        with patch("app.routers.images.BackgroundRemovalService") as service:
            service.start_removal.return_value = BackgroundRemovalResponse(
                image_id=PROJECT_ID,
                status=RemovalState.QUEUED,
                task_id="task-1",
                credits_required=500,
            )

            response = client_for(Tier.CREATOR).post(f"/api/v1/images/{PROJECT_ID}/remove-background")

        assert response.status_code == 202
        assert response.json()["task_id"] == "task-1"
        assert service.start_removal.call_args.kwargs["tier"] == Tier.CREATOR

    def test_free_tier_is_402(self, client_for, sample_result_row):
        with patch("core.services.background_service.ProjectService") as projects:
            projects.get_owned_result.return_value = sample_result_row

            response = client_for(Tier.FREE).post(f"/api/v1/images/{PROJECT_ID}/remove-background")

        assert response.status_code == 402
        assert response.json()["code"] == "UPGRADE_REQUIRED"


class TestUpscaleRoute:

    def test_queued_is_202(self, client_for):
        with patch("app.routers.images.UpscaleService") as service:
            service.start_upscale.return_value = UpscaleResponse(
                image_id=PROJECT_ID,
                status=UpscaleState.QUEUED,
                task_id="task-2",
                scale_factor=4,
                credits_required=1000,
            )

            response = client_for(Tier.PROFESSIONAL).post(
                f"/api/v1/images/{PROJECT_ID}/upscale", json={"scale_factor": 9}
            )

        assert response.status_code == 202
        assert response.json()["task_id"] == "task-2"
        assert service.start_upscale.call_args.kwargs["scale_factor"] == 4

    def test_body_is_optional(self, client_for):
        with patch("app.routers.images.UpscaleService") as service:
            service.start_upscale.return_value = UpscaleResponse(
                image_id=PROJECT_ID, status=UpscaleState.QUEUED, task_id="task-2", scale_factor=2
            )

            response = client_for(Tier.ENTERPRISE).post(f"/api/v1/images/{PROJECT_ID}/upscale")

        assert response.status_code == 202
        assert service.start_upscale.call_args.kwargs["scale_factor"] == 2

    def test_creator_plan_is_402(self, client_for, sample_result_row):
        with patch("core.services.upscale_service.ProjectService") as projects:
            projects.get_owned_result.return_value = sample_result_row

            response = client_for(Tier.CREATOR).post(f"/api/v1/images/{PROJECT_ID}/upscale")

        assert response.status_code == 402
        assert response.json()["code"] == "UPGRADE_REQUIRED"

    def test_bad_scale_factor_is_422(self, client_for):
        response = client_for(Tier.PROFESSIONAL).post(
            f"/api/v1/images/{PROJECT_ID}/upscale", json={"scale_factor": "huge"}
        )

        assert response.status_code == 422


# =============================================================================
# Credits
# =============================================================================

class TestCreditRoutes:

    def test_deduct_over_balance_is_402(self, client_for, user_id):
        with patch("app.routers.credits.CreditService") as credits:
            credits.get_balance.return_value = CreditBalance(user_id=user_id, total_credits=100)

            response = client_for().post("/api/v1/credits/deduct", json={"amount": 1000})

        assert response.status_code == 402
        assert response.json()["code"] == "INSUFFICIENT_CREDITS"
        credits.consume.assert_not_called()

    def test_deduct_rejected_by_ledger_is_400(self, client_for, user_id):
        with patch("app.routers.credits.CreditService") as credits:
            credits.get_balance.return_value = CreditBalance(user_id=user_id, total_credits=5000)
            credits.consume.return_value = CreditUsageResult(success=False, error="locked")

            response = client_for().post("/api/v1/credits/deduct", json={"amount": 1000})

        assert response.status_code == 400
        assert response.json()["code"] == "CREDIT_DEDUCTION_FAILED"

    def test_deduct(self, client_for, user_id):
        with patch("app.routers.credits.CreditService") as credits:
            credits.get_balance.return_value = CreditBalance(user_id=user_id, total_credits=5000)
            credits.consume.return_value = CreditUsageResult(
                success=True, credits_consumed=1000, remaining_balance=4000
            )

            response = client_for().post("/api/v1/credits/deduct", json={"amount": 1000})

        assert response.status_code == 200
        assert response.json() == {"success": True, "credits_deducted": 1000, "remaining_balance": 4000}


# =============================================================================
# Pipeline & Tasks
# =============================================================================

class TestPipelineRoutes:

    def test_multi_status_limit(self, client_for):
        ids = [f"e{i}" for i in range(51)]

        response = client_for().post("/api/v1/pipeline/multi-status", json={"execution_ids": ids})

        assert response.status_code == 422

    def test_multi_status(self, client_for, user_id):
        with patch("core.services.pipeline_service.SupabaseClient") as mock_client:
            query = MagicMock()
            for name in ("select", "in_", "eq"):
                getattr(query, name).return_value = query
            query.execute.return_value = MagicMock(data=[
                {"id": "e1", "project_id": "p1", "status": "processing", "progress": 50},
            ])
            mock_client.get_client.return_value.table.return_value = query

            response = client_for().post("/api/v1/pipeline/multi-status", json={"execution_ids": ["e1"]})

        assert response.status_code == 200
        assert response.json()["overall_progress"] == 50


class TestTaskRoutes:
    """Task status and cancel, scoped to the shop that owns the image."""

    @pytest.fixture
    def backend(self, sample_project, sample_result_row):
        sample_result_row["generation_metadata"].update({
            "bg_removal_status": "processing",
            "bg_removal_task_id": "task-1",
        })
        with patch("core.services.task_service.SupabaseClient") as tasks_client, \
             patch("core.services.project_service.SupabaseClient") as project_client, \
             patch("core.services.image_jobs.SupabaseClient") as jobs_client, \
             patch("workers.celery_app.celery_app") as celery_app:
            tasks_client.fetch_result_by_task.return_value = sample_result_row
            project_client.fetch_project.return_value = sample_project
            yield MagicMock(tasks=tasks_client, projects=project_client, jobs=jobs_client, celery=celery_app)

    def test_progress_state(self, client_for, backend):
        backend.celery.AsyncResult.return_value = MagicMock(
            status="PROGRESS",
            info={"percent": 33, "message": "Removing background..."},
        )

        response = client_for().get("/api/v1/tasks/task-1")

        assert response.status_code == 200
        body = response.json()
        assert body["progress"] == 33
        assert body["message"] == "Removing background..."
        assert body["job"] == "background_removal"
        assert body["image_id"] == "result-1"

    def test_success_with_failed_removal_reports_error(self, client_for, backend):
        backend.celery.AsyncResult.return_value = MagicMock(
            status="SUCCESS",
            result={"success": False, "error": "Failed to deduct credits: locked"},
        )

        response = client_for().get("/api/v1/tasks/task-1")

        assert response.json()["error"] == "Failed to deduct credits: locked"

    def test_unknown_task_is_404(self, client_for, backend):
        backend.tasks.fetch_result_by_task.return_value = None

        response = client_for().get("/api/v1/tasks/task-9")

        assert response.status_code == 404
        assert response.json()["code"] == "TASK_NOT_FOUND"
        backend.celery.AsyncResult.assert_not_called()

    def test_other_shops_task_is_hidden(self, client_for, backend, sample_project):
        backend.projects.fetch_project.return_value = {**sample_project, "user_id": "someone-else"}

        status = client_for().get("/api/v1/tasks/task-1")
        cancel = client_for().delete("/api/v1/tasks/task-1")

        assert status.status_code == 404
        assert cancel.status_code == 404
        backend.celery.AsyncResult.assert_not_called()
        backend.jobs.update_generation_result.assert_not_called()

    def test_cancel_queued_task_releases_image(self, client_for, backend):
        result = MagicMock(status="PENDING")
        backend.celery.AsyncResult.return_value = result

        response = client_for().delete("/api/v1/tasks/task-1")

        assert response.json()["cancelled"] is True
        result.revoke.assert_called_once()
        result_id, data = backend.jobs.update_generation_result.call_args[0]
        assert result_id == "result-1"
        assert "bg_removal_status" not in data["generation_metadata"]

    def test_cannot_cancel_running_task(self, client_for, backend):
        result = MagicMock(status="PROGRESS")
        backend.celery.AsyncResult.return_value = result

        response = client_for().delete("/api/v1/tasks/task-1")

        assert response.json()["cancelled"] is False
        result.revoke.assert_not_called()
        backend.jobs.update_generation_result.assert_not_called()

    def test_cannot_cancel_finished_task(self, client_for, backend):
        result = MagicMock(status="SUCCESS")
        backend.celery.AsyncResult.return_value = result

        response = client_for().delete("/api/v1/tasks/task-1")

        assert response.json()["cancelled"] is False
        result.revoke.assert_not_called()


class TestHealthRoutes:

    def test_live(self):
        response = TestClient(app).get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_ready_degraded_without_broker(self):
        with patch("app.routers.health._ping_database"), \
             patch("app.routers.health._ping_broker", side_effect=ConnectionError("refused")):
            response = TestClient(app).get("/api/v1/health/ready")

        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["database"] == "ok"
        assert body["checks"]["broker"].startswith("error:")


class TestMeAndTransactions:

    def test_me_includes_plan(self, client_for, user_id):
        with patch("app.auth.routes.SupabaseClient") as mock_client:
            mock_client.fetch_shop_user.return_value = {
                "metadata": {"onboarded": True},
                "created_at": "2025-05-01T09:00:00Z",
            }

            response = client_for(Tier.ENTERPRISE).get("/api/v1/auth/me")

        body = response.json()
        assert response.status_code == 200
        assert body["id"] == user_id
        assert body["shop_domain"] == SHOP
        assert body["plan_name"] == "Enterprise Plan"
        assert body["metadata"] == {"onboarded": True}

    def test_transactions_limit_bounds(self, client_for):
        assert client_for().get("/api/v1/credits/transactions?limit=0").status_code == 422
        assert client_for().get("/api/v1/credits/transactions?limit=101").status_code == 422

    def test_transactions(self, client_for, user_id):
        with patch("app.routers.credits.CreditService") as credits:
            credits.get_transactions.return_value = []

            response = client_for().get("/api/v1/credits/transactions?limit=5")

        assert response.json() == {"transactions": [], "count": 0}
        assert credits.get_transactions.call_args.kwargs["limit"] == 5
