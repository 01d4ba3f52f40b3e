# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Builders for MediaRecords and generation_results rows
# - A chainable fake for Supabase query builders
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("FAL_KEY", "test-fal-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from unittest.mock import MagicMock

import pytest

from core.models.media import MediaRecord, StageState

# Query builder methods that return the builder itself
_BUILDER_METHODS = (
    "select", "eq", "neq", "in_", "contains", "order", "limit",
    "single", "maybe_single", "update", "insert", "upsert", "delete",
    "or_", "is_",
)


def stage(status: str | None = None, url: str | None = None) -> StageState:
    """Shorthand for a StageState."""
    return StageState(url=url, status=status)


def make_record(
    base: str | None = None,
    basic: StageState | None = None,
    enhanced: StageState | None = None,
    face_swap: StageState | None = None,
    bg: StageState | None = None,
    record_id: str = "result-1",
) -> MediaRecord:
    """Build a MediaRecord; omitted stages are pending with no URL."""
    return MediaRecord(
        id=record_id,
        base_image_url=base,
        basic_upscale=basic,
        enhanced_upscale=enhanced,
        face_swap=face_swap,
        background_removal=bg,
    )


def make_query(data=None) -> MagicMock:
    """
    Fake PostgREST query builder.

    Every builder method returns the same object, and execute() returns a
    response whose `.data` is `data`.
    """
    query = MagicMock()
    for name in _BUILDER_METHODS:
        getattr(query, name).return_value = query
    query.execute.return_value = MagicMock(data=data)
    return query


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def sample_result_row():
    """A generation_results row with a finished 2K and a running 4K."""
    return {
        "id": "result-1",
        "project_id": "project-1",
        "pose_id": 7,
        "pose_name": None,
        "result_image_url": "https://cdn.test/tryon.png",
        "generation_tier": "professional",
        "removed_bg_url": None,
        "created_at": "2025-06-01T10:30:00Z",
        "poses": {"id": 7, "name": "Front"},
        "generation_metadata": {
            "status": "completed",
            "tryon_url": "https://cdn.test/tryon.png",
            "basic_upscale_url": "https://cdn.test/2k.png",
            "basic_upscale_status": "completed",
            "upscale_status": "processing",
            "face_swap_status": "pending",
        },
    }


@pytest.fixture
def sample_project():
    """A user_generation_projects row."""
    return {
        "id": "project-1",
        "user_id": "11111111-1111-1111-1111-111111111111",
        "name": "Summer",
        "clothing_image_url": "https://cdn.test/dress.png",
        "created_at": "2025-06-01T10:00:00Z",
    }


@pytest.fixture
def user_id():
    return "11111111-1111-1111-1111-111111111111"
