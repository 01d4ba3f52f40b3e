# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - projects.py: Results gallery, rename and delete
# - images.py: Per-image actions (background removal)
# - credits.py: Credit balance, deduction and ledger
# - subscription.py: Active subscription and tier
# - pipeline.py: Pipeline execution status polling
# - models.py: Base model catalog with per-tier access
# - tasks.py: Background task status endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import projects
from . import images
from . import credits
from . import subscription
from . import pipeline
from . import models
from . import tasks

__all__ = [
    "health",
    "projects",
    "images",
    "credits",
    "subscription",
    "pipeline",
    "models",
    "tasks",
]
