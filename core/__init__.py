# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the API:
# - models/: Pydantic schemas for records, decisions and API contracts
# - display/: Pure display decision engine (badge, URL, actions)
# - services/: Supabase-backed operations used by routes and workers
#
# Nothing here depends on FastAPI routing or Celery, so the same code runs
# in the API process and in workers.
# =============================================================================
