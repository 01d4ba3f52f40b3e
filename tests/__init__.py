# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Trayve Media API:
# - test_tiers.py / test_badge.py / test_display_url.py / test_actions.py /
#   test_resolver.py: The display decision engine
# - test_access.py: Base model access per tier
# - test_models.py: Pydantic model validation
# - test_services.py: Supabase-backed services (client patched)
# - test_background_removal.py: Removal service, worker task, provider client
# - test_routes.py: API endpoints through TestClient
#
# Run tests with: pytest
# =============================================================================
