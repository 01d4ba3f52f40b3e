# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains clients for external services:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - background_removal.py: HTTP client for the background removal provider
# - upscale.py: HTTP client for the upscale provider (Replicate)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.background_removal import BackgroundRemovalError, remove_background
from lib.upscale import UpscaleError, upscale_image

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Background removal
    "BackgroundRemovalError",
    "remove_background",
    # Upscale
    "UpscaleError",
    "upscale_image",
]
