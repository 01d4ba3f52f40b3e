# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Identifies the Shopify shop behind a request and its Trayve user.
#
# Usage:
#   from app.auth import get_current_shop_user, ShopUser
#
#   @router.get("/protected")
#   async def protected(user: ShopUser = Depends(get_current_shop_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import (
    get_current_shop_user,
    get_shop_domain,
    get_viewer_tier,
)
from app.auth.models import ShopUser, ShopUserResponse

__all__ = [
    "get_current_shop_user",
    "get_shop_domain",
    "get_viewer_tier",
    "ShopUser",
    "ShopUserResponse",
]
