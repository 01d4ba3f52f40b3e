# =============================================================================
# lib/background_removal.py - Background Removal Provider Client
# =============================================================================
# Thin HTTP client for the background removal provider (fal.ai rembg by
# default). Sends an image URL, gets back the URL of a transparent PNG.
#
# Usage:
#   from lib.background_removal import remove_background
#   cutout_url = remove_background("https://.../tryon.png")
# =============================================================================

import logging
from typing import Any

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class BackgroundRemovalError(Exception):
    """Error calling the background removal provider."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        # Timeouts and 5xx are retryable unless stated otherwise
        if retryable is None:
            retryable = status_code is None or status_code >= 500
        self.retryable = retryable


def _extract_image_url(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    image = payload.get("image")
    if isinstance(image, dict):
        return image.get("url")
    if isinstance(image, str):
        return image
    return payload.get("image_url")


def remove_background(image_url: str) -> str:
    """
    Remove the background of an image.

    Args:
        image_url: Publicly reachable source image

    Returns:
        URL of the background-removed image

    Raises:
        BackgroundRemovalError: On HTTP errors, timeouts, or a body that is
            not JSON or carries no image URL
    """
    headers = {"Content-Type": "application/json"}
    if settings.FAL_KEY:
        headers["Authorization"] = f"Key {settings.FAL_KEY}"

    try:
        response = httpx.post(
            settings.BG_REMOVAL_API_URL,
            json={"image_url": image_url},
            headers=headers,
            timeout=settings.BG_REMOVAL_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise BackgroundRemovalError(
            f"Provider returned {e.response.status_code}: {e.response.text[:200]}",
            status_code=e.response.status_code,
        )
    except httpx.HTTPError as e:
        raise BackgroundRemovalError(f"Provider request failed: {e}")

    try:
        payload = response.json()
    except ValueError:
        raise BackgroundRemovalError(
            f"Provider returned a non-JSON body: {response.text[:200]}",
            status_code=response.status_code,
        )

    result_url = _extract_image_url(payload)
    if not isinstance(result_url, str) or not result_url:
        raise BackgroundRemovalError("Provider response did not include an image URL", retryable=False)

    logger.info(f"Background removed: {image_url} -> {result_url}")
    return result_url
