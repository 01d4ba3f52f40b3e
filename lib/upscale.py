# =============================================================================
# lib/upscale.py - Upscale Provider Client
# =============================================================================
# HTTP client for the Replicate crystal-upscaler model. Creates a
# prediction, polls it until it finishes and returns the output image URL.
# A prediction that runs past UPSCALE_TIMEOUT_SECONDS is cancelled.
#
# Usage:
#   from lib.upscale import upscale_image
#   url = upscale_image("https://.../tryon.png", scale_factor=2)
# =============================================================================

import logging
import time
from typing import Any

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

# Replicate prediction states that will not change again
TERMINAL_STATES = {"succeeded", "failed", "canceled"}

# Seconds Replicate may hold the create request open waiting for output
SYNC_WAIT_SECONDS = 60


class UpscaleError(Exception):
    """Error calling the upscale provider."""

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


def _extract_output_url(output: Any) -> str | None:
    if isinstance(output, str):
        return output
    if isinstance(output, list) and output and isinstance(output[0], str):
        return output[0]
    if isinstance(output, dict) and isinstance(output.get("url"), str):
        return output["url"]
    return None


def _send(client: httpx.Client, method: str, url: str, **kwargs) -> dict[str, Any]:
    try:
        response = client.request(method, url, **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise UpscaleError(
            f"Provider returned {e.response.status_code}: {e.response.text[:200]}",
            status_code=e.response.status_code,
        )
    except httpx.HTTPError as e:
        raise UpscaleError(f"Provider request failed: {e}")

    try:
        payload = response.json()
    except ValueError:
        raise UpscaleError(
            f"Provider returned a non-JSON body: {response.text[:200]}",
            status_code=response.status_code,
        )

    if not isinstance(payload, dict):
        raise UpscaleError("Provider returned an unexpected prediction body", retryable=False)
    return payload


def _cancel(client: httpx.Client, prediction: dict[str, Any]) -> None:
    cancel_url = (prediction.get("urls") or {}).get("cancel")
    if not cancel_url:
        return
    try:
        client.post(cancel_url)
    except httpx.HTTPError as e:
        logger.warning(f"Failed to cancel prediction {prediction.get('id')}: {e}")


def upscale_image(image_url: str, scale_factor: int = 2) -> str:
    """
    Upscale an image.

    Args:
        image_url: Publicly reachable source image
        scale_factor: 1-4

    Returns:
        URL of the upscaled image

    Raises:
        UpscaleError: On HTTP errors, a failed or timed-out prediction, or a
            prediction without an output URL. Timeouts have no status code.
    """
    headers = {
        "Content-Type": "application/json",
        "Prefer": f"wait={SYNC_WAIT_SECONDS}",
    }
    if settings.REPLICATE_API_TOKEN:
        headers["Authorization"] = f"Bearer {settings.REPLICATE_API_TOKEN}"

    deadline = time.monotonic() + settings.UPSCALE_TIMEOUT_SECONDS

    with httpx.Client(headers=headers, timeout=SYNC_WAIT_SECONDS + 30) as client:
        prediction = _send(client, "POST", settings.UPSCALE_API_URL, json={
            "input": {"image": image_url, "scale_factor": scale_factor},
        })

        while prediction.get("status") not in TERMINAL_STATES:
            if time.monotonic() > deadline:
                _cancel(client, prediction)
                raise UpscaleError("Upscale timed out")

            get_url = (prediction.get("urls") or {}).get("get")
            if not get_url:
                raise UpscaleError("Provider prediction has no status URL", retryable=False)

            time.sleep(settings.UPSCALE_POLL_INTERVAL_SECONDS)
            prediction = _send(client, "GET", get_url)

    if prediction["status"] != "succeeded":
        raise UpscaleError(
            f"Prediction {prediction['status']}: {prediction.get('error')}",
            retryable=False,
        )

    result_url = _extract_output_url(prediction.get("output"))
    if not result_url:
        raise UpscaleError("Provider completed without an output URL", retryable=False)

    logger.info(f"Upscaled x{scale_factor}: {image_url} -> {result_url}")
    return result_url
