# =============================================================================
# core/display/urls.py - Display URL Resolver
# =============================================================================
# Chooses which image URL represents a record right now, and which versions
# are offered for download in the full-size viewer.
# =============================================================================

from core.models.display import DownloadOption
from core.models.media import MediaRecord, Tier

from .tiers import grants_4k, mask_for_tier


def resolve_display_url(
    record: MediaRecord,
    tier: Tier,
    fallback_clothing_image_url: str | None = None,
) -> str:
    """
    Pick the preview URL for a record.

    Fallback chain, first present URL wins:
    - 4K tiers: face swap -> 4K upscale -> 2K upscale -> try-on -> clothing
    - free/creator: 2K upscale -> try-on -> clothing

    A fresh job with no output yet shows the source garment. Returns an
    empty string only when nothing at all is available.
    """
    visible = mask_for_tier(record, tier)

    if grants_4k(tier):
        chain = (
            visible.face_swap.url,
            visible.enhanced_upscale.url,
            visible.basic_upscale.url,
            visible.base_image_url,
        )
    else:
        chain = (
            visible.basic_upscale.url,
            visible.base_image_url,
        )

    for url in (*chain, fallback_clothing_image_url):
        if url:
            return url
    return ""


def resolve_download_options(
    record: MediaRecord,
    tier: Tier,
    project_name: str = "image",
    index: int = 0,
) -> list[DownloadOption]:
    """
    List the versions of a record the viewer can download.

    - Standard: the try-on image (2K upscale when no try-on URL exists)
    - 4K: the enhanced upscale, 4K tiers only
    - BG Removed: the background-removed cutout

    Args:
        record: Pipeline snapshot
        tier: Viewer tier
        project_name: Used as the filename prefix
        index: Zero-based position of the image in its project

    Returns:
        Download options in display order (may be empty)
    """
    visible = mask_for_tier(record, tier)
    prefix = f"{project_name or 'image'}_{index + 1}"
    options: list[DownloadOption] = []

    standard_url = visible.base_image_url or visible.basic_upscale.url
    if standard_url:
        options.append(DownloadOption(
            label="Standard", url=standard_url, filename=f"{prefix}_Standard.png",
        ))

    if grants_4k(tier) and visible.enhanced_upscale.url:
        options.append(DownloadOption(
            label="4K", url=visible.enhanced_upscale.url, filename=f"{prefix}_4K.png",
        ))

    if visible.background_removal.url:
        options.append(DownloadOption(
            label="BG Removed",
            url=visible.background_removal.url,
            filename=f"{prefix}_BG_Removed.png",
        ))

    return options
