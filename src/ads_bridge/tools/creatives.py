"""
Ad creative and thumbnail tools.

Both tools look ads up through Graph batch requests and embed the images
they find as base64 image items. An image that fails to download, or is
larger than the configured limit, is reported in the text summary and
skipped; it never fails the call.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ads_bridge._exceptions import AdsBridgeError
from ads_bridge.graph_api import GraphAPIClient
from ads_bridge.types import ImageContent, ToolResult, image_content, text_content

from ._validation import CreativesArgs, ThumbnailsArgs, validate_args

__all__ = [
    "get_ad_creatives",
    "get_ad_thumbnails",
    "best_image_url",
    "creative_type",
    "fetch_image",
]

logger = logging.getLogger(__name__)

CREATIVE_FIELDS = (
    "id,name,creative{id,image_url,thumbnail_url,"
    "object_story_spec{video_data{image_url},link_data{name,message,caption,call_to_action}},"
    "asset_feed_spec{images{url},videos,titles{text},bodies{text},call_to_action_types}}"
)

THUMBNAIL_FIELDS = (
    "id,name,creative{id,thumbnail_url,image_url,"
    "asset_feed_spec{images{hash},titles{text},bodies{text}},"
    "object_story_spec{link_data{image_hash}}}"
)

BATCH_SIZE = 10
DEFAULT_MAX_IMAGE_MB = 5
BYTES_PER_MB = 1024 * 1024

_EXTENSION_TYPES = ((".png", "image/png"), (".gif", "image/gif"), (".webp", "image/webp"))


# ---------------------------------------------------------------------- shared


async def fetch_image(
    graph: GraphAPIClient, url: str, max_bytes: int
) -> tuple[ImageContent, int]:
    """Download *url* as an image item; also returns its size in bytes."""
    data, content_type = await graph.download(url, max_bytes=max_bytes)

    mime_type = content_type
    if not mime_type.startswith("image/"):
        path = url.split("?", 1)[0].lower()
        mime_type = next(
            (kind for ext, kind in _EXTENSION_TYPES if path.endswith(ext)), "image/jpeg"
        )

    return image_content(base64.b64encode(data).decode("ascii"), mime_type), len(data)


def _batch_body(response: Any) -> Optional[dict[str, Any]]:
    if not isinstance(response, dict) or response.get("code") != 200 or not response.get("body"):
        return None
    try:
        body = json.loads(response["body"])
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _batch_status(response: Any) -> str:
    return str(response.get("code")) if isinstance(response, dict) else "no response"


def _first(items: Any, key: str) -> Any:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0].get(key)
    return None


# ---------------------------------------------------------------------- creatives


def best_image_url(creative: dict[str, Any]) -> Optional[str]:
    """Dynamic creative image, then video still, then image_url, then thumbnail."""
    asset_feed = creative.get("asset_feed_spec") or {}
    story = creative.get("object_story_spec") or {}
    return (
        _first(asset_feed.get("images"), "url")
        or (story.get("video_data") or {}).get("image_url")
        or creative.get("image_url")
        or creative.get("thumbnail_url")
    )


def creative_type(creative: dict[str, Any]) -> str:
    asset_feed = creative.get("asset_feed_spec") or {}
    if (creative.get("object_story_spec") or {}).get("video_data"):
        return "video"
    if asset_feed.get("videos"):
        return "video"
    if len(asset_feed.get("images") or []) > 1:
        return "carousel"
    return "image"


def _creative_copy(creative: dict[str, Any]) -> dict[str, Any]:
    link = (creative.get("object_story_spec") or {}).get("link_data") or {}
    asset_feed = creative.get("asset_feed_spec") or {}
    call_to_action_types = asset_feed.get("call_to_action_types") or [None]
    return {
        "headline": link.get("name") or _first(asset_feed.get("titles"), "text"),
        "body": link.get("message") or _first(asset_feed.get("bodies"), "text"),
        "call_to_action": (link.get("call_to_action") or {}).get("type")
        or call_to_action_types[0],
    }


async def get_ad_creatives(graph: GraphAPIClient, args: dict[str, Any]) -> ToolResult:
    params = validate_args(CreativesArgs, args)
    logger.info("Fetching creatives for %d ads", len(params.ad_ids))

    responses = await graph.batch(
        [
            {"method": "GET", "relative_url": f"{ad_id}?fields={CREATIVE_FIELDS}"}
            for ad_id in params.ad_ids
        ]
    )

    ads: list[dict[str, Any]] = []
    failed: list[dict[str, str]] = []
    for index, ad_id in enumerate(params.ad_ids):
        response = responses[index] if index < len(responses) else None
        body = _batch_body(response)
        if body is None:
            logger.warning("Failed to get creative for ad %s: %s", ad_id, _batch_status(response))
            failed.append({"ad_id": ad_id, "error": f"Failed to fetch ad ({_batch_status(response)})"})
            continue

        creative = body.get("creative") or {}
        ads.append(
            {
                "ad_id": body.get("id", ad_id),
                "ad_name": body.get("name"),
                "creative": {
                    "id": creative.get("id"),
                    "type": creative_type(creative),
                    "image_url": best_image_url(creative),
                    **_creative_copy(creative),
                },
            }
        )

    images: list[ImageContent] = []
    if params.include_images:
        with_images = [ad for ad in ads if ad["creative"]["image_url"]]
        results = await asyncio.gather(
            *(
                fetch_image(graph, ad["creative"]["image_url"], DEFAULT_MAX_IMAGE_MB * BYTES_PER_MB)
                for ad in with_images
            ),
            return_exceptions=True,
        )
        for ad, result in zip(with_images, results):
            if isinstance(result, AdsBridgeError):
                logger.warning("Failed to download image for ad %s: %s", ad["ad_id"], result)
                ad["creative"]["image_error"] = result.message
            elif isinstance(result, BaseException):
                raise result
            else:
                ad["creative"]["image_embedded"] = True
                images.append(result[0])

    summary: dict[str, Any] = {"summary": f"Retrieved {len(ads)} ad creatives", "ads": ads}
    if failed:
        summary["failed"] = failed

    return {
        "content": [
            text_content(json.dumps(summary, indent=2, ensure_ascii=False)),
            *images,
        ]
    }


# ---------------------------------------------------------------------- thumbnails


@dataclass
class _EmbeddedImage:
    kind: str
    source: str
    url: str
    mime_type: str
    size_bytes: int


@dataclass
class _AdThumbnails:
    ad_id: str
    ad_name: str = "Unknown Ad"
    creative_id: Optional[str] = None
    creative_type: str = "unknown"
    error: Optional[str] = None
    embedded: list[_EmbeddedImage] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    images: list[ImageContent] = field(default_factory=list)
    dynamic_counts: Optional[tuple[int, int]] = None


async def _image_url_from_hash(
    graph: GraphAPIClient, ad_account_id: Optional[str], image_hash: str
) -> Optional[str]:
    if not ad_account_id:
        logger.warning("No ad account id configured; cannot resolve image hash %s", image_hash)
        return None

    account = ad_account_id.removeprefix("act_")
    try:
        response = await graph.get(
            f"/act_{account}/adimages",
            {"hashes": json.dumps([image_hash]), "fields": "hash,url,permalink_url"},
        )
    except AdsBridgeError as exc:
        logger.warning("Failed to resolve image hash %s: %s", image_hash, exc)
        return None

    return _first(response.get("data") if isinstance(response, dict) else None, "url")


async def _ad_thumbnails(
    graph: GraphAPIClient,
    ad: dict[str, Any],
    params: ThumbnailsArgs,
    ad_account_id: Optional[str],
) -> _AdThumbnails:
    result = _AdThumbnails(ad_id=str(ad.get("id")), ad_name=ad.get("name") or "Unknown Ad")

    creative = ad.get("creative")
    if not isinstance(creative, dict):
        result.error = "No creative data found"
        return result
    result.creative_id = creative.get("id")

    candidates: list[tuple[str, str, str]] = []
    if creative.get("thumbnail_url"):
        candidates.append(("thumbnail", "direct_thumbnail", creative["thumbnail_url"]))
    if creative.get("image_url"):
        candidates.append(("full_image", "direct_image", creative["image_url"]))
        result.creative_type = "image"

    asset_feed = creative.get("asset_feed_spec") or {}
    hashes = [image["hash"] for image in asset_feed.get("images") or [] if image.get("hash")]
    link_hash = ((creative.get("object_story_spec") or {}).get("link_data") or {}).get("image_hash")
    if link_hash:
        hashes.append(link_hash)

    for image_hash in dict.fromkeys(hashes):
        url = await _image_url_from_hash(graph, ad_account_id, image_hash)
        if url:
            candidates.append(("hash_converted", "image_hash", url))
            if result.creative_type == "unknown":
                result.creative_type = "image"

    if params.resolution == "thumbnail":
        candidates = [c for c in candidates if c[0] == "thumbnail"]
    elif params.resolution == "full":
        candidates = [c for c in candidates if c[0] != "thumbnail"]

    max_bytes = int(params.max_image_size_mb * BYTES_PER_MB)
    for kind, source, url in candidates:
        try:
            image, size = await fetch_image(graph, url, max_bytes)
        except AdsBridgeError as exc:
            logger.warning("Skipping %s image for ad %s: %s", kind, result.ad_id, exc)
            result.skipped.append(f"{kind} ({source}): {exc.message}")
            continue
        result.embedded.append(_EmbeddedImage(kind, source, url, image["mimeType"], size))
        result.images.append(image)

    if params.include_ad_details and asset_feed:
        result.dynamic_counts = (
            len(asset_feed.get("bodies") or []),
            len(asset_feed.get("titles") or []),
        )

    return result


async def _lookup_ads(graph: GraphAPIClient, ad_ids: list[str]) -> list[tuple[str, Any]]:
    """(ad_id, ad body or error string) per id, batched; falls back to single requests."""
    found: list[tuple[str, Any]] = []
    for start in range(0, len(ad_ids), BATCH_SIZE):
        batch = ad_ids[start:start + BATCH_SIZE]
        logger.info(
            "Processing batch %d/%d",
            start // BATCH_SIZE + 1,
            (len(ad_ids) + BATCH_SIZE - 1) // BATCH_SIZE,
        )
        try:
            responses = await graph.batch(
                [
                    {"method": "GET", "relative_url": f"{ad_id}?fields={THUMBNAIL_FIELDS}"}
                    for ad_id in batch
                ]
            )
        except AdsBridgeError as exc:
            logger.warning("Batch request failed, falling back to individual requests: %s", exc)
            for ad_id in batch:
                try:
                    found.append((ad_id, await graph.get(f"/{ad_id}", {"fields": THUMBNAIL_FIELDS})))
                except AdsBridgeError as single_exc:
                    found.append((ad_id, single_exc.message))
            continue

        for index, ad_id in enumerate(batch):
            response = responses[index] if index < len(responses) else None
            body = _batch_body(response)
            if body is None:
                logger.warning("Failed to get data for ad %s: %s", ad_id, _batch_status(response))
                found.append((ad_id, f"Failed to fetch ad data ({_batch_status(response)})"))
            else:
                found.append((ad_id, body))
    return found


def _thumbnails_summary(results: list[_AdThumbnails]) -> str:
    if not results:
        return "No thumbnail data found for the provided ad IDs."

    text = "**Ad Thumbnails Retrieved (Embedded)**\n\n"
    text += f"Found thumbnail data for {len(results)} ads:\n\n"

    total_images = 0
    total_bytes = 0
    total_skipped = 0
    for index, result in enumerate(results, start=1):
        text += f"**{index}. {result.ad_name}**\n"
        text += f"- Ad ID: {result.ad_id}\n"
        if result.creative_id:
            text += f"- Creative ID: {result.creative_id}\n"

        if result.error:
            text += f"- Error: {result.error}\n\n"
            continue

        text += f"- Type: {result.creative_type}\n"
        if result.embedded:
            text += f"- **Embedded Images ({len(result.embedded)}):**\n"
            for number, image in enumerate(result.embedded, start=1):
                text += f"  {number}. **{image.kind}** ({image.source})\n"
                text += f"     Size: {image.size_bytes / 1024:.1f}KB | Type: {image.mime_type}\n"
                total_bytes += image.size_bytes
            total_images += len(result.embedded)
        if result.skipped:
            text += f"- **Skipped Images ({len(result.skipped)}):**\n"
            text += "".join(f"  - {reason}\n" for reason in result.skipped)
            total_skipped += len(result.skipped)
        if result.dynamic_counts:
            bodies, titles = result.dynamic_counts
            text += f"- Dynamic Creative: {bodies} bodies, {titles} titles\n"
        text += "\n"

    text += "**Processing Summary:**\n"
    text += f"- Total Images Embedded: {total_images}\n"
    text += f"- Total Size: {total_bytes / 1024:.1f}KB\n"
    text += f"- Images Skipped: {total_skipped}\n"
    return text


async def get_ad_thumbnails(
    graph: GraphAPIClient,
    args: dict[str, Any],
    *,
    ad_account_id: Optional[str] = None,
) -> ToolResult:
    params = validate_args(ThumbnailsArgs, args)
    logger.info("Fetching and embedding thumbnails for %d ads", len(params.ad_ids))

    results: list[_AdThumbnails] = []
    for ad_id, ad in await _lookup_ads(graph, params.ad_ids):
        if isinstance(ad, dict):
            ad.setdefault("id", ad_id)
            results.append(await _ad_thumbnails(graph, ad, params, ad_account_id))
        else:
            results.append(_AdThumbnails(ad_id=ad_id, error=str(ad)))

    images = [image for result in results for image in result.images]
    return {"content": [text_content(_thumbnails_summary(results)), *images]}
