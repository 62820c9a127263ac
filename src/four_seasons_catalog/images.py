"""Turning CMS media references into absolute, allow-listed image URLs.

A media reference is either an embedded descriptor (``{"url", "alt",
"sizes"}``) or a bare attachment id. Ids are looked up through the
``media`` endpoint and cached per ``(id, size)``; every failure path ends in
a placehold.co URL so rendering always gets something to show.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, List, Mapping, Optional, Union
from urllib.parse import quote, urlparse

from four_seasons_catalog.cache import ImageUrlCache
from four_seasons_catalog.cms.client import CmsClient, is_record_id
from four_seasons_catalog.config import ALLOWED_IMAGE_HOSTS, DEFAULT_SITE_ORIGIN
from four_seasons_catalog.log import get_logger
from four_seasons_catalog.models import ResolvedImage


logger = get_logger("images")

MediaReference = Union[Mapping, int, None]

IMAGE_SIZES = ("thumbnail", "medium", "large", "full")

SIZE_DIMENSIONS = {
    "thumbnail": (150, 150),
    "medium": (300, 300),
    "large": (800, 600),
    "full": (1200, 800),
}


def normalize_image_url(url, site_origin: str = DEFAULT_SITE_ORIGIN):
    if not url or not isinstance(url, str):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if ".wp.com/" in url:
        return url
    if url.startswith("/"):
        return f"{site_origin.rstrip('/')}{url}"
    return url


def is_valid_image_url(url, allowed_hosts: Iterable[str] = ALLOWED_IMAGE_HOSTS) -> bool:
    if not url or not isinstance(url, str):
        return False
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return False
    if not hostname:
        return False
    return any(hostname == host or hostname.endswith(f".{host}") for host in allowed_hosts)


def generate_placeholder_image(width: int, height: int, text: str) -> str:
    return f"https://placehold.co/{width}x{height}.png?text={quote(text, safe='')}"


def _pick_media_url(media: Mapping, size: str) -> Optional[str]:
    details = media.get("media_details")
    sizes = details.get("sizes") if isinstance(details, Mapping) else None
    sized = sizes.get(size) if isinstance(sizes, Mapping) else None
    if isinstance(sized, Mapping) and sized.get("source_url"):
        return sized["source_url"]
    return media.get("source_url") or None


class ImageResolver:
    def __init__(
        self,
        client: CmsClient,
        cache: Optional[ImageUrlCache] = None,
        allowed_hosts: Iterable[str] = ALLOWED_IMAGE_HOSTS,
    ):
        self.client = client
        settings = client.settings
        self.cache = cache or ImageUrlCache(
            ttl=settings.image_cache_ttl,
            max_entries=settings.image_cache_max_entries,
        )
        self.site_origin = settings.site_origin
        self.allowed_hosts = tuple(allowed_hosts)

    def normalize(self, url):
        return normalize_image_url(url, self.site_origin)

    def is_valid(self, url) -> bool:
        return is_valid_image_url(url, self.allowed_hosts)

    async def get_image_url_by_id(
        self,
        media_id,
        size: str = "large",
        fallback_width: int = 800,
        fallback_height: int = 600,
        fallback_text: str = "Image Not Found",
    ) -> str:
        if not is_record_id(media_id):
            return generate_placeholder_image(fallback_width, fallback_height, fallback_text)

        cache_key = ImageUrlCache.key(media_id, size)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        result = await self.client.get_json(f"media/{media_id}")
        if not result.ok:
            if result.status is not None:
                logger.warning("Failed to fetch media %s: %s", media_id, result.status)
                text = f"Media {media_id} Not Found"
            else:
                logger.error("Error fetching media %s: %s", media_id, result.error)
                text = f"Error Loading Image {media_id}"
            fallback = generate_placeholder_image(fallback_width, fallback_height, text)
            self.cache.set(cache_key, fallback)
            return fallback

        media = result.value if isinstance(result.value, Mapping) else {}
        image_url = _pick_media_url(media, size)
        if image_url:
            image_url = self.normalize(image_url)
            if self.is_valid(image_url):
                self.cache.set(cache_key, image_url)
                return image_url
            logger.warning("Invalid or unconfigured image URL: %s", image_url)

        fallback = generate_placeholder_image(fallback_width, fallback_height, fallback_text)
        self.cache.set(cache_key, fallback)
        return fallback

    async def get_image_urls_by_ids(
        self,
        ids,
        size: str = "large",
        fallback_width: int = 800,
        fallback_height: int = 600,
    ) -> List[str]:
        if not isinstance(ids, (list, tuple)) or not ids:
            return []
        valid_ids = [media_id for media_id in ids if is_record_id(media_id)]
        if not valid_ids:
            return []
        try:
            return list(
                await asyncio.gather(
                    *[
                        self.get_image_url_by_id(
                            media_id,
                            size,
                            fallback_width,
                            fallback_height,
                            f"Gallery Image {index + 1}",
                        )
                        for index, media_id in enumerate(valid_ids)
                    ]
                )
            )
        except Exception:
            logger.exception("Error resolving multiple image IDs")
            return [
                generate_placeholder_image(
                    fallback_width, fallback_height, f"Gallery Image {index + 1}"
                )
                for index in range(len(valid_ids))
            ]

    async def extract_image_url_async(
        self,
        image: MediaReference,
        size: str = "medium",
        fallback: Optional[str] = None,
    ) -> str:
        if not image:
            return fallback or generate_placeholder_image(400, 300, "No Image")

        if isinstance(image, Mapping) and image.get("url"):
            sizes = image.get("sizes")
            sized = sizes.get(size) if isinstance(sizes, Mapping) else None
            image_url = self.normalize(sized or image["url"])
            if self.is_valid(image_url):
                return image_url
            logger.warning("Invalid or unconfigured image URL: %s", image_url)
            return generate_placeholder_image(400, 300, "Invalid Image")

        if isinstance(image, int) and not isinstance(image, bool):
            width, height = SIZE_DIMENSIONS.get(size, SIZE_DIMENSIONS["medium"])
            return await self.get_image_url_by_id(image, size, width, height, "Loading Image")

        return fallback or generate_placeholder_image(400, 300, "Invalid Image")

    async def resolve_image(
        self,
        image: MediaReference,
        size: str = "medium",
        fallback: Optional[str] = None,
    ) -> ResolvedImage:
        url = await self.extract_image_url_async(image, size, fallback)
        alt = None
        if isinstance(image, Mapping):
            alt = image.get("alt") or image.get("alt_text") or None
        return ResolvedImage(url=url, alt=alt)
