from __future__ import annotations

import asyncio
from typing import Any, List, Mapping, Optional

from four_seasons_catalog.cms.client import CmsClient, embed_params
from four_seasons_catalog.images import ImageResolver
from four_seasons_catalog.log import get_logger
from four_seasons_catalog.models import Post, PostAuthor, PostImage
from four_seasons_catalog.sanitize import safe_string, strip_tags


logger = get_logger("cms")

COLLECTION = "posts"


def _first_embedded(post: Mapping, key: str) -> Optional[Mapping]:
    embedded = post.get("_embedded")
    if not isinstance(embedded, Mapping):
        return None
    items = embedded.get(key)
    if isinstance(items, list) and items and isinstance(items[0], Mapping):
        return items[0]
    return None


async def _author_picture(images: ImageResolver, author: Optional[Mapping]) -> Optional[str]:
    if not author:
        return None
    avatars = author.get("avatar_urls")
    avatar = avatars.get("96") if isinstance(avatars, Mapping) else None
    if avatar:
        return avatar
    acf = author.get("acf") if isinstance(author.get("acf"), Mapping) else {}
    picture_id = acf.get("profile_picture")
    if picture_id:
        return await images.get_image_url_by_id(picture_id, "thumbnail")
    return None


async def flatten_post(images: ImageResolver, post: Mapping) -> Post:
    author = _first_embedded(post, "author")
    featured = _first_embedded(post, "wp:featuredmedia") or {}
    title = safe_string(post.get("title"))
    return Post(
        id=post.get("id") or 0,
        slug=post.get("slug") or "",
        title=title,
        excerpt=strip_tags(safe_string(post.get("excerpt"))),
        content=safe_string(post.get("content")),
        date=post.get("date") or "",
        author=PostAuthor(
            name=(author or {}).get("name") or "Anonymous",
            picture_url=await _author_picture(images, author),
        ),
        image=PostImage(
            url=featured.get("source_url") or None,
            alt=featured.get("alt_text") or title,
        ),
    )


async def get_posts(client: CmsClient, images: ImageResolver, limit: int = 100) -> List[Post]:
    result = await client.get_json(COLLECTION, embed_params(("per_page", limit)))
    if not result.ok or not isinstance(result.value, list):
        logger.error("Failed to fetch posts: %s", result.error or "unexpected payload")
        return []
    try:
        return list(await asyncio.gather(*[flatten_post(images, p) for p in result.value]))
    except Exception:
        logger.exception("Failed to flatten posts")
        return []


async def get_post_by_slug(client: CmsClient, images: ImageResolver, slug: str) -> Optional[Post]:
    if not slug:
        return None
    result = await client.get_json(COLLECTION, embed_params(("slug", slug)))
    if not result.ok:
        logger.error("Failed to fetch post '%s': %s", slug, result.error)
        return None
    records: Any = result.value if isinstance(result.value, list) else []
    if not records:
        return None
    try:
        return await flatten_post(images, records[0])
    except Exception:
        logger.exception("Failed to flatten post '%s'", slug)
        return None
