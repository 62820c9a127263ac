from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional

from four_seasons_catalog.cms.client import CmsClient, embed_params, is_record_id
from four_seasons_catalog.cms.developers import fetch_developer_by_id, fetch_developer_by_slug
from four_seasons_catalog.cms.locations import fetch_location_by_id
from four_seasons_catalog.cms.pagination import (
    COMPOUND_COLLECTION,
    compound_page_params,
    fetch_all_compounds,
)
from four_seasons_catalog.cms.relationships import (
    RelationshipResolver,
    extract_developer_ref,
    extract_display_name,
    extract_location_ref,
)
from four_seasons_catalog.config import MAX_PER_PAGE
from four_seasons_catalog.images import ImageResolver
from four_seasons_catalog.log import get_logger
from four_seasons_catalog.models import NOT_AVAILABLE, CompoundCard, CompoundDetail
from four_seasons_catalog.sanitize import safe_string


logger = get_logger("cms")

# Editors have used each of these for the project gallery; first non-empty list wins.
GALLERY_FIELDS = ("gallery_images", "gallery", "images", "project_gallery")


def build_resolver(client: CmsClient) -> RelationshipResolver:
    return RelationshipResolver(
        developer_lookup=lambda developer_id: fetch_developer_by_id(client, developer_id),
        location_lookup=lambda location_id: fetch_location_by_id(client, location_id),
    )


async def fetch_compounds(
    client: CmsClient,
    per_page: int = MAX_PER_PAGE,
    page: Optional[int] = None,
    location: Optional[str] = None,
    developer: Optional[str] = None,
    resolver: Optional[RelationshipResolver] = None,
) -> List[Dict[str, Any]]:
    resolver = resolver or build_resolver(client)
    per_page = per_page or MAX_PER_PAGE
    if per_page > MAX_PER_PAGE:
        return await fetch_all_compounds(
            client, resolver, location=location, developer=developer
        )

    result = await client.get_json(
        COMPOUND_COLLECTION,
        compound_page_params(min(per_page, MAX_PER_PAGE), page, location, developer),
    )
    if not result.ok or not isinstance(result.value, list):
        logger.error("Error fetching compounds: %s", result.error or "unexpected payload")
        return []
    try:
        return await resolver.resolve_many(
            [record for record in result.value if isinstance(record, Mapping)]
        )
    except Exception:
        logger.exception("Error resolving compound relationships")
        return []


def gallery_ids(compound: Mapping) -> List[int]:
    acf = compound.get("acf") if isinstance(compound.get("acf"), Mapping) else {}
    ids: List[int] = []
    for field in GALLERY_FIELDS:
        values = acf.get(field)
        if isinstance(values, list) and values:
            ids = [v for v in values if is_record_id(v)]
            break
    if not ids:
        embedded = (compound.get("_embedded") or {}).get("wp:featuredmedia")
        if isinstance(embedded, list):
            ids = [
                media.get("id")
                for media in embedded
                if isinstance(media, Mapping) and is_record_id(media.get("id"))
            ]
    return ids


def _featured_media_id(compound: Mapping) -> Optional[int]:
    embedded = (compound.get("_embedded") or {}).get("wp:featuredmedia")
    if isinstance(embedded, list) and embedded and isinstance(embedded[0], Mapping):
        return embedded[0].get("id")
    return None


def _amenities(acf: Mapping) -> List[str]:
    values = acf.get("amenities")
    if not isinstance(values, list):
        return []
    out: List[str] = []
    for item in values:
        if isinstance(item, Mapping):
            out.append(safe_string(item.get("name") or item))
        else:
            out.append(safe_string(item))
    return out


async def _lookup_or_none(coro_fn, ref):
    if ref is None or not ref.id:
        return None
    return await coro_fn(ref.id)


async def fetch_compound_by_slug(
    client: CmsClient, images: ImageResolver, slug: str
) -> Optional[CompoundDetail]:
    if not slug:
        return None
    result = await client.get_json(
        COMPOUND_COLLECTION, embed_params(("slug", slug), ("per_page", 1))
    )
    if not result.ok:
        logger.error("Failed to fetch compound by slug %s: %s", slug, result.error)
        return None
    records = result.value if isinstance(result.value, list) else []
    if not records:
        return None

    try:
        compound = records[0]
        acf = compound.get("acf") if isinstance(compound.get("acf"), Mapping) else {}
        developer_ref = extract_developer_ref(acf)
        location_ref = extract_location_ref(acf)

        developer_data, location_data = await asyncio.gather(
            _lookup_or_none(lambda i: fetch_developer_by_id(client, i), developer_ref),
            _lookup_or_none(lambda i: fetch_location_by_id(client, i), location_ref),
        )
        developer_name = extract_display_name(
            developer_data, (developer_ref.name if developer_ref else None) or NOT_AVAILABLE
        )
        location_name = extract_display_name(
            location_data, (location_ref.name if location_ref else None) or NOT_AVAILABLE
        )

        gallery, main_image = await asyncio.gather(
            images.get_image_urls_by_ids(gallery_ids(compound), "large"),
            images.extract_image_url_async(
                acf.get("banner_image") or _featured_media_id(compound), "large"
            ),
        )
        content = compound.get("content") or {}
        return CompoundDetail(
            id=compound.get("id") or 0,
            slug=compound.get("slug") or slug,
            name=safe_string(compound.get("title"), "Unnamed Compound"),
            description=safe_string(
                (content.get("rendered") if isinstance(content, Mapping) else None)
                or acf.get("description"),
                "No description available.",
            ),
            developer=developer_name,
            location=location_name,
            status=safe_string(acf.get("status"), "Available"),
            delivery=safe_string(acf.get("delivery_date"), "TBD"),
            main_image=main_image,
            gallery=list(gallery or []),
            amenities=_amenities(acf),
        )
    except Exception:
        logger.exception("Error fetching compound '%s'", slug)
        return None


def _developer_matches(compound: Mapping, developer: Mapping, slug: str) -> bool:
    title = safe_string(developer.get("title"))
    developer_name = compound.get("developerName")
    if developer_name and title:
        return developer_name.lower() == title.lower()
    acf = compound.get("acf") if isinstance(compound.get("acf"), Mapping) else {}
    embedded = acf.get("developer")
    if isinstance(embedded, Mapping) and embedded.get("post_name"):
        return embedded.get("post_name") == slug
    linked = acf.get("developer_to_developer")
    if isinstance(linked, list):
        return developer.get("id") in linked
    return False


async def fetch_compounds_by_developer(
    client: CmsClient,
    developer_slug: str,
    developer: Optional[Mapping] = None,
    resolver: Optional[RelationshipResolver] = None,
) -> List[Dict[str, Any]]:
    """Compounds built by one developer; pass ``developer`` when the record is already loaded."""
    try:
        if developer is None:
            developer = await fetch_developer_by_slug(client, developer_slug)
        if not developer:
            return []
        compounds = await fetch_compounds(client, per_page=150, resolver=resolver)
        return [c for c in compounds if _developer_matches(c, developer, developer_slug)]
    except Exception:
        logger.exception("Error fetching compounds by developer")
        return []


async def compound_card(
    images: ImageResolver, compound: Mapping, size: str = "medium"
) -> CompoundCard:
    acf = compound.get("acf") if isinstance(compound.get("acf"), Mapping) else {}
    image = await images.extract_image_url_async(acf.get("banner_image"), size)
    return CompoundCard(
        id=compound.get("id") or 0,
        slug=compound.get("slug") or "",
        name=safe_string(compound.get("title")),
        image=image,
        developer=compound.get("developerName") or NOT_AVAILABLE,
        location=compound.get("locationName") or NOT_AVAILABLE,
    )


async def compound_cards(
    images: ImageResolver, compounds: List[Mapping], size: str = "medium"
) -> List[CompoundCard]:
    return list(await asyncio.gather(*[compound_card(images, c, size) for c in compounds]))
