from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from four_seasons_catalog.cms.client import CmsClient, embed_params, is_record_id
from four_seasons_catalog.config import MAX_PER_PAGE
from four_seasons_catalog.log import get_logger
from four_seasons_catalog.models import Location
from four_seasons_catalog.sanitize import safe_string


logger = get_logger("cms")

COLLECTION = "location"


async def fetch_locations(client: CmsClient) -> List[Dict[str, Any]]:
    result = await client.get_json(COLLECTION, embed_params(("per_page", MAX_PER_PAGE)))
    if not result.ok:
        logger.error("Error fetching locations: %s", result.error)
        return []
    return result.value if isinstance(result.value, list) else []


async def fetch_location_by_slug(client: CmsClient, slug: str) -> Optional[Dict[str, Any]]:
    if not slug:
        return None
    result = await client.get_json(
        COLLECTION, embed_params(("slug", slug), ("per_page", 1))
    )
    if not result.ok:
        logger.error("Error fetching location '%s': %s", slug, result.error)
        return None
    records = result.value if isinstance(result.value, list) else []
    return records[0] if records else None


async def fetch_location_by_id(client: CmsClient, location_id: Any) -> Optional[Dict[str, Any]]:
    if not is_record_id(location_id):
        return None
    result = await client.get_json(f"{COLLECTION}/{location_id}", embed_params())
    if not result.ok:
        if result.status is not None:
            logger.warning(
                "Could not fetch location with ID %s. Status: %s", location_id, result.status
            )
        else:
            logger.error("Error fetching location with ID %s: %s", location_id, result.error)
        return None
    return result.value if isinstance(result.value, dict) else None


def location_option(record: Mapping) -> Location:
    # Search form labels prefer the ACF name over the term name.
    acf = record.get("acf") if isinstance(record.get("acf"), Mapping) else {}
    name = (
        acf.get("name")
        or safe_string(record.get("title"))
        or record.get("name")
        or "Unnamed Location"
    )
    return Location(id=record.get("id") or 0, slug=record.get("slug") or "", name=str(name))


def location_id_map(records: List[Mapping]) -> Dict[str, int]:
    return {r.get("slug"): r.get("id") for r in records if r.get("slug")}
