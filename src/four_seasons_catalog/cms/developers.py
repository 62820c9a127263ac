from __future__ import annotations

from typing import Any, Dict, List, Optional

from four_seasons_catalog.cms.client import CmsClient, embed_params, is_record_id
from four_seasons_catalog.config import MAX_PER_PAGE
from four_seasons_catalog.log import get_logger
from four_seasons_catalog.result import FetchResult


logger = get_logger("cms")

COLLECTION = "developer"


async def load_developers(client: CmsClient) -> FetchResult:
    result = await client.get_json(COLLECTION, embed_params(("per_page", MAX_PER_PAGE)))
    if result.ok and not isinstance(result.value, list):
        return FetchResult.failure("developer listing is not a JSON array", result.status)
    return result


async def fetch_developers(client: CmsClient) -> List[Dict[str, Any]]:
    result = await load_developers(client)
    if not result.ok:
        logger.error("Error fetching developers: %s", result.error)
    return result.value_or([])


async def fetch_developer_by_slug(client: CmsClient, slug: str) -> Optional[Dict[str, Any]]:
    if not slug:
        return None
    result = await client.get_json(
        COLLECTION, embed_params(("slug", slug), ("per_page", 1))
    )
    if not result.ok:
        logger.error("Error fetching developer '%s': %s", slug, result.error)
        return None
    records = result.value if isinstance(result.value, list) else []
    return records[0] if records else None


async def fetch_developer_by_id(client: CmsClient, developer_id: Any) -> Optional[Dict[str, Any]]:
    if not is_record_id(developer_id):
        return None
    result = await client.get_json(f"{COLLECTION}/{developer_id}", embed_params())
    if not result.ok:
        if result.status is not None:
            logger.warning(
                "Could not fetch developer with ID %s. Status: %s", developer_id, result.status
            )
        else:
            logger.error("Error fetching developer with ID %s: %s", developer_id, result.error)
        return None
    return result.value if isinstance(result.value, dict) else None
