from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence

from four_seasons_catalog.cms.client import (
    CmsClient,
    RetryConfig,
    compute_backoff_delays,
    embed_params,
)
from four_seasons_catalog.cms.relationships import RelationshipResolver
from four_seasons_catalog.config import MAX_PER_PAGE
from four_seasons_catalog.log import get_logger
from four_seasons_catalog.result import FetchResult


logger = get_logger("cms")

COMPOUND_COLLECTION = "compound"


def compound_page_params(
    per_page: int,
    page: Optional[int] = None,
    location: Optional[str] = None,
    developer: Optional[str] = None,
):
    return embed_params(
        ("per_page", per_page),
        ("page", page),
        ("location", location),
        ("developer", developer),
    )


async def resolve_page(
    resolver: RelationshipResolver, records: Sequence[Mapping], page: int
) -> List[Dict[str, Any]]:
    """Resolve every record of a page; a record that fails stays raw.

    Elements that are not objects cannot be compounds and are dropped.
    """
    usable = [record for record in records if isinstance(record, Mapping)]
    if len(usable) != len(records):
        logger.warning(
            "Skipping %s malformed compound record(s) on page %s",
            len(records) - len(usable),
            page,
        )
    records = usable
    outcomes = await asyncio.gather(
        *[resolver.resolve_compound(record) for record in records],
        return_exceptions=True,
    )
    resolved: List[Dict[str, Any]] = []
    for record, outcome in zip(records, outcomes):
        if isinstance(outcome, Exception):
            logger.error(
                "Error resolving relationships for compound %s on page %s: %s",
                record.get("id"),
                page,
                outcome,
            )
            resolved.append(dict(record))
        else:
            resolved.append(outcome)
    return resolved


class CompoundPaginator:
    """Walks the compound collection page by page past the 100-per-page cap.

    Never raises: a page that keeps failing ends the walk and whatever was
    collected so far is returned.
    """

    def __init__(
        self,
        client: CmsClient,
        resolver: RelationshipResolver,
        per_page: int = MAX_PER_PAGE,
        max_pages: Optional[int] = None,
        retry_config: Optional[RetryConfig] = None,
        timeout: Optional[float] = None,
    ):
        settings = client.settings
        self.client = client
        self.resolver = resolver
        self.per_page = per_page
        self.max_pages = max_pages if max_pages is not None else settings.bulk_max_pages
        self.retry_config = retry_config or RetryConfig.from_settings(settings)
        self.timeout = timeout if timeout is not None else settings.bulk_timeout

    async def _fetch_page(
        self, page: int, location: Optional[str], developer: Optional[str]
    ) -> FetchResult:
        params = compound_page_params(self.per_page, page, location, developer)
        # retries counts attempts; backoff happens between them.
        attempts = max(1, int(self.retry_config.retries))
        delays = compute_backoff_delays(
            attempts - 1,
            self.retry_config.base_delay,
            self.retry_config.factor,
            self.retry_config.jitter,
        )
        last = FetchResult.failure("not attempted")
        for attempt in range(attempts):
            last = await self.client.get_json(
                COMPOUND_COLLECTION, params, timeout=self.timeout
            )
            if last.ok and not isinstance(last.value, list):
                last = FetchResult.failure("compound page is not a JSON array", last.status)
            if last.ok:
                return last
            if last.status == 400 and page > 1:
                return last
            logger.error(
                "Error fetching compounds page %s (attempt %s/%s): %s",
                page,
                attempt + 1,
                attempts,
                last.error,
            )
            if attempt < len(delays):
                await self.client.sleep_fn(delays[attempt])
        logger.error(
            "Failed to fetch page %s after %s attempts. Stopping pagination.", page, attempts
        )
        return last

    async def fetch_all(
        self, location: Optional[str] = None, developer: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        collected: List[Dict[str, Any]] = []
        page = 1
        while True:
            result = await self._fetch_page(page, location, developer)
            if not result.ok:
                # 400 past page 1 is how WordPress says "no such page".
                return collected
            records = result.value
            if not records:
                break
            collected.extend(await resolve_page(self.resolver, records, page))
            if len(records) < self.per_page:
                break
            page += 1
            if page > self.max_pages:
                logger.warning(
                    "Reached maximum page limit (%s) when fetching compounds", self.max_pages
                )
                break
        return collected


async def fetch_all_compounds(
    client: CmsClient,
    resolver: RelationshipResolver,
    location: Optional[str] = None,
    developer: Optional[str] = None,
    **options,
) -> List[Dict[str, Any]]:
    paginator = CompoundPaginator(client, resolver, **options)
    return await paginator.fetch_all(location=location, developer=developer)
