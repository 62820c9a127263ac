from __future__ import annotations

import asyncio
from typing import Any, List, Mapping, Optional, Tuple

import httpx

from four_seasons_catalog.ai.description import DescriptionGenerator, generate_description_action
from four_seasons_catalog.cache import ImageUrlCache
from four_seasons_catalog.cms.client import CmsClient
from four_seasons_catalog.cms.compounds import (
    build_resolver,
    compound_cards,
    fetch_compound_by_slug,
    fetch_compounds,
    fetch_compounds_by_developer,
)
from four_seasons_catalog.cms.developers import fetch_developer_by_slug, fetch_developers
from four_seasons_catalog.cms.locations import fetch_locations, location_id_map, location_option
from four_seasons_catalog.cms.posts import get_post_by_slug, get_posts
from four_seasons_catalog.config import CatalogSettings, get_settings
from four_seasons_catalog.images import ImageResolver
from four_seasons_catalog.messaging import (
    build_compound_inquiry_url,
    build_sell_property_message,
    build_whatsapp_url,
)
from four_seasons_catalog.models import (
    CompoundCard,
    CompoundDetail,
    Developer,
    DeveloperPage,
    Location,
    Post,
    SearchPage,
)
from four_seasons_catalog.sanitize import clean_html_content, safe_string
from four_seasons_catalog.search.filters import SearchFilters
from four_seasons_catalog.search.matcher import filter_compounds


LOGO_PLACEHOLDER = "/placeholder-logo.svg"

# Asking for more than one page makes fetch_compounds walk every page.
ALL_COMPOUNDS = 150


class Catalog:
    """Entry point for page-level callers (API routes, CLI).

    Holds one HTTP client, one image cache and one relationship resolver.
    """

    def __init__(
        self,
        settings: Optional[CatalogSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache: Optional[ImageUrlCache] = None,
        client: Optional[CmsClient] = None,
        description_generator: Optional[DescriptionGenerator] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or CmsClient(self.settings, transport=transport)
        self.images = ImageResolver(self.client, cache=cache)
        self.resolver = build_resolver(self.client)
        self.description_generator = description_generator

    async def __aenter__(self) -> "Catalog":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _developer_summary(
        self, record: Mapping, logo_size: str = "thumbnail"
    ) -> Developer:
        acf = record.get("acf") if isinstance(record.get("acf"), Mapping) else {}
        logo_url = await self.images.extract_image_url_async(
            acf.get("logo"), logo_size, LOGO_PLACEHOLDER
        )
        return Developer(
            id=record.get("id") or 0,
            slug=record.get("slug") or "",
            name=safe_string(record.get("title"), "Unnamed Developer"),
            description=clean_html_content(safe_string(record.get("content"))),
            logo_url=logo_url,
            projects_count=0,
        )

    async def developers(self) -> List[Developer]:
        records = await fetch_developers(self.client)
        return list(await asyncio.gather(*[self._developer_summary(r) for r in records]))

    async def developer_page(self, slug: str) -> Optional[DeveloperPage]:
        record = await fetch_developer_by_slug(self.client, slug)
        if not record:
            return None
        compounds = await fetch_compounds_by_developer(
            self.client, slug, developer=record, resolver=self.resolver
        )
        developer = await self._developer_summary(record, logo_size="medium")
        cards = await compound_cards(self.images, compounds, size="large")
        return DeveloperPage(developer=developer, compounds=cards)

    async def locations(self) -> List[Location]:
        return [location_option(r) for r in await fetch_locations(self.client)]

    async def compounds(
        self, per_page: int = 100, page: Optional[int] = None
    ) -> List[dict]:
        return await fetch_compounds(
            self.client, per_page=per_page, page=page, resolver=self.resolver
        )

    async def compound_cards(
        self, per_page: int = 12, page: Optional[int] = None
    ) -> List[CompoundCard]:
        return await compound_cards(self.images, await self.compounds(per_page, page))

    async def compound(self, slug: str) -> Optional[CompoundDetail]:
        return await fetch_compound_by_slug(self.client, self.images, slug)

    async def search(self, filters: SearchFilters) -> Tuple[SearchPage, List[CompoundCard]]:
        compounds, location_records = await asyncio.gather(
            fetch_compounds(self.client, per_page=ALL_COMPOUNDS, resolver=self.resolver),
            fetch_locations(self.client),
        )
        page = filter_compounds(compounds, filters, location_id_map(location_records))
        return page, await compound_cards(self.images, page.compounds)

    async def posts(self, limit: int = 100) -> List[Post]:
        return await get_posts(self.client, self.images, limit)

    async def post(self, slug: str) -> Optional[Post]:
        return await get_post_by_slug(self.client, self.images, slug)

    async def generate_description(self, payload: Mapping[str, Any]) -> dict:
        return await generate_description_action(payload, self.description_generator)

    def sell_property_whatsapp_url(self, details: Mapping[str, Any]) -> str:
        return build_whatsapp_url(build_sell_property_message(details))

    def compound_inquiry_url(self, compound_name: str) -> str:
        return build_compound_inquiry_url(compound_name, self.settings.whatsapp_phone)
