"""In-memory search over relationship-resolved compound records.

Records come from the bulk fetcher with ``developerName``/``locationName``
already set. Location and developer filters try several record shapes in a
fixed order; the first shape present on a record decides the match.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from four_seasons_catalog.log import get_logger
from four_seasons_catalog.models import SearchPage
from four_seasons_catalog.search.filters import TEXT_FIELDS, SearchFilters


logger = get_logger("search")


def _acf(compound: Mapping) -> Mapping:
    acf = compound.get("acf")
    return acf if isinstance(acf, Mapping) else {}


def matches_query(compound: Mapping, term: str) -> bool:
    if not term:
        return True
    return any(term in extract(compound).lower() for extract in TEXT_FIELDS.values())


def matches_location(
    compound: Mapping, selector: str, location_ids: Optional[Mapping[str, int]] = None
) -> bool:
    needle = selector.lower()
    location_name = compound.get("locationName")
    if location_name:
        return needle in location_name.lower()

    acf = _acf(compound)
    location = acf.get("location")
    if isinstance(location, Mapping):
        name = location.get("name")
        return location.get("slug") == selector or bool(name and needle in name.lower())
    if isinstance(location, str):
        return location == selector

    # Only matches when the selector is a known slug; an unknown selector
    # never matches here.
    selected_id = (location_ids or {}).get(selector)
    linked = acf.get("location_to_location")
    if isinstance(linked, list) and selected_id:
        return selected_id in linked
    return False


def matches_developer(compound: Mapping, selector: str) -> bool:
    needle = selector.lower()
    developer_name = compound.get("developerName")
    if developer_name:
        return needle in developer_name.lower()

    developer = _acf(compound).get("developer")
    if isinstance(developer, Mapping):
        title = developer.get("post_title")
        return developer.get("post_name") == selector or bool(
            title and needle in title.lower()
        )
    return False


def paginate(items: Sequence[Any], page: int, page_size: int) -> List[Any]:
    page = max(1, int(page or 1))
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def filter_compounds(
    compounds: Sequence[Mapping],
    filters: SearchFilters,
    location_ids: Optional[Mapping[str, int]] = None,
) -> SearchPage:
    try:
        matched: List[Dict[str, Any]] = list(compounds)

        term = filters.search_term
        if term:
            matched = [c for c in matched if matches_query(c, term)]

        if filters.filters_location:
            matched = [
                c for c in matched if matches_location(c, filters.location, location_ids)
            ]

        if filters.filters_developer:
            matched = [c for c in matched if matches_developer(c, filters.developer)]

        total = len(matched)
        return SearchPage(
            compounds=paginate(matched, filters.page, filters.page_size),
            total_matches=total,
            total_pages=math.ceil(total / filters.page_size),
            page=filters.page,
            page_size=filters.page_size,
        )
    except Exception:
        logger.exception("Error filtering compounds")
        return SearchPage(
            compounds=[],
            total_matches=0,
            total_pages=0,
            page=filters.page,
            page_size=filters.page_size,
            failed=True,
        )
