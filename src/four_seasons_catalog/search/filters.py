from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from four_seasons_catalog.sanitize import clean_html_content, safe_string


ALL_LOCATIONS = "all-locations"
ALL_DEVELOPERS = "all-developers"
DEFAULT_PAGE_SIZE = 12


def _title_text(compound: Mapping) -> str:
    return safe_string(compound.get("title"))


def _location_text(compound: Mapping) -> str:
    return compound.get("locationName") or ""


def _developer_text(compound: Mapping) -> str:
    return compound.get("developerName") or ""


def _description_text(compound: Mapping) -> str:
    content = compound.get("content")
    if isinstance(content, Mapping) and content.get("rendered"):
        return clean_html_content(safe_string(content.get("rendered")))
    return ""


# Fields the free-text query is matched against (substring, case-insensitive).
TEXT_FIELDS: Dict[str, Callable[[Mapping], str]] = {
    "title": _title_text,
    "location": _location_text,
    "developer": _developer_text,
    "description": _description_text,
}


def _first(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _page_number(value: Any) -> int:
    try:
        page = int(float(_first(value) or 0))
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


@dataclass(frozen=True)
class SearchFilters:
    query: Optional[str] = None
    location: Optional[str] = None
    developer: Optional[str] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def search_term(self) -> str:
        return (self.query or "").lower().strip()

    @property
    def filters_location(self) -> bool:
        return bool(self.location) and self.location != ALL_LOCATIONS

    @property
    def filters_developer(self) -> bool:
        return bool(self.developer) and self.developer != ALL_DEVELOPERS

    @classmethod
    def from_params(
        cls, params: Mapping[str, Any], page_size: int = DEFAULT_PAGE_SIZE
    ) -> "SearchFilters":
        """Build filters from query-string style params (values may be lists)."""
        return cls(
            query=_first(params.get("q")),
            location=_first(params.get("location")),
            developer=_first(params.get("developer")),
            page=_page_number(params.get("page")),
            page_size=page_size,
        )
