from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional


NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class ResolvedImage:
    url: str
    alt: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Developer:
    id: int
    slug: str
    name: str
    description: str
    logo_url: str
    projects_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Location:
    id: int
    slug: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CompoundCard:
    """Listing projection of a compound (home, new launches, search, developer pages)."""

    id: int
    slug: str
    name: str
    image: str
    developer: str = NOT_AVAILABLE
    location: str = NOT_AVAILABLE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CompoundDetail:
    id: int
    slug: str
    name: str
    description: str
    developer: str
    location: str
    status: str
    delivery: str
    main_image: str
    gallery: List[str] = field(default_factory=list)
    amenities: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PostAuthor:
    name: str
    picture_url: Optional[str] = None


@dataclass(frozen=True)
class PostImage:
    # Featured image may legitimately be missing.
    url: Optional[str] = None
    alt: str = ""


@dataclass(frozen=True)
class Post:
    id: int
    slug: str
    title: str
    excerpt: str
    content: str
    date: str
    author: PostAuthor
    image: PostImage

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DeveloperPage:
    developer: Developer
    compounds: List[CompoundCard] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "developer": self.developer.to_dict(),
            "compounds": [c.to_dict() for c in self.compounds],
        }


@dataclass(frozen=True)
class SearchPage:
    """One page of matched compounds (raw, relationship-resolved records)."""

    compounds: List[Dict[str, Any]]
    total_matches: int
    total_pages: int
    page: int = 1
    page_size: int = 12
    failed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compounds": list(self.compounds),
            "total_matches": self.total_matches,
            "total_pages": self.total_pages,
            "page": self.page,
            "page_size": self.page_size,
        }
