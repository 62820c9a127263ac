from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class CompoundCard(BaseModel):
    id: int
    slug: str
    name: str
    image: str
    developer: str = "N/A"
    location: str = "N/A"


class CompoundDetail(BaseModel):
    id: int
    slug: str
    name: str
    description: str
    developer: str
    location: str
    status: str
    delivery: str
    main_image: str
    gallery: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    inquiry_url: Optional[str] = None


class Developer(BaseModel):
    id: int
    slug: str
    name: str
    description: str
    logo_url: str
    projects_count: int = 0


class DeveloperPage(BaseModel):
    developer: Developer
    compounds: List[CompoundCard] = Field(default_factory=list)


class Location(BaseModel):
    id: int
    slug: str
    name: str


class PostAuthor(BaseModel):
    name: str
    picture_url: Optional[str] = None


class PostImage(BaseModel):
    url: Optional[str] = None
    alt: str = ""


class Post(BaseModel):
    id: int
    slug: str
    title: str
    excerpt: str
    content: str
    date: str
    author: PostAuthor
    image: PostImage


class SearchResponse(BaseModel):
    """One page of search results.

    ``message`` is set only when results could not be loaded; the page still
    renders with an empty list.
    """

    compounds: List[CompoundCard] = Field(default_factory=list)
    total_matches: int = 0
    total_pages: int = 0
    page: int = 1
    page_size: int = 12
    message: Optional[str] = None


class DescriptionResponse(BaseModel):
    error: Optional[str] = None
    description: str = ""
    summary: str = ""


class WhatsAppLinkRequest(BaseModel):
    details: Dict[str, Any] = Field(default_factory=dict)


class WhatsAppLinkResponse(BaseModel):
    url: str
