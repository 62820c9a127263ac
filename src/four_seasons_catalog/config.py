from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


DEFAULT_API_BASE = "https://4seasons-realestate.com/wp-json/wp/v2"
DEFAULT_SITE_ORIGIN = "https://4seasons-realestate.com"

# Hosts that may appear in an image URL handed to rendering.
ALLOWED_IMAGE_HOSTS = (
    "4seasons-realestate.com",
    "i0.wp.com",
    "i1.wp.com",
    "i2.wp.com",
    "i3.wp.com",
    "s0.wp.com",
    "s1.wp.com",
    "s2.wp.com",
    "wp.com",
    "wordpress.com",
    "placehold.co",
    "images.unsplash.com",
)

# Upstream REST API refuses per_page above this.
MAX_PER_PAGE = 100


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return float(str(raw).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class CatalogSettings:
    """Runtime configuration for the CMS client and its helpers.

    Every value has an env override; defaults match the production site.
    """

    api_base: str = DEFAULT_API_BASE
    site_origin: str = DEFAULT_SITE_ORIGIN
    user_agent: str = "four-seasons-catalog"
    http_timeout: float = 10.0
    bulk_timeout: float = 30.0
    bulk_max_pages: int = 10
    bulk_max_retries: int = 3
    bulk_base_delay: float = 1.0
    image_cache_ttl: Optional[float] = None
    image_cache_max_entries: int = 4096
    whatsapp_phone: str = "201015670391"
    ai_model: str = "claude-3-5-sonnet-20241022"
    anthropic_api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "CatalogSettings":
        return cls(
            api_base=_env_str("FSC_CMS_API_BASE", DEFAULT_API_BASE).rstrip("/"),
            site_origin=_env_str("FSC_SITE_ORIGIN", DEFAULT_SITE_ORIGIN).rstrip("/"),
            user_agent=_env_str("FSC_HTTP_USER_AGENT", "four-seasons-catalog"),
            http_timeout=_env_float("FSC_HTTP_TIMEOUT", 10.0),
            bulk_timeout=_env_float("FSC_BULK_TIMEOUT", 30.0),
            bulk_max_pages=_env_int("FSC_BULK_MAX_PAGES", 10),
            bulk_max_retries=_env_int("FSC_BULK_MAX_RETRIES", 3),
            bulk_base_delay=_env_float("FSC_BULK_BASE_DELAY", 1.0),
            image_cache_ttl=_env_float("FSC_IMAGE_CACHE_TTL", None),
            image_cache_max_entries=_env_int("FSC_IMAGE_CACHE_MAX", 4096),
            whatsapp_phone=_env_str("FSC_WHATSAPP_PHONE", "201015670391"),
            ai_model=_env_str("FSC_AI_MODEL", "claude-3-5-sonnet-20241022"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        )


@lru_cache(maxsize=1)
def get_settings() -> CatalogSettings:
    return CatalogSettings.from_env()


def reset_settings_cache() -> None:
    """Test helper to force env re-read."""

    get_settings.cache_clear()
