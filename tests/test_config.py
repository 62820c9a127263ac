import pytest

from four_seasons_catalog.config import (
    DEFAULT_API_BASE,
    CatalogSettings,
    get_settings,
    reset_settings_cache,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()


def test_defaults(monkeypatch):
    for name in ("FSC_CMS_API_BASE", "FSC_BULK_MAX_PAGES", "FSC_IMAGE_CACHE_TTL", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.api_base == DEFAULT_API_BASE
    assert settings.bulk_max_pages == 10
    assert settings.bulk_max_retries == 3
    assert settings.bulk_timeout == 30.0
    assert settings.image_cache_ttl is None
    assert settings.anthropic_api_key is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("FSC_CMS_API_BASE", "http://localhost:8080/wp-json/wp/v2/")
    monkeypatch.setenv("FSC_BULK_MAX_PAGES", "4")
    monkeypatch.setenv("FSC_IMAGE_CACHE_TTL", "300")
    monkeypatch.setenv("FSC_WHATSAPP_PHONE", "201000000000")
    settings = get_settings()
    assert settings.api_base == "http://localhost:8080/wp-json/wp/v2"
    assert settings.bulk_max_pages == 4
    assert settings.image_cache_ttl == 300.0
    assert settings.whatsapp_phone == "201000000000"


def test_invalid_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("FSC_BULK_MAX_PAGES", "lots")
    monkeypatch.setenv("FSC_HTTP_TIMEOUT", "soon")
    settings = CatalogSettings.from_env()
    assert settings.bulk_max_pages == 10
    assert settings.http_timeout == 10.0


def test_settings_are_cached_until_reset(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("FSC_BULK_MAX_PAGES", "2")
    assert get_settings() is first
    reset_settings_cache()
    assert get_settings().bulk_max_pages == 2
