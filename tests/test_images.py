import asyncio
from urllib.parse import parse_qs, urlparse

import httpx

from four_seasons_catalog.images import (
    generate_placeholder_image,
    is_valid_image_url,
    normalize_image_url,
)


def _text_param(url):
    return parse_qs(urlparse(url).query)["text"][0]


def _media(url, sizes=None):
    return {
        "id": 1,
        "source_url": url,
        "media_details": {"sizes": {k: {"source_url": v} for k, v in (sizes or {}).items()}},
    }


def test_placeholder_url_format():
    url = generate_placeholder_image(400, 300, "No Image")
    assert url == "https://placehold.co/400x300.png?text=No%20Image"
    assert is_valid_image_url(url)


def test_normalize_image_url_variants():
    assert normalize_image_url("/wp-content/a.jpg") == "https://4seasons-realestate.com/wp-content/a.jpg"
    assert normalize_image_url("//cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"
    assert normalize_image_url("https://i0.wp.com/x/a.jpg") == "https://i0.wp.com/x/a.jpg"
    assert (
        normalize_image_url("//i0.wp.com/4seasons-realestate.com/a.jpg")
        == "https://i0.wp.com/4seasons-realestate.com/a.jpg"
    )
    assert normalize_image_url("https://images.unsplash.com/a") == "https://images.unsplash.com/a"
    assert normalize_image_url("") == ""
    assert normalize_image_url(None) is None


def test_is_valid_image_url_allow_list():
    assert is_valid_image_url("https://4seasons-realestate.com/a.jpg")
    assert is_valid_image_url("https://cdn.4seasons-realestate.com/a.jpg")
    assert is_valid_image_url("https://i2.wp.com/a.jpg")
    assert not is_valid_image_url("https://evil.example.com/a.jpg")
    assert not is_valid_image_url("https://not4seasons-realestate.com/a.jpg")
    assert not is_valid_image_url("")
    assert not is_valid_image_url(None)
    assert not is_valid_image_url("not a url")


def test_extract_image_url_async_without_image_returns_no_image_placeholder(image_resolver):
    url = asyncio.run(image_resolver.extract_image_url_async(None, "medium"))
    assert urlparse(url).hostname == "placehold.co"
    assert _text_param(url) == "No Image"


def test_extract_image_url_async_uses_caller_fallback(image_resolver):
    url = asyncio.run(
        image_resolver.extract_image_url_async(None, "thumbnail", "/placeholder-logo.svg")
    )
    assert url == "/placeholder-logo.svg"


def test_non_positive_ids_resolve_to_placeholder_without_request(image_resolver, fake_cms):
    for media_id in (0, -3, None):
        url = asyncio.run(image_resolver.get_image_url_by_id(media_id))
        assert urlparse(url).hostname == "placehold.co"
        assert url
    url = asyncio.run(image_resolver.extract_image_url_async(-4, "large"))
    assert urlparse(url).hostname == "placehold.co"
    assert fake_cms.requests == []


def test_embedded_image_prefers_requested_size(image_resolver):
    image = {
        "id": 3,
        "url": "https://4seasons-realestate.com/full.jpg",
        "alt": "Pool",
        "sizes": {"medium": "/wp-content/medium.jpg"},
    }
    url = asyncio.run(image_resolver.extract_image_url_async(image, "medium"))
    assert url == "https://4seasons-realestate.com/wp-content/medium.jpg"
    url = asyncio.run(image_resolver.extract_image_url_async(image, "large"))
    assert url == "https://4seasons-realestate.com/full.jpg"

    resolved = asyncio.run(image_resolver.resolve_image(image, "medium"))
    assert resolved.alt == "Pool"


def test_embedded_image_on_foreign_host_is_replaced(image_resolver):
    image = {"id": 3, "url": "https://evil.example.com/a.jpg", "alt": ""}
    url = asyncio.run(image_resolver.extract_image_url_async(image, "medium"))
    assert urlparse(url).hostname == "placehold.co"


def test_media_id_resolves_requested_size_and_caches(image_resolver, fake_cms):
    fake_cms.add(
        "media/7",
        _media(
            "https://4seasons-realestate.com/full.jpg",
            {"large": "https://4seasons-realestate.com/large.jpg"},
        ),
    )
    first = asyncio.run(image_resolver.get_image_url_by_id(7, "large"))
    second = asyncio.run(image_resolver.get_image_url_by_id(7, "large"))
    assert first == second == "https://4seasons-realestate.com/large.jpg"
    assert len(fake_cms.calls("media/7")) == 1
    assert image_resolver.cache.stats()["hits"] == 1


def test_media_id_falls_back_to_source_url(image_resolver, fake_cms):
    fake_cms.add("media/8", _media("/wp-content/uploads/full.jpg"))
    url = asyncio.run(image_resolver.get_image_url_by_id(8, "thumbnail"))
    assert url == "https://4seasons-realestate.com/wp-content/uploads/full.jpg"


def test_media_not_found_placeholder_is_cached(image_resolver, fake_cms):
    url = asyncio.run(image_resolver.get_image_url_by_id(9, "large"))
    assert _text_param(url) == "Media 9 Not Found"
    asyncio.run(image_resolver.get_image_url_by_id(9, "large"))
    assert len(fake_cms.calls("media/9")) == 1


def test_media_transport_error_placeholder(image_resolver, fake_cms):
    def boom(request):
        raise httpx.ConnectError("down", request=request)

    fake_cms.add("media/10", boom)
    url = asyncio.run(image_resolver.get_image_url_by_id(10, "large"))
    assert _text_param(url) == "Error Loading Image 10"


def test_media_on_foreign_host_uses_fallback_text(image_resolver, fake_cms):
    fake_cms.add("media/11", _media("https://evil.example.com/a.jpg"))
    url = asyncio.run(
        image_resolver.get_image_url_by_id(11, "large", 800, 600, "Image Not Found")
    )
    assert url == generate_placeholder_image(800, 600, "Image Not Found")


def test_batch_resolution_keeps_order_and_drops_invalid_ids(image_resolver, fake_cms):
    fake_cms.add("media/1", _media("https://4seasons-realestate.com/1.jpg"))
    fake_cms.add("media/2", _media("https://4seasons-realestate.com/2.jpg"))
    urls = asyncio.run(image_resolver.get_image_urls_by_ids([2, None, 0, 1, 3]))
    assert urls[0] == "https://4seasons-realestate.com/2.jpg"
    assert urls[1] == "https://4seasons-realestate.com/1.jpg"
    assert _text_param(urls[2]) == "Media 3 Not Found"
    assert len(urls) == 3


def test_batch_resolution_empty_input(image_resolver):
    assert asyncio.run(image_resolver.get_image_urls_by_ids([])) == []
    assert asyncio.run(image_resolver.get_image_urls_by_ids([None, -1])) == []
    assert asyncio.run(image_resolver.get_image_urls_by_ids(None)) == []


def test_batch_failure_degrades_to_gallery_placeholders(image_resolver, monkeypatch):
    async def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(image_resolver, "get_image_url_by_id", explode)
    urls = asyncio.run(image_resolver.get_image_urls_by_ids([4, 5]))
    assert [_text_param(u) for u in urls] == ["Gallery Image 1", "Gallery Image 2"]
