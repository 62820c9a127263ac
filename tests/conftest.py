import os
import socket
import sys
from pathlib import Path

import httpx
import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC = REPO_ROOT / "src"

# Prefer repo sources over any installed package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from four_seasons_catalog.cache import ImageUrlCache  # noqa: E402
from four_seasons_catalog.catalog import Catalog  # noqa: E402
from four_seasons_catalog.cms.client import CmsClient  # noqa: E402
from four_seasons_catalog.config import CatalogSettings  # noqa: E402
from four_seasons_catalog.images import ImageResolver  # noqa: E402


API_PREFIX = "/wp-json/wp/v2/"


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    if os.getenv("LIVE") == "1":
        return

    real_connect = socket.socket.connect

    def guarded_connect(sock, address):
        host = address[0]
        if host not in ("127.0.0.1", "localhost"):
            raise RuntimeError("Network access blocked in tests")
        return real_connect(sock, address)

    monkeypatch.setattr(socket.socket, "connect", guarded_connect)


class FakeCms:
    """In-memory WordPress REST API behind an ``httpx.MockTransport``.

    Routes map a collection path (``"developer"``, ``"media/7"``) to a JSON
    payload, an ``httpx.Response`` or a callable taking the request.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, path, payload=None, status=200):
        if callable(payload) and not isinstance(payload, (list, dict)):
            self.routes[path] = payload
        else:
            self.routes[path] = httpx.Response(status, json=payload)
        return self

    def handler(self, request):
        self.requests.append(request)
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"code": "rest_no_route"})
        if callable(route):
            outcome = route(request)
            if isinstance(outcome, httpx.Response):
                return outcome
            return httpx.Response(200, json=outcome)
        return route

    def transport(self):
        return httpx.MockTransport(self.handler)

    def calls(self, path):
        return [r for r in self.requests if r.url.path == API_PREFIX + path]


@pytest.fixture
def fake_cms():
    return FakeCms()


@pytest.fixture
def settings():
    return CatalogSettings()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def cms_client(fake_cms, settings, sleeps):
    async def fake_sleep(delay):
        sleeps.append(delay)

    return CmsClient(settings, transport=fake_cms.transport(), sleep_fn=fake_sleep)


@pytest.fixture
def image_resolver(cms_client):
    return ImageResolver(cms_client, cache=ImageUrlCache())


@pytest.fixture
def catalog(cms_client):
    return Catalog(cms_client.settings, client=cms_client, cache=ImageUrlCache())
