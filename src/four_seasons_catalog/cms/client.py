from __future__ import annotations

import asyncio
import json
import random
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple, Union

import httpx

from four_seasons_catalog.config import CatalogSettings, get_settings
from four_seasons_catalog.result import FetchResult


QueryParams = Sequence[Tuple[str, Union[str, int]]]
SleepFn = Callable[[float], Awaitable[Any]]


class CmsError(Exception):
    """Base for failures talking to the CMS."""


class CmsHttpError(CmsError):
    def __init__(self, status: int, url: str):
        super().__init__(f"HTTP {status} for {url}")
        self.status = status
        self.url = url


class CmsTransportError(CmsError):
    pass


class RetryConfig:
    def __init__(self, retries=3, base_delay=1.0, factor=2.0, jitter=0.0):
        self.retries = retries
        self.base_delay = base_delay
        self.factor = factor
        self.jitter = jitter

    @classmethod
    def from_settings(cls, settings: CatalogSettings) -> "RetryConfig":
        return cls(
            retries=settings.bulk_max_retries,
            base_delay=settings.bulk_base_delay,
        )


def compute_backoff_delays(
    retries, base_delay=1.0, factor=2.0, jitter=0.0, rand_fn=None
):
    delays = []
    current = base_delay
    rand_fn = rand_fn or random.random
    for _ in range(retries):
        noise = (rand_fn() * 2 - 1) * jitter
        delays.append(max(0.0, current + noise))
        current *= factor
    return delays


def is_record_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def embed_params(*extra: Tuple[str, Union[str, int]]) -> List[Tuple[str, Union[str, int]]]:
    """Query params with ``_embed`` first, the way WordPress clients send it."""
    return [("_embed", "")] + [(k, v) for k, v in extra if v is not None and v != ""]


class CmsClient:
    """Async JSON reader for the WordPress REST API.

    One ``httpx.AsyncClient`` per instance; close it with ``aclose()`` or use
    the client as an async context manager.
    """

    def __init__(
        self,
        settings: Optional[CatalogSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep_fn: Optional[SleepFn] = None,
    ):
        self.settings = settings or get_settings()
        self.sleep_fn = sleep_fn or asyncio.sleep
        self._client = httpx.AsyncClient(
            timeout=self.settings.http_timeout,
            follow_redirects=True,
            transport=transport,
            headers={
                "Accept": "application/json",
                "User-Agent": self.settings.user_agent,
            },
        )

    async def __aenter__(self) -> "CmsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def url_for(self, path: str) -> str:
        return f"{self.settings.api_base}/{path.lstrip('/')}"

    async def request_json(
        self,
        path: str,
        params: Optional[QueryParams] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """GET ``path`` and decode JSON; raises ``CmsError`` subclasses."""
        url = self.url_for(path)
        kwargs = {"params": list(params or [])}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            response = await self._client.get(url, **kwargs)
        except httpx.HTTPError as exc:
            raise CmsTransportError(f"{type(exc).__name__} for {url}: {exc}") from exc
        if not response.is_success:
            raise CmsHttpError(response.status_code, url)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CmsTransportError(f"invalid JSON from {url}") from exc

    async def get_json(
        self,
        path: str,
        params: Optional[QueryParams] = None,
        timeout: Optional[float] = None,
    ) -> FetchResult:
        try:
            payload = await self.request_json(path, params=params, timeout=timeout)
        except CmsHttpError as exc:
            return FetchResult.failure(str(exc), status=exc.status)
        except CmsError as exc:
            return FetchResult.failure(str(exc))
        return FetchResult.success(payload)
