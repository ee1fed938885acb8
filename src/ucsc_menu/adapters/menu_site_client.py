"""HTTP client for the UCSC dining menu site."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol

import httpx

from ucsc_menu.domain.locations import LocationMeta
from ucsc_menu.services.rate_limit import RateLimiter, TokenBucketRateLimiter

_CART_COOKIES = (
    "WebInaCartDates=; WebInaCartMeals=; WebInaCartQtys=; "
    "WebInaCartRecipes=; WebInaCartLocation="
)

_logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a page could not be fetched from the menu site."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class MenuSiteClient(Protocol):
    """Interface for fetching raw menu site pages."""

    async def fetch_landing_page(self) -> str:
        """Return the HTML of the location directory page."""

    async def fetch_location_page(
        self, location: LocationMeta, day: date | None = None
    ) -> str:
        """Return the HTML of a location's menu, optionally for a given day."""


def location_cookie(location_id: str) -> str:
    """Session cookie the site needs to serve a location's menu."""
    return f"{_CART_COOKIES}{location_id}"


@dataclass
class HttpxMenuSiteClient(MenuSiteClient):
    """httpx-backed menu site client.

    The dining site serves an incomplete certificate chain, so certificate
    verification is turned off for this client only. Do not reuse this
    client for other hosts.
    """

    base_url: str
    http_client: httpx.AsyncClient
    rate_limiter: RateLimiter

    @classmethod
    def create(
        cls,
        base_url: str,
        rate_limiter: RateLimiter | None = None,
        timeout_seconds: float = 30.0,
    ) -> "HttpxMenuSiteClient":
        """Create a client with a managed httpx session."""
        http_client = httpx.AsyncClient(
            verify=False,
            timeout=timeout_seconds,
            follow_redirects=True,
        )
        return cls(
            base_url=base_url,
            http_client=http_client,
            rate_limiter=rate_limiter or TokenBucketRateLimiter(),
        )

    async def fetch_landing_page(self) -> str:
        """Fetch the location directory page."""
        return await self._get(self.base_url)

    async def fetch_location_page(
        self, location: LocationMeta, day: date | None = None
    ) -> str:
        """Fetch a location's menu page through the shared rate limiter."""
        params = {"dtdate": day.strftime("%m/%d/%Y")} if day is not None else None
        await self.rate_limiter.acquire()
        return await self._get(
            location.url,
            params=params,
            headers={"Cookie": location_cookie(location.id)},
        )

    async def _get(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        try:
            response = await self.http_client.get(url, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            _logger.debug("Menu site request failed: url=%s error=%s", url, exc)
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
        return response.text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
