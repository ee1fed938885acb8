"""Scrape every location's menus for a rolling window of days."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from ucsc_menu.adapters.menu_site_client import FetchError, MenuSiteClient
from ucsc_menu.domain.locations import MENU_CAPACITY, Location, LocationMeta, Locations
from ucsc_menu.domain.menus import DailyMenu
from ucsc_menu.parsing.daily_menu import parse_daily_menu_html
from ucsc_menu.parsing.errors import ParseError
from ucsc_menu.parsing.locations import parse_locations_html
from ucsc_menu.parsing.selectors import MenuSelectors
from ucsc_menu.services.transpose import transposed

_logger = logging.getLogger(__name__)


def date_window(start: date, days: int) -> list[date]:
    """Return ``days`` consecutive dates beginning at ``start``."""
    return [start + timedelta(days=offset) for offset in range(days)]


@dataclass
class LocationAggregator:
    """Builds a fresh Locations set from the live site."""

    client: MenuSiteClient
    selectors: MenuSelectors
    base_url: str
    days_to_fetch: int = MENU_CAPACITY

    async def refresh(self, today: date | None = None) -> Locations:
        """Scrape the directory, then every (location, day) page concurrently.

        Parsing runs in worker threads so the event loop keeps serving
        readers. A broken landing page raises; a failed or unparseable day
        page is logged and skipped.
        """
        landing_page = await self.client.fetch_landing_page()
        locations = await asyncio.to_thread(
            parse_locations_html, landing_page, self.selectors, self.base_url
        )

        # The window starts yesterday in UTC.
        current = today or datetime.now(tz=UTC).date()
        days = date_window(current - timedelta(days=1), self.days_to_fetch)

        metas = [location.meta for location in locations]
        rows = await asyncio.gather(*(self._fetch_day(metas, day) for day in days))
        by_location = transposed(rows) if rows and metas else [[] for _ in metas]

        hydrated: list[Location] = []
        dropped = 0
        for location, menus in zip(locations, by_location, strict=True):
            survivors = [menu for menu in menus if menu is not None]
            dropped += len(menus) - len(survivors)
            location.replace_menus(survivors)
            hydrated.append(location)

        _logger.info(
            "Scraped %s locations over %s days (%s pages dropped)",
            len(hydrated),
            len(days),
            dropped,
        )
        return Locations(locations=tuple(hydrated))

    async def _fetch_day(
        self, metas: list[LocationMeta], day: date
    ) -> list[DailyMenu | None]:
        return list(
            await asyncio.gather(*(self._fetch_menu(meta, day) for meta in metas))
        )

    async def _fetch_menu(self, meta: LocationMeta, day: date) -> DailyMenu | None:
        try:
            html = await self.client.fetch_location_page(meta, day)
        except FetchError as exc:
            _logger.warning(
                "Dropping menu page: location=%s date=%s error=%s", meta.id, day, exc
            )
            return None
        try:
            return await asyncio.to_thread(parse_daily_menu_html, html, self.selectors)
        except ParseError as exc:
            _logger.warning(
                "Unparseable menu page: location=%s date=%s error=%s",
                meta.id,
                day,
                exc,
            )
            return None
