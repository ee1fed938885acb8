"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import pytest

from ucsc_menu.adapters.menu_site_client import FetchError, MenuSiteClient
from ucsc_menu.config import Settings
from ucsc_menu.containers import AppContainer
from ucsc_menu.domain.locations import Location, LocationData, Locations
from ucsc_menu.domain.snapshot import CacheSnapshot
from ucsc_menu.parsing.daily_menu import parse_daily_menu_html
from ucsc_menu.parsing.locations import parse_locations_html
from ucsc_menu.parsing.selectors import MenuSelectors
from ucsc_menu.services.aggregator import LocationAggregator
from ucsc_menu.services.cache import MenuCache
from ucsc_menu.services.query import MenuQueryService
from ucsc_menu.services.store import SnapshotStore

FIXTURES = Path(__file__).parent / "fixtures"

FIXTURE_DATE = date(2024, 4, 5)


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def menu_page(day: date) -> str:
    """Return the daily menu fixture re-dated to ``day``."""
    return load_fixture("daily_menu.html").replace(
        'value="04/05/2024"', f'value="{day:%m/%d/%Y}"'
    )


def sample_locations(
    selectors: MenuSelectors, days: tuple[date, ...] = (FIXTURE_DATE,)
) -> Locations:
    """Locations parsed from the fixtures, each holding the fixture menu per day."""
    directory = parse_locations_html(load_fixture("locations.html"), selectors)
    locations = []
    for location in directory:
        data = LocationData(
            (parse_daily_menu_html(menu_page(day), selectors) for day in days),
            location_id=location.id,
        )
        locations.append(Location(meta=location.meta, data=data))
    return Locations(locations=tuple(locations))


class FakeClock:
    """Settable UTC clock."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 4, 5, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@dataclass
class FakeMenuSiteClient(MenuSiteClient):
    """Serves fixture pages and records every location request."""

    landing_page: str | None = field(
        default_factory=lambda: load_fixture("locations.html")
    )
    failures: set[tuple[str, date]] = field(default_factory=set)
    broken_pages: set[tuple[str, date]] = field(default_factory=set)
    requests: list[tuple[str, date | None]] = field(default_factory=list)
    closed: bool = False

    async def fetch_landing_page(self) -> str:
        if self.landing_page is None:
            raise FetchError("https://nutrition.sa.ucsc.edu/", "503 Service Unavailable")
        return self.landing_page

    async def fetch_location_page(self, location, day=None) -> str:  # type: ignore[no-untyped-def]
        self.requests.append((location.id, day))
        key = (location.id, day)
        if key in self.failures:
            raise FetchError(location.url, "connection reset")
        if key in self.broken_pages:
            return "<html><body><p>No menu today</p></body></html>"
        return menu_page(day or FIXTURE_DATE)

    async def close(self) -> None:
        self.closed = True


@dataclass
class InMemorySnapshotStore(SnapshotStore):
    """In-memory snapshot store for tests."""

    snapshot: CacheSnapshot | None = None
    saves: list[CacheSnapshot] = field(default_factory=list)
    fail_load: bool = False
    fail_save: bool = False

    async def load(self) -> CacheSnapshot | None:
        if self.fail_load:
            raise ConnectionError("store unavailable")
        return self.snapshot

    async def save(self, snapshot: CacheSnapshot) -> None:
        if self.fail_save:
            raise ConnectionError("store unavailable")
        self.saves.append(snapshot)
        self.snapshot = snapshot


@dataclass
class FakeMenuSource:
    """Menu source returning queued results; exceptions in the queue are raised."""

    results: list[Locations | Exception] = field(default_factory=list)
    calls: int = 0
    gate: asyncio.Event | None = None

    async def refresh(self) -> Locations:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        result = self.results.pop(0) if self.results else Locations()
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def selectors() -> MenuSelectors:
    return MenuSelectors.compile()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        admin_token="admin-token",
        store_backend="none",
        rate_limit_per_second=1000.0,
        max_jitter_seconds=0.0,
    )


@pytest.fixture
def site_client() -> FakeMenuSiteClient:
    return FakeMenuSiteClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def container(
    settings: Settings,
    selectors: MenuSelectors,
    site_client: FakeMenuSiteClient,
    clock: FakeClock,
) -> AppContainer:
    aggregator = LocationAggregator(
        client=site_client,
        selectors=selectors,
        base_url=settings.base_url,
        days_to_fetch=2,
    )
    store = InMemorySnapshotStore(
        snapshot=CacheSnapshot(
            cached_at=clock.now,
            locations=sample_locations(
                selectors, (FIXTURE_DATE, FIXTURE_DATE + timedelta(days=1))
            ),
        )
    )
    menu_cache = MenuCache(source=aggregator, store=store, clock=clock)
    query_service = MenuQueryService(menu_cache)

    async def close_resources() -> None:
        await menu_cache.close()
        await site_client.close()

    return AppContainer(
        settings=settings,
        site_client=site_client,
        selectors=selectors,
        aggregator=aggregator,
        store=store,
        menu_cache=menu_cache,
        query_service=query_service,
        close_resources=close_resources,
    )
