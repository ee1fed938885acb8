"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from supabase import create_client

from ucsc_menu.adapters.file_snapshot_store import FileSnapshotStore
from ucsc_menu.adapters.menu_site_client import HttpxMenuSiteClient, MenuSiteClient
from ucsc_menu.adapters.supabase_snapshot_store import SupabaseSnapshotStore
from ucsc_menu.config import Settings, parse_store_backend
from ucsc_menu.parsing.selectors import MenuSelectors
from ucsc_menu.services.aggregator import LocationAggregator
from ucsc_menu.services.cache import MenuCache
from ucsc_menu.services.query import MenuQueryService
from ucsc_menu.services.rate_limit import TokenBucketRateLimiter
from ucsc_menu.services.store import NullSnapshotStore, SnapshotStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    site_client: MenuSiteClient
    selectors: MenuSelectors
    aggregator: LocationAggregator
    store: SnapshotStore
    menu_cache: MenuCache
    query_service: MenuQueryService
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> SnapshotStore:
    """Create the snapshot store selected by ``store_backend``."""
    backend = parse_store_backend(settings.store_backend)
    if backend == "file":
        return FileSnapshotStore(Path(settings.cache_file))
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase store requires supabase_url and supabase_service_key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseSnapshotStore(client)
    return NullSnapshotStore()


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    selectors = MenuSelectors.compile()
    rate_limiter = TokenBucketRateLimiter(
        rate=resolved_settings.rate_limit_per_second,
        max_jitter_seconds=resolved_settings.max_jitter_seconds,
    )
    site_client = HttpxMenuSiteClient.create(
        base_url=resolved_settings.base_url,
        rate_limiter=rate_limiter,
        timeout_seconds=resolved_settings.request_timeout_seconds,
    )
    aggregator = LocationAggregator(
        client=site_client,
        selectors=selectors,
        base_url=resolved_settings.base_url,
        days_to_fetch=resolved_settings.days_to_fetch,
    )
    store = build_store(resolved_settings)
    menu_cache = MenuCache(
        source=aggregator,
        store=store,
        refresh_interval=timedelta(minutes=resolved_settings.refresh_interval_minutes),
    )
    query_service = MenuQueryService(menu_cache)

    async def close_resources() -> None:
        await menu_cache.close()
        await site_client.close()

    return AppContainer(
        settings=resolved_settings,
        site_client=site_client,
        selectors=selectors,
        aggregator=aggregator,
        store=store,
        menu_cache=menu_cache,
        query_service=query_service,
        close_resources=close_resources,
    )
