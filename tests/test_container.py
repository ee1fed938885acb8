"""Tests for container wiring."""

import asyncio
from datetime import timedelta

import pytest

from ucsc_menu.adapters.file_snapshot_store import FileSnapshotStore
from ucsc_menu.adapters.menu_site_client import HttpxMenuSiteClient
from ucsc_menu.config import Settings
from ucsc_menu.containers import build_container, build_store
from ucsc_menu.services.store import NullSnapshotStore


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.site_client, HttpxMenuSiteClient)
    assert isinstance(container.store, NullSnapshotStore)
    assert container.aggregator.days_to_fetch == settings.days_to_fetch
    assert container.menu_cache.refresh_interval == timedelta(minutes=15)
    assert container.query_service.cache is container.menu_cache
    asyncio.run(container.close_resources())
    assert container.site_client.http_client.is_closed


def test_build_store_file_backend(tmp_path) -> None:
    settings = Settings(store_backend="local", cache_file=str(tmp_path / "cache.json"))

    store = build_store(settings)

    assert isinstance(store, FileSnapshotStore)
    assert store.path == tmp_path / "cache.json"


def test_build_store_supabase_requires_credentials() -> None:
    settings = Settings(store_backend="supabase", supabase_url=None, supabase_service_key=None)

    with pytest.raises(ValueError):
        build_store(settings)
