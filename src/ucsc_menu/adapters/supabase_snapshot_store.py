"""Supabase-backed snapshot store."""

import asyncio
import base64
import logging
from dataclasses import dataclass

from supabase import Client

from ucsc_menu.domain.snapshot import CacheSnapshot
from ucsc_menu.services.store import (
    SnapshotStore,
    compress_locations,
    decompress_locations,
    parse_timestamp,
)

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseSnapshotStore(SnapshotStore):
    """Keeps the latest snapshot as one gzip-compressed row."""

    client: Client
    table: str = "caches"
    document_id: str = "menu"

    async def load(self) -> CacheSnapshot | None:
        """Return the stored snapshot, if present."""
        return await asyncio.to_thread(self._load)

    async def save(self, snapshot: CacheSnapshot) -> None:
        """Replace the stored snapshot."""
        await asyncio.to_thread(self._save, snapshot)

    def _load(self) -> CacheSnapshot | None:
        response = (
            self.client.table(self.table)
            .select("cached_at, data")
            .eq("id", self.document_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        blob = base64.b64decode(row.get("data") or "")
        _logger.info("Loaded snapshot: compressed_bytes=%s", len(blob))
        return CacheSnapshot(
            cached_at=parse_timestamp(row["cached_at"]),
            locations=decompress_locations(blob),
        )

    def _save(self, snapshot: CacheSnapshot) -> None:
        blob = compress_locations(snapshot.locations)
        self.client.table(self.table).upsert(
            {
                "id": self.document_id,
                "cached_at": snapshot.cached_at.isoformat(),
                "data": base64.b64encode(blob).decode("ascii"),
            }
        ).execute()
        _logger.info("Saved snapshot: compressed_bytes=%s", len(blob))
