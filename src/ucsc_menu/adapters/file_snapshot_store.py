"""Local JSON file snapshot store."""

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path

from ucsc_menu.domain.snapshot import CacheSnapshot
from ucsc_menu.services.store import SnapshotStore, snapshot_from_dict, snapshot_to_dict


@dataclass
class FileSnapshotStore(SnapshotStore):
    """Stores the snapshot as pretty-printed JSON on local disk."""

    path: Path

    async def load(self) -> CacheSnapshot | None:
        return await asyncio.to_thread(self._load)

    async def save(self, snapshot: CacheSnapshot) -> None:
        await asyncio.to_thread(self._save, snapshot)

    def _load(self) -> CacheSnapshot | None:
        if not self.path.exists():
            return None
        with self.path.open(encoding="utf-8") as handle:
            return snapshot_from_dict(json.load(handle))

    def _save(self, snapshot: CacheSnapshot) -> None:
        # Replaced atomically via rename.
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(snapshot_to_dict(snapshot), handle, indent=2)
        tmp_path.replace(self.path)
