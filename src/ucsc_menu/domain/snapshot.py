"""Cache snapshot model."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from ucsc_menu.domain.locations import Locations


@dataclass(frozen=True)
class CacheSnapshot:
    """Locations paired with the time they were scraped."""

    cached_at: datetime
    locations: Locations = field(default_factory=Locations)

    @classmethod
    def now(cls, locations: Locations) -> "CacheSnapshot":
        return cls(cached_at=datetime.now(tz=UTC), locations=locations)
