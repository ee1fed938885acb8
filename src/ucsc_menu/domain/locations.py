"""Domain models for dining locations and their rolling menu buffers."""

import bisect
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date

from ucsc_menu.domain.menus import DailyMenu

MENU_CAPACITY = 10


class BufferFullError(RuntimeError):
    """Raised when a location's rolling buffer has no free slot."""

    def __init__(self, location_id: str | None, capacity: int) -> None:
        self.location_id = location_id
        self.capacity = capacity
        super().__init__(
            f"No empty slot for menu at location {location_id} (capacity {capacity})"
        )


@dataclass(frozen=True)
class LocationMeta:
    """Identifying data for a dining location; identity is the id."""

    id: str
    name: str = field(compare=False)
    url: str = field(compare=False)


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range; either bound may be open."""

    start: date | None = None
    end: date | None = None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


class LocationData:
    """Date-sorted buffer holding up to ``capacity`` daily menus."""

    def __init__(
        self,
        menus: Iterable[DailyMenu] = (),
        *,
        capacity: int = MENU_CAPACITY,
        location_id: str | None = None,
    ) -> None:
        self.capacity = capacity
        self.location_id = location_id
        self._menus: list[DailyMenu] = []
        for menu in menus:
            self.add(menu)

    def add(self, menu: DailyMenu) -> None:
        """Insert a menu in date order, replacing any menu for the same date."""
        index = bisect.bisect_left(self._menus, menu)
        if index < len(self._menus) and self._menus[index].date == menu.date:
            self._menus[index] = menu
            return
        if len(self._menus) >= self.capacity:
            raise BufferFullError(self.location_id, self.capacity)
        self._menus.insert(index, menu)

    def clear(self) -> None:
        self._menus.clear()

    def remove_before(self, day: date) -> None:
        """Drop every menu dated before ``day``."""
        self._menus = [menu for menu in self._menus if menu.date >= day]

    def is_empty(self) -> bool:
        return not self._menus

    def menus(self) -> tuple[DailyMenu, ...]:
        return tuple(self._menus)

    def __len__(self) -> int:
        return len(self._menus)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocationData):
            return NotImplemented
        return self._menus == other._menus

    def __repr__(self) -> str:
        dates = ", ".join(menu.date.isoformat() for menu in self._menus)
        return f"LocationData([{dates}])"


@dataclass(eq=False)
class Location:
    """A dining location with its recent daily menus."""

    meta: LocationMeta
    data: LocationData = field(default_factory=LocationData)

    def __post_init__(self) -> None:
        self.data.location_id = self.meta.id

    @property
    def id(self) -> str:
        return self.meta.id

    @property
    def name(self) -> str:
        return self.meta.name

    def replace_menus(self, menus: Iterable[DailyMenu]) -> None:
        """Clear the buffer and fill it with the given menus."""
        self.data.clear()
        for menu in menus:
            self.data.add(menu)

    def menus(self, date_range: DateRange | None = None) -> tuple[DailyMenu, ...]:
        """Return menus, optionally limited to an inclusive date range."""
        menus = self.data.menus()
        if date_range is None:
            return menus
        return tuple(menu for menu in menus if date_range.contains(menu.date))

    def is_hydrated(self) -> bool:
        return not self.data.is_empty()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.meta == other.meta and self.data == other.data


@dataclass(frozen=True)
class Locations:
    """All dining locations in directory order."""

    locations: tuple[Location, ...] = ()

    def __iter__(self) -> Iterator[Location]:
        return iter(self.locations)

    def __len__(self) -> int:
        return len(self.locations)

    def get(self, location_id: str) -> Location | None:
        for location in self.locations:
            if location.id == location_id:
                return location
        return None

    def filter(self, ids: Iterable[str] | None) -> tuple[Location, ...]:
        """Return locations whose id is listed, keeping directory order."""
        if ids is None:
            return self.locations
        wanted = set(ids)
        return tuple(location for location in self.locations if location.id in wanted)
