"""Snapshot persistence interface and its JSON/gzip codec."""

import datetime
import gzip
from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from ucsc_menu.domain.locations import Location, LocationData, Locations
from ucsc_menu.domain.menus import (
    DailyMenu,
    FoodItem,
    Meal,
    MealSection,
    MealType,
    allergens_from_bits,
)
from ucsc_menu.domain.snapshot import CacheSnapshot
from ucsc_menu.parsing.locations import location_meta_from_url


class SnapshotStore(Protocol):
    """Persistence interface for cache snapshots."""

    async def load(self) -> CacheSnapshot | None:
        """Return the stored snapshot, if any."""

    async def save(self, snapshot: CacheSnapshot) -> None:
        """Persist a snapshot, replacing the previous one."""


@dataclass
class NullSnapshotStore(SnapshotStore):
    """Store that keeps nothing; every cold start scrapes."""

    async def load(self) -> CacheSnapshot | None:
        return None

    async def save(self, snapshot: CacheSnapshot) -> None:
        return None


class StoredFoodItem(BaseModel):
    """Persisted food item; prices are not stored."""

    name: str
    allergens: int = Field(default=0, ge=0)


class StoredMealSection(BaseModel):
    name: str
    food_items: list[StoredFoodItem] = Field(default_factory=list)


class StoredMeal(BaseModel):
    meal_type: str
    sections: list[StoredMealSection] = Field(default_factory=list)


class StoredDailyMenu(BaseModel):
    date: datetime.date
    meals: list[StoredMeal] = Field(default_factory=list)


class StoredLocation(BaseModel):
    """A location keyed by its menu page URL."""

    meta: str
    menus: list[StoredDailyMenu] = Field(default_factory=list)


class StoredSnapshot(BaseModel):
    cached_at: datetime.datetime
    locations: list[StoredLocation] = Field(default_factory=list)

    @field_validator("cached_at")
    @classmethod
    def _assume_utc(cls, value: datetime.datetime) -> datetime.datetime:
        return _as_utc(value)


_STORED_LOCATIONS = TypeAdapter(list[StoredLocation])


def _stored_menu(menu: DailyMenu) -> StoredDailyMenu:
    return StoredDailyMenu(
        date=menu.date,
        meals=[
            StoredMeal(
                meal_type=meal.meal_type.name,
                sections=[
                    StoredMealSection(
                        name=section.name,
                        food_items=[
                            StoredFoodItem(name=item.name, allergens=int(item.allergens))
                            for item in section.food_items
                        ],
                    )
                    for section in meal.sections
                ],
            )
            for meal in menu.meals
        ],
    )


def _daily_menu(stored: StoredDailyMenu) -> DailyMenu:
    meals = tuple(
        Meal(
            meal_type=MealType.__members__.get(meal.meal_type, MealType.UNKNOWN),
            sections=tuple(
                MealSection(
                    name=section.name,
                    food_items=tuple(
                        FoodItem(name=item.name, allergens=allergens_from_bits(item.allergens))
                        for item in section.food_items
                    ),
                )
                for section in meal.sections
            ),
        )
        for meal in stored.meals
    )
    return DailyMenu(date=stored.date, meals=meals)


def _stored_locations(locations: Locations) -> list[StoredLocation]:
    return [
        StoredLocation(
            meta=location.meta.url,
            menus=[_stored_menu(menu) for menu in location.menus()],
        )
        for location in locations
    ]


def _locations(stored: list[StoredLocation]) -> Locations:
    locations = []
    for entry in stored:
        meta = location_meta_from_url(entry.meta)
        data = LocationData(
            (_daily_menu(menu) for menu in entry.menus), location_id=meta.id
        )
        locations.append(Location(meta=meta, data=data))
    return Locations(locations=tuple(locations))


def locations_to_data(locations: Locations) -> list[dict[str, object]]:
    """Convert locations into JSON-compatible data."""
    return _STORED_LOCATIONS.dump_python(_stored_locations(locations), mode="json")


def locations_from_data(payload: object) -> Locations:
    """Rebuild locations from data produced by ``locations_to_data``.

    Raises ``pydantic.ValidationError`` when the payload is malformed.
    """
    return _locations(_STORED_LOCATIONS.validate_python(payload))


def locations_to_json(locations: Locations) -> bytes:
    return _STORED_LOCATIONS.dump_json(_stored_locations(locations))


def locations_from_json(raw: str | bytes) -> Locations:
    return _locations(_STORED_LOCATIONS.validate_json(raw))


def compress_locations(locations: Locations) -> bytes:
    """Gzip the JSON form of ``locations``."""
    return gzip.compress(locations_to_json(locations))


def decompress_locations(blob: bytes) -> Locations:
    """Inverse of ``compress_locations``; an empty blob is an empty set."""
    if not blob:
        return Locations()
    return locations_from_json(gzip.decompress(blob))


def snapshot_to_dict(snapshot: CacheSnapshot) -> dict[str, object]:
    stored = StoredSnapshot(
        cached_at=snapshot.cached_at,
        locations=_stored_locations(snapshot.locations),
    )
    return stored.model_dump(mode="json")


def snapshot_from_dict(payload: object) -> CacheSnapshot:
    stored = StoredSnapshot.model_validate(payload)
    return CacheSnapshot(cached_at=stored.cached_at, locations=_locations(stored.locations))


def parse_timestamp(raw: str) -> datetime.datetime:
    """Parse an ISO timestamp, treating naive values as UTC."""
    return _as_utc(datetime.datetime.fromisoformat(raw))


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value
