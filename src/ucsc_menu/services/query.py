"""Read-side filtering over the cached menu data."""

from dataclasses import dataclass, replace

from ucsc_menu.domain.locations import DateRange, Location
from ucsc_menu.domain.menus import (
    NO_ALLERGENS,
    AllergenSet,
    DailyMenu,
    FoodItem,
    Meal,
    MealType,
)
from ucsc_menu.services.cache import MenuCache


@dataclass(frozen=True)
class FoodItemFilter:
    """Allergen and name constraints applied to every food item.

    ``None`` leaves a constraint unset.
    """

    contains_all: AllergenSet | None = None
    contains_any: AllergenSet | None = None
    excludes_all: AllergenSet | None = None
    name_contains: str | None = None

    def is_empty(self) -> bool:
        return (
            self.contains_all is None
            and self.contains_any is None
            and self.excludes_all is None
            and not self.name_contains
        )

    def matches(self, item: FoodItem) -> bool:
        allergens = item.allergens
        if self.contains_all is not None and (
            allergens & self.contains_all
        ) != self.contains_all:
            return False
        if self.contains_any is not None and (
            allergens & self.contains_any
        ) == NO_ALLERGENS:
            return False
        if self.excludes_all is not None and (
            allergens & self.excludes_all
        ) != NO_ALLERGENS:
            return False
        if self.name_contains and self.name_contains.casefold() not in item.name.casefold():
            return False
        return True

    def apply(self, meal: Meal) -> Meal:
        """Return the meal with non-matching items removed from each section."""
        if self.is_empty():
            return meal
        sections = tuple(
            replace(
                section,
                food_items=tuple(
                    item for item in section.food_items if self.matches(item)
                ),
            )
            for section in meal.sections
        )
        return replace(meal, sections=sections)


@dataclass(frozen=True)
class MenuQuery:
    """Full set of read filters."""

    location_ids: tuple[str, ...] | None = None
    date_range: DateRange | None = None
    meal_type: MealType | None = None
    food_filter: FoodItemFilter = FoodItemFilter()


def filter_menus(location: Location, query: MenuQuery) -> list[DailyMenu]:
    """Apply date range, meal type and food item filters to one location."""
    menus = []
    for menu in location.menus(query.date_range):
        meals = tuple(
            query.food_filter.apply(meal) for meal in menu.meals_of_type(query.meal_type)
        )
        menus.append(replace(menu, meals=meals))
    return menus


@dataclass
class MenuQueryService:
    """Answers menu queries from the current cache snapshot."""

    cache: MenuCache

    async def list_locations(self, ids: tuple[str, ...] | None = None) -> list[Location]:
        async with self.cache.get() as snapshot:
            return list(snapshot.locations.filter(ids))

    async def get_location(self, location_id: str) -> Location | None:
        async with self.cache.get() as snapshot:
            return snapshot.locations.get(location_id)

    async def query(self, query: MenuQuery) -> list[tuple[Location, list[DailyMenu]]]:
        """Return each matching location with its filtered menus."""
        async with self.cache.get() as snapshot:
            return [
                (location, filter_menus(location, query))
                for location in snapshot.locations.filter(query.location_ids)
            ]
