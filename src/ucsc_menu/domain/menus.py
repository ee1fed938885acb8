"""Domain models for daily dining hall menus."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum, IntFlag


class Allergen(IntFlag):
    """Allergen and dietary tags shown as legend icons on the menu site."""

    EGG = 1
    FISH = 1 << 1
    GLUTEN_FRIENDLY = 1 << 2
    MILK = 1 << 3
    PEANUT = 1 << 4
    SOY = 1 << 5
    TREE_NUT = 1 << 6
    ALCOHOL = 1 << 7
    VEGAN = 1 << 8
    VEGETARIAN = 1 << 9
    PORK = 1 << 10
    BEEF = 1 << 11
    HALAL = 1 << 12
    SHELLFISH = 1 << 13
    SESAME = 1 << 14


# A combination of Allergen flags; Allergen(0) is the empty set.
AllergenSet = Allergen

NO_ALLERGENS = Allergen(0)

ALL_ALLERGENS = Allergen(0)
for _member in Allergen:
    ALL_ALLERGENS |= _member

_DISPLAY_NAMES: dict[Allergen, str] = {
    Allergen.EGG: "Egg",
    Allergen.FISH: "Fish",
    Allergen.GLUTEN_FRIENDLY: "Gluten Friendly",
    Allergen.MILK: "Milk",
    Allergen.PEANUT: "Peanut",
    Allergen.SOY: "Soy",
    Allergen.TREE_NUT: "Tree Nut",
    Allergen.ALCOHOL: "Alcohol",
    Allergen.VEGAN: "Vegan",
    Allergen.VEGETARIAN: "Vegetarian",
    Allergen.PORK: "Pork",
    Allergen.BEEF: "Beef",
    Allergen.HALAL: "Halal",
    Allergen.SHELLFISH: "Shellfish",
    Allergen.SESAME: "Sesame",
}


def allergen_names(allergens: AllergenSet) -> list[str]:
    """Return display names for every tag in the set, in flag order."""
    return [name for flag, name in _DISPLAY_NAMES.items() if flag in allergens]


def allergens_from_names(names: list[str]) -> AllergenSet:
    """Build an allergen set from enum names such as ``TREE_NUT`` or ``vegan``."""
    result = NO_ALLERGENS
    for name in names:
        key = name.strip().upper().replace(" ", "_").replace("-", "_")
        try:
            result |= Allergen[key]
        except KeyError as exc:
            raise ValueError(f"Unknown allergen: {name}") from exc
    return result


def allergens_from_bits(bits: int) -> AllergenSet:
    """Rebuild a set from its serialized bits, dropping unknown bits."""
    return Allergen(bits & ALL_ALLERGENS)


def format_price(price: Decimal) -> str:
    """Render a USD price the way the menu site shows it."""
    return f"${price:.2f}"


@dataclass(frozen=True)
class FoodItem:
    """A single dish on a menu; price does not take part in equality."""

    name: str
    allergens: AllergenSet = NO_ALLERGENS
    price: Decimal | None = field(default=None, compare=False)


@dataclass(frozen=True)
class MealSection:
    """A named group of food items, such as ``Entrees``."""

    name: str
    food_items: tuple[FoodItem, ...] = ()


class MealType(Enum):
    """Meal period label shown above each meal block."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    LATE_NIGHT = "Late Night"
    LATE_NIGHT_AT_THE_VILLAGE = "Late Night @ the Village"
    MENU = "Menu"
    ALL_DAY = "All Day"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Meal:
    """One meal period and its sections."""

    meal_type: MealType
    sections: tuple[MealSection, ...] = ()


@dataclass(frozen=True, order=True)
class DailyMenu:
    """All meals served at one location on one day.

    Ordering and equality only look at the date, so two menus for the same
    day are treated as duplicates.
    """

    date: date
    meals: tuple[Meal, ...] = field(default=(), compare=False)

    def meals_of_type(self, meal_type: MealType | None) -> tuple[Meal, ...]:
        """Return meals matching the type, or all meals when no type is given."""
        if meal_type is None:
            return self.meals
        return tuple(meal for meal in self.meals if meal.meal_type == meal_type)
