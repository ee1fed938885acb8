"""Parse meal blocks into sections of food items."""

from collections.abc import Iterable, Iterator

from bs4 import Tag

from ucsc_menu.domain.menus import FoodItem, Meal, MealSection, MealType
from ucsc_menu.parsing.errors import MissingElementError, MissingSectionHeaderError
from ucsc_menu.parsing.food_items import parse_food_item
from ucsc_menu.parsing.selectors import MenuSelectors
from ucsc_menu.parsing.text import collapse_whitespace, text_from_selection

_MEAL_TYPE_LABELS: dict[str, MealType] = {
    meal_type.value: meal_type
    for meal_type in MealType
    if meal_type is not MealType.UNKNOWN
}

_SECTION_DECORATOR = "--"


def meal_type_from_label(label: str) -> MealType:
    """Look up a meal label; labels the site adds later map to UNKNOWN."""
    return _MEAL_TYPE_LABELS.get(collapse_whitespace(label.strip()), MealType.UNKNOWN)


def section_name_from_label(label: str) -> str:
    """Turn ``-- Hot  Cereal --`` into ``Hot Cereal``."""
    name = label.strip()
    if name.startswith(_SECTION_DECORATOR) and name.endswith(_SECTION_DECORATOR):
        name = name[len(_SECTION_DECORATOR) : -len(_SECTION_DECORATOR)]
    return collapse_whitespace(name.strip())


def parse_meal(block: Tag, selectors: MenuSelectors) -> Meal:
    """Parse a meal block: a meal type row followed by a row of sections."""
    rows = selectors.meal_rows.select(block, limit=2)
    if not rows:
        raise MissingElementError("meal type row", "meal")
    if len(rows) < 2:
        raise MissingElementError("meal items row", "meal")
    meal_name_row, meal_items_row = rows

    label = text_from_selection(selectors.meal_type, meal_name_row, "meal", "meal type")
    meal_type = meal_type_from_label(label)

    section_rows = selectors.section_rows.iselect(meal_items_row)
    sections = tuple(iter_sections(section_rows, selectors))
    return Meal(meal_type=meal_type, sections=sections)


def iter_sections(rows: Iterable[Tag], selectors: MenuSelectors) -> Iterator[MealSection]:
    """Group item rows under the most recent section header in one forward pass.

    Rows nested inside an already handled row belong to it and are skipped.
    """
    name: str | None = None
    food_items: list[FoodItem] = []
    last_row: Tag | None = None

    for row in rows:
        if last_row is not None and _is_nested_in(row, last_row):
            continue
        if selectors.section_name.select_one(row) is not None:
            if name is not None:
                yield MealSection(name=name, food_items=tuple(food_items))
            label = text_from_selection(
                selectors.section_name, row, "section", "name"
            )
            name = section_name_from_label(label)
            food_items = []
            last_row = row
            continue
        if name is None:
            raise MissingSectionHeaderError()
        position = f"section {name!r} item {len(food_items) + 1}"
        food_items.append(parse_food_item(row, selectors, position))
        last_row = row

    if name is not None:
        yield MealSection(name=name, food_items=tuple(food_items))


def _is_nested_in(row: Tag, ancestor: Tag) -> bool:
    # Tag equality is structural, so compare identity.
    return any(parent is ancestor for parent in row.parents)
