"""Parse a single food item row."""

import re
from decimal import Decimal, InvalidOperation

from bs4 import Tag

from ucsc_menu.domain.menus import FoodItem
from ucsc_menu.parsing.allergens import allergens_from_icons
from ucsc_menu.parsing.errors import PriceFormatError
from ucsc_menu.parsing.selectors import MenuSelectors
from ucsc_menu.parsing.text import collapse_whitespace, inner_text, text_from_selection

PRICE_PLACEHOLDER = "\xa0"

_PRICE_PATTERN = re.compile(r"\d+(?:\.\d{1,2})?")


def parse_price(text: str) -> Decimal | None:
    """Parse ``$5.00`` into ``Decimal("5.00")``; the nbsp placeholder means no price."""
    if text == PRICE_PLACEHOLDER:
        return None
    amount = text.strip()
    if amount.startswith("$"):
        amount = amount[1:]
    if not _PRICE_PATTERN.fullmatch(amount):
        raise PriceFormatError(text)
    try:
        return Decimal(amount)
    except InvalidOperation as exc:
        raise PriceFormatError(text) from exc


def parse_food_item(
    row: Tag, selectors: MenuSelectors, position: str | None = None
) -> FoodItem:
    """Build a FoodItem from a menu row holding name, icons and an optional price."""
    name = text_from_selection(selectors.food_name, row, "foodItem", "name", position)
    name = collapse_whitespace(name.strip())
    allergens = allergens_from_icons(selectors.allergen_icons.select(row))

    price = None
    price_element = selectors.food_price.select_one(row)
    if price_element is not None:
        price = parse_price(inner_text(price_element, "price", position))

    return FoodItem(name=name, allergens=allergens, price=price)
