"""Allergen legend icon classification."""

from collections.abc import Iterable

from bs4 import Tag

from ucsc_menu.domain.menus import NO_ALLERGENS, Allergen, AllergenSet
from ucsc_menu.parsing.errors import UnrecognizedAllergenIconError

ICON_PREFIX = "LegendImages/"
ICON_SUFFIX = ".gif"

_ICON_STEMS: dict[str, Allergen] = {
    "eggs": Allergen.EGG,
    "fish": Allergen.FISH,
    "gluten": Allergen.GLUTEN_FRIENDLY,
    "milk": Allergen.MILK,
    "nuts": Allergen.PEANUT,
    "soy": Allergen.SOY,
    "treenut": Allergen.TREE_NUT,
    "alcohol": Allergen.ALCOHOL,
    "vegan": Allergen.VEGAN,
    "veggie": Allergen.VEGETARIAN,
    "pork": Allergen.PORK,
    "beef": Allergen.BEEF,
    "halal": Allergen.HALAL,
    "shellfish": Allergen.SHELLFISH,
    "sesame": Allergen.SESAME,
}


def classify_icon(icon_url: str) -> Allergen:
    """Map an icon URL such as ``LegendImages/eggs.gif`` to its allergen flag."""
    if not icon_url.startswith(ICON_PREFIX) or not icon_url.endswith(ICON_SUFFIX):
        raise UnrecognizedAllergenIconError(icon_url)
    stem = icon_url[len(ICON_PREFIX) : -len(ICON_SUFFIX)]
    try:
        return _ICON_STEMS[stem]
    except KeyError as exc:
        raise UnrecognizedAllergenIconError(icon_url) from exc


def allergens_from_icons(icons: Iterable[Tag]) -> AllergenSet:
    """Union the flags of every icon image; the first bad icon fails the set."""
    allergens = NO_ALLERGENS
    for icon in icons:
        src = icon.get("src")
        if src is None:
            continue
        allergens |= classify_icon(str(src))
    return allergens
