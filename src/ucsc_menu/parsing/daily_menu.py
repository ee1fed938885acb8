"""Parse one location's menu page for a single day."""

from datetime import date, datetime

from bs4 import BeautifulSoup, Tag

from ucsc_menu.domain.menus import DailyMenu
from ucsc_menu.parsing.errors import (
    DateFormatError,
    MissingAttributeError,
    MissingElementError,
)
from ucsc_menu.parsing.meals import parse_meal
from ucsc_menu.parsing.selectors import MenuSelectors

DATE_FORMAT = "%m/%d/%Y"


def parse_menu_date(value: str) -> date:
    """Parse the hidden ``strCurSearchDays`` value, e.g. ``04/05/2024``."""
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise DateFormatError(value) from exc


def parse_daily_menu(root: Tag, selectors: MenuSelectors) -> DailyMenu:
    """Parse the date and every meal block on a menu page.

    Any failure fails the whole page; there is no partial day.
    """
    date_field = selectors.menu_date.select_one(root)
    if date_field is None:
        raise MissingElementError("date field", "menu page")
    value = date_field.get("value")
    if value is None:
        raise MissingAttributeError("date field", "value")
    menu_date = parse_menu_date(str(value))

    meals = tuple(
        parse_meal(block, selectors) for block in selectors.meal_block.iselect(root)
    )
    return DailyMenu(date=menu_date, meals=meals)


def parse_daily_menu_html(html: str, selectors: MenuSelectors) -> DailyMenu:
    """Parse raw page HTML into a DailyMenu."""
    return parse_daily_menu(BeautifulSoup(html, "html.parser"), selectors)
