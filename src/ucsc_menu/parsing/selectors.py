"""Precompiled CSS selectors for the dining site's markup."""

from dataclasses import dataclass

import soupsieve
from soupsieve import SoupSieve


@dataclass(frozen=True)
class MenuSelectors:
    """Named selector patterns, compiled once and shared by all parsers."""

    location_choices: SoupSieve
    location_item: SoupSieve
    location_link: SoupSieve
    menu_date: SoupSieve
    meal_block: SoupSieve
    meal_rows: SoupSieve
    meal_type: SoupSieve
    section_rows: SoupSieve
    section_name: SoupSieve
    food_name: SoupSieve
    allergen_icons: SoupSieve
    food_price: SoupSieve

    @classmethod
    def compile(cls) -> "MenuSelectors":
        """Compile every selector used by the menu parsers."""
        return cls(
            location_choices=soupsieve.compile("div#locationchoices"),
            location_item=soupsieve.compile("li.locations"),
            location_link=soupsieve.compile(".locations > a"),
            menu_date=soupsieve.compile("input[name=strCurSearchDays]"),
            meal_block=soupsieve.compile(
                'table[bordercolor="#CCC"] table[bordercolor="#FFFF00"]'
            ),
            meal_rows=soupsieve.compile(
                'table[bordercolor="#FFFF00"] > tbody > tr, '
                'table[bordercolor="#FFFF00"] > tr'
            ),
            meal_type=soupsieve.compile(".shortmenumeals"),
            section_rows=soupsieve.compile("table > tbody > tr, table > tr"),
            section_name=soupsieve.compile(".shortmenucats > span"),
            food_name=soupsieve.compile(".shortmenurecipes > span"),
            allergen_icons=soupsieve.compile("td > img"),
            food_price=soupsieve.compile(".shortmenuprices > span"),
        )
