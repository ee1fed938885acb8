"""Text extraction helpers shared by the menu parsers."""

import re

from bs4 import Tag
from soupsieve import SoupSieve

from ucsc_menu.parsing.errors import MissingElementError, TextNodeError

_EXCESS_WHITESPACE = re.compile(r"\s\s+")


def collapse_whitespace(text: str) -> str:
    """Replace every run of two or more whitespace characters with one space."""
    return _EXCESS_WHITESPACE.sub(" ", text)


def inner_text(element: Tag, field: str, position: str | None = None) -> str:
    """Return the single text node inside ``element``."""
    strings = list(element.strings)
    if len(strings) != 1:
        raise TextNodeError(field, len(strings), position)
    return str(strings[0])


def text_from_selection(
    selector: SoupSieve,
    element: Tag,
    context: str,
    field: str,
    position: str | None = None,
) -> str:
    """Return the single text node of the first ``selector`` match."""
    match = selector.select_one(element)
    if match is None:
        raise MissingElementError(field, context)
    return inner_text(match, field, position)
