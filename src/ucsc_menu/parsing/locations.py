"""Parse the landing page's list of dining locations."""

from urllib.parse import parse_qs, urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from ucsc_menu.domain.locations import Location, LocationMeta, Locations
from ucsc_menu.parsing.errors import (
    MissingAttributeError,
    MissingElementError,
    MissingQueryParameterError,
)
from ucsc_menu.parsing.selectors import MenuSelectors

DEFAULT_BASE_URL = "https://nutrition.sa.ucsc.edu/"


def location_meta_from_url(url: str) -> LocationMeta:
    """Read ``locationNum`` and ``locationName`` out of a location URL."""
    query = parse_qs(urlparse(url).query, keep_blank_values=True)
    ids = query.get("locationNum")
    if not ids:
        raise MissingQueryParameterError("locationNum", url)
    names = query.get("locationName")
    if not names:
        raise MissingQueryParameterError("locationName", url)
    return LocationMeta(id=ids[0], name=names[0], url=url)


def parse_location_meta(
    item: Tag, selectors: MenuSelectors, base_url: str = DEFAULT_BASE_URL
) -> LocationMeta:
    """Parse one ``li.locations`` entry."""
    link = selectors.location_link.select_one(item)
    if link is None:
        raise MissingElementError("location link", "location")
    href = link.get("href")
    if href is None:
        raise MissingAttributeError("location link", "href")
    return location_meta_from_url(urljoin(base_url, str(href)))


def parse_locations(
    root: Tag, selectors: MenuSelectors, base_url: str = DEFAULT_BASE_URL
) -> Locations:
    """Parse every location in the ``#locationchoices`` container, in page order."""
    choices = selectors.location_choices.select_one(root)
    if choices is None:
        raise MissingElementError("location choices container", "landing page")
    locations = tuple(
        Location(meta=parse_location_meta(item, selectors, base_url))
        for item in selectors.location_item.iselect(choices)
    )
    return Locations(locations=locations)


def parse_locations_html(
    html: str, selectors: MenuSelectors, base_url: str = DEFAULT_BASE_URL
) -> Locations:
    """Parse raw landing page HTML into Locations."""
    return parse_locations(BeautifulSoup(html, "html.parser"), selectors, base_url)
