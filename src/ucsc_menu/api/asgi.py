"""ASGI entrypoint for the UCSC menu API."""

from ucsc_menu.api.app import create_app
from ucsc_menu.containers import build_container

app = create_app(build_container())
