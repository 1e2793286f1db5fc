"""ASGI entrypoint for the CutBoard API."""

from cutboard.api.app import create_app
from cutboard.containers import build_container

app = create_app(build_container())
