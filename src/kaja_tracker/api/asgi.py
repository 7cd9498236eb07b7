"""ASGI entrypoint for the kaja tracker API."""

from kaja_tracker.api.app import create_app
from kaja_tracker.containers import build_container

app = create_app(build_container())
