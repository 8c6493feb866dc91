"""ASGI entrypoint for the mess analyzer API."""

from mess_analyzer.api.app import create_app
from mess_analyzer.containers import build_container

app = create_app(build_container())
