"""ASGI entrypoint for the restaurant diary."""

from eatin.api.app import create_app
from eatin.containers import build_container

app = create_app(build_container())
