"""ASGI entry point: ``hypercorn verses.asgi:app``."""

from verses.app_factory import create_app
from verses.lib import observability

app = observability.instrument_app(create_app())
