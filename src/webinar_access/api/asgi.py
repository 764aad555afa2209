"""ASGI entrypoint for the webinar access API."""

from webinar_access.api.app import create_app
from webinar_access.containers import build_container

app = create_app(build_container())
