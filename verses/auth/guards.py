from litestar.connection import ASGIConnection
from litestar.exceptions import NotAuthorizedException
from litestar.handlers.base import BaseRouteHandler

from verses.auth.viewer import resolve_viewer


def auth_guard(connection: ASGIConnection, _: BaseRouteHandler) -> None:
    """Reject requests that carry no valid access token."""
    if not resolve_viewer(connection).is_authenticated:
        raise NotAuthorizedException("Not authenticated")
