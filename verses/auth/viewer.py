"""Request-scoped viewer identity.

Every service call that depends on who is looking receives a ``Viewer``
explicitly; nothing reads the caller from ambient state.
"""

from dataclasses import dataclass

from litestar.connection import ASGIConnection

from verses.auth.tokens import read_access_token

_VIEWER_SCOPE_KEY = "_verses_viewer"


@dataclass(frozen=True)
class Viewer:
    """The caller of a request; ``user_id`` is ``None`` for anonymous callers."""

    user_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = Viewer()


def bearer_token(connection: ASGIConnection) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    header = connection.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def resolve_viewer(connection: ASGIConnection) -> Viewer:
    """Resolve the viewer once per request.

    A missing, expired or forged token yields ``ANONYMOUS``; endpoints that
    need an identity reject that with ``auth_guard``.
    """
    cached = connection.scope.get(_VIEWER_SCOPE_KEY)
    if cached is not None:
        return cached

    viewer = ANONYMOUS
    token = bearer_token(connection)
    if token:
        settings = connection.app.state.settings
        user_id = read_access_token(
            token,
            secret=settings.secret_key,
            issuer=settings.auth.issuer,
            audience=settings.auth.audience,
        )
        if user_id:
            viewer = Viewer(user_id=user_id)

    connection.scope[_VIEWER_SCOPE_KEY] = viewer  # type: ignore[literal-required]
    return viewer
