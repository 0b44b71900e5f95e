from verses.auth.guards import auth_guard
from verses.auth.viewer import ANONYMOUS, Viewer, resolve_viewer

__all__ = ["ANONYMOUS", "Viewer", "auth_guard", "resolve_viewer"]
