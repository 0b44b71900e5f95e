"""Tracing facade over Pydantic Logfire.

Everything here is a no-op unless ``logfire.enabled`` is set and the
``logfire`` package is installed, so call sites never need to check.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from verses.config import Settings

logger = logging.getLogger(__name__)

_logfire = None
_configured = False


def is_available() -> bool:
    return _logfire is not None and _configured


def configure(settings: Settings) -> None:
    """Set up logfire from the ``logfire`` settings section."""
    global _logfire, _configured

    if not settings.logfire.enabled:
        return

    try:
        import logfire as lf
    except ImportError:
        logger.warning("logfire is enabled but not installed; tracing is off")
        return

    kwargs: dict[str, Any] = {
        "service_name": settings.logfire.service_name,
        "send_to_logfire": "if-token-present",
    }
    if settings.logfire.environment:
        kwargs["environment"] = settings.logfire.environment
    if settings.logfire.sample_rate != 1.0:
        kwargs["trace_sample_rate"] = settings.logfire.sample_rate
    if not settings.logfire.console:
        kwargs["console"] = False

    lf.configure(**kwargs)
    _logfire = lf
    _configured = True


def reset() -> None:
    """Forget any configured logfire instance."""
    global _logfire, _configured
    _logfire = None
    _configured = False


def instrument_app(app):
    """Wrap the ASGI app with request spans; returns ``app`` untouched when off."""
    if not is_available():
        return app
    return _logfire.instrument_asgi(app)


def instrument_sqlalchemy(engine) -> None:
    if is_available():
        _logfire.instrument_sqlalchemy(engine=engine)


@contextmanager
def span(name: str, **attrs: Any):
    """Open a logfire span, or yield None when tracing is off."""
    if is_available():
        with _logfire.span(name, **attrs) as s:
            yield s
    else:
        yield None


def exception(msg: str, **kwargs: Any) -> bool:
    """Report the active exception. Returns False when tracing is off."""
    if is_available():
        _logfire.exception(msg, **kwargs)
        return True
    return False
