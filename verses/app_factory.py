"""Litestar application assembly."""

from __future__ import annotations

import logging
from typing import Any

from advanced_alchemy.extensions.litestar import SQLAlchemyPlugin
from litestar import Litestar
from litestar.datastructures import State
from litestar.exceptions import HTTPException

from verses.app_config import build_db_config, build_logging_config, build_login_limiter
from verses.config import Settings, get_settings
from verses.controllers import AuthController, PoemsController, UsersController, health
from verses.lib import observability
from verses.lib.exceptions import http_exception_handler, internal_server_error_handler

logger = logging.getLogger(__name__)

EXCEPTION_HANDLERS: dict[type[Exception], Any] = {
    HTTPException: http_exception_handler,
    Exception: internal_server_error_handler,
}


def create_app(settings: Settings | None = None) -> Litestar:
    """Create the API application.

    ``settings`` defaults to the cached settings loaded from the environment
    and ``app.yaml``.
    """
    if settings is None:
        settings = get_settings()

    observability.configure(settings)

    db_config = build_db_config(settings)

    async def on_startup(_app: Litestar) -> None:
        observability.instrument_sqlalchemy(db_config.get_engine())
        logger.info("Verses API started (database: %s)", db_config.get_engine().url.render_as_string())

    return Litestar(
        route_handlers=[health, AuthController, PoemsController, UsersController],
        plugins=[SQLAlchemyPlugin(config=db_config)],
        on_startup=[on_startup],
        exception_handlers=EXCEPTION_HANDLERS,
        logging_config=build_logging_config(settings),
        state=State({"settings": settings, "login_limiter": build_login_limiter(settings)}),
        debug=settings.debug,
    )
