"""Builders for the pieces the Litestar app is assembled from."""

from advanced_alchemy.config import EngineConfig
from advanced_alchemy.extensions.litestar import AsyncSessionConfig, SQLAlchemyAsyncConfig
from litestar.logging import LoggingConfig

from verses.config import Settings
from verses.db.base import Base
from verses.lib.throttle import FailedLoginLimiter


def build_db_config(settings: Settings) -> SQLAlchemyAsyncConfig:
    """Build the SQLAlchemy async database configuration."""
    if "sqlite" in settings.db.url:
        engine_config = EngineConfig(echo=settings.db.echo)
    else:
        engine_config = EngineConfig(
            pool_size=settings.db.pool_size,
            max_overflow=settings.db.pool_overflow,
            pool_timeout=settings.db.pool_timeout,
            pool_pre_ping=settings.db.pool_pre_ping,
            echo=settings.db.echo,
        )

    return SQLAlchemyAsyncConfig(
        connection_string=settings.db.url,
        metadata=Base.metadata,
        create_all=settings.db.create_all,
        session_config=AsyncSessionConfig(expire_on_commit=False),
        engine_config=engine_config,
    )


def build_logging_config(settings: Settings) -> LoggingConfig:
    """Route application loggers through Litestar's queue handler at the configured level."""
    return LoggingConfig(
        root={"level": settings.log_level.upper(), "handlers": ["queue_listener"]},
        log_exceptions="never",
    )


def build_login_limiter(settings: Settings) -> FailedLoginLimiter:
    return FailedLoginLimiter(
        max_failures=settings.auth.max_failed_logins,
        window=settings.auth.failed_login_window,
    )
