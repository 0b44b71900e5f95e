import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so env vars are available for YAML interpolation
load_dotenv(Path.cwd() / ".env")

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")

CONFIG_PATH_ENV = "VERSES_CONFIG"


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def get_config_path() -> Path:
    """Path of the YAML config file, overridable with $VERSES_CONFIG."""
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override)
    return Path.cwd() / "app.yaml"


def load_app_config() -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = "sqlite+aiosqlite:///./verses.db"
    pool_size: int = 5
    pool_overflow: int = 10
    pool_timeout: int = 30
    pool_pre_ping: bool = True
    echo: bool = False
    # Create missing tables on startup. Migrations are not managed here.
    create_all: bool = True


class AuthConfig(BaseModel):
    """Bearer token configuration."""

    issuer: str = "verses"
    audience: str = "verses-clients"
    token_ttl_minutes: int = 60 * 24 * 7
    max_failed_logins: int = 5
    failed_login_window: float = 300.0


class PoemsConfig(BaseModel):
    """Poem visibility and paging rules."""

    # When false, a draft fetched by id is only visible to its owner.
    drafts_visible: bool = True
    default_page_size: int = 10
    max_page_size: int = 50
    top_poems_limit: int = 10


class LogfireConfig(BaseModel):
    """Pydantic Logfire tracing configuration."""

    enabled: bool = False
    service_name: str = "verses"
    environment: str | None = None
    sample_rate: float = 1.0
    console: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    debug: bool = False
    secret_key: str
    log_level: str = "INFO"

    db: DatabaseConfig = DatabaseConfig()
    auth: AuthConfig = AuthConfig()
    poems: PoemsConfig = PoemsConfig()
    logfire: LogfireConfig = LogfireConfig()


_SECTIONS: dict[str, type[BaseModel]] = {
    "db": DatabaseConfig,
    "auth": AuthConfig,
    "poems": PoemsConfig,
    "logfire": LogfireConfig,
}


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and app.yaml."""
    base_settings = Settings()

    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    updates = {
        name: model(**app_config[name])
        for name, model in _SECTIONS.items()
        if name in app_config
    }
    if "debug" in app_config:
        updates["debug"] = bool(app_config["debug"])
    if "log_level" in app_config:
        updates["log_level"] = str(app_config["log_level"])

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings
