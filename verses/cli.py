"""CLI commands for Verses."""

import asyncio
import base64
import re
import secrets
from pathlib import Path

import click


@click.group()
@click.version_option(package_name="verses")
def cli():
    """Verses - a small poetry publishing API."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Server logging level",
)
def serve(host, port, reload, workers, log_level):
    """Run the API server."""
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    config = Config()
    config.application_path = "verses.asgi:app"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = log_level.upper()
    config.include_server_header = False

    if reload or workers > 1:
        config.use_reloader = reload
        from hypercorn.run import run
        run(config)
        return

    from verses.asgi import app

    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


@cli.command()
@click.option(
    "--write",
    type=click.Path(),
    default=None,
    help="Write SECRET_KEY to a .env file",
)
@click.option(
    "--format",
    "fmt",
    default="urlsafe",
    type=click.Choice(["urlsafe", "hex", "base64"]),
    help="Output format for the secret key",
)
@click.option("--length", default=32, type=int, help="Number of random bytes")
def secret(write, fmt, length):
    """Generate a token-signing secret."""
    click.echo(_store_secret(generate_secret(fmt, length), write))


def generate_secret(fmt: str, length: int) -> str:
    if fmt == "urlsafe":
        return secrets.token_urlsafe(length)
    if fmt == "hex":
        return secrets.token_hex(length)
    return base64.b64encode(secrets.token_bytes(length)).decode("ascii")


def _store_secret(key: str, write: str | None) -> str:
    """Write ``key`` into an env file if asked; returns the line to print."""
    if not write:
        return key

    env_path = Path(write)
    env_content = env_path.read_text() if env_path.exists() else ""

    line = f"SECRET_KEY={key}"
    pattern = re.compile(r"^SECRET_KEY=.*$", re.MULTILINE)
    if pattern.search(env_content):
        env_content = pattern.sub(line, env_content)
    else:
        if env_content and not env_content.endswith("\n"):
            env_content += "\n"
        env_content += line + "\n"

    env_path.write_text(env_content)
    return f"SECRET_KEY written to {env_path}"


@cli.command("init-db")
def init_db():
    """Create any missing tables in the configured database."""
    from verses.app_config import build_db_config
    from verses.config import get_settings
    from verses.db import models  # noqa: F401  registers the tables
    from verses.db.base import Base

    settings = get_settings()
    db_config = build_db_config(settings)

    async def _create_all() -> None:
        engine = db_config.get_engine()
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        finally:
            await engine.dispose()

    asyncio.run(_create_all())
    click.echo(f"Tables created in {settings.db.url}")


if __name__ == "__main__":
    cli()
