"""Server management commands."""

import click
import uvicorn

from taskboard_service.cli.utils import info
from taskboard_service.core.settings import get_app_settings, get_logging_settings


@click.group(name="server")
def server() -> None:
    """Server management commands."""


@server.command()
@click.option("--host", default=None, help="Host to bind (default: APP_HOST)")
@click.option("--port", default=None, type=int, help="Port to bind (default: APP_PORT)")
@click.option("--reload/--no-reload", default=None, help="Enable auto-reload on code changes")
def run(host: str | None, port: int | None, reload: bool | None) -> None:
    """Run the API server with uvicorn."""
    settings = get_app_settings()
    log_settings = get_logging_settings()
    host = host or settings.host
    port = port or settings.port
    reload = settings.reload if reload is None else reload

    info(f"Server will run at: http://{host}:{port}")
    info(f"Environment: {settings.environment}")
    info(f"Auto-reload: {'enabled' if reload else 'disabled'}")

    uvicorn.run(
        "taskboard_service.app.main:app",
        host=host,
        port=port,
        reload=reload,
        access_log=settings.debug,
        log_level=log_settings.level.lower(),
    )
