"""Command-line entry point: run the HTTP service or bootstrap the schema."""

from __future__ import annotations

import typer
from loguru import logger
from rich.console import Console

from src.book_service.runtime.context import get_config

console = Console()

app = typer.Typer(
    name="book-service",
    help="Book record CRUD service",
    no_args_is_help=True,
    add_completion=False,
)


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Listen address (default from config)"),
    port: int | None = typer.Option(None, help="Listen port (default from config)"),
) -> None:
    """Serve the book API until interrupted.

    Exits non-zero if the record store is unreachable or the port cannot be bound.
    """
    import uvicorn

    config = get_config()
    uvicorn.run(
        "src.book_service.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        access_log=False,  # Request logging middleware covers access logs
    )


@app.command("init-db")
def init_db() -> None:
    """Create the book table if it does not exist."""
    from src.book_service.api.utils.app_startup import configure_logging
    from src.book_service.core.services import BookStore, StoreUnavailableError

    configure_logging()
    store = BookStore.from_config(get_config().database)
    try:
        store.connect()
    except StoreUnavailableError as e:
        logger.critical("{}", e)
        console.print(f"[red]❌ Record store unavailable:[/red] {e}")
        raise typer.Exit(code=1) from e
    finally:
        store.dispose()
    console.print(f"[green]✅ Book table ready at {store.safe_url}[/green]")


if __name__ == "__main__":
    app()
