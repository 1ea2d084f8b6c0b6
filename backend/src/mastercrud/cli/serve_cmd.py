"""Serve command: runs the API under Uvicorn."""

import os

import click


def _default_port() -> int:
    return int(os.environ.get("PORT") or os.environ.get("MASTERCRUD_PORT") or "8080")


@click.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind address.")
@click.option("--port", type=int, default=None, help="Listen port (default: PORT, MASTERCRUD_PORT or 8080).")
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes (development).")
def serve(host: str, port: int | None, reload: bool):
    """Run the HTTP server."""
    import uvicorn

    uvicorn.run(
        "mastercrud.api.app:app",
        host=host,
        port=port or _default_port(),
        reload=reload,
        log_config=None,  # keep the logging set up by the CLI group
    )
