"""MasterCRUD CLI entry point."""

import click

from mastercrud.logging_config import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Logging level (default: MASTERCRUD_LOG_LEVEL or INFO).")
@click.option("--json-logs", is_flag=True, default=False, help="Emit logs as JSON lines (default: MASTERCRUD_LOG_JSON).")
def cli(log_level: str | None, json_logs: bool):
    """MasterCRUD: metadata-driven master table CRUD service."""
    configure_logging(level=log_level, json_logs=json_logs or None)


# Register subcommand groups
from mastercrud.cli.db_cmd import db  # noqa: E402
from mastercrud.cli.metadata_cmd import metadata  # noqa: E402
from mastercrud.cli.serve_cmd import serve  # noqa: E402

cli.add_command(db)
cli.add_command(metadata)
cli.add_command(serve)
