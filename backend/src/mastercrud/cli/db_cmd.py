"""Database CLI commands."""

import click

from mastercrud.metadata.loader import MetadataLoader
from mastercrud.paths import resolve_base_path, resolve_metadata_path
from mastercrud.persistence import DatabaseConfig, connect_with_retry, create_adapter


@click.group()
def db():
    """Database commands."""
    pass


@db.command()
def init():
    """Create missing tables for every registered entity.

    Existing tables are left untouched.
    """
    base_path = resolve_base_path()
    registry = MetadataLoader(resolve_metadata_path(base_path)).load_all()

    config = DatabaseConfig.from_env(base_path)
    adapter = create_adapter(config)
    try:
        connect_with_retry(adapter, config)
    except Exception as e:
        click.echo(click.style(f"Could not connect to {config.redacted_url()}: {e}", fg="red"), err=True)
        raise SystemExit(1)

    try:
        for entity in registry:
            adapter.initialize_entity(entity)
            click.echo(f"  ✓ {entity.table_name}")
    finally:
        adapter.close()

    click.echo(click.style(f"\nInitialized {len(registry)} table(s).", fg="green", bold=True))
