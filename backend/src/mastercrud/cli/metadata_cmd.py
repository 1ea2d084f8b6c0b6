"""``mastercrud metadata`` commands."""

from pathlib import Path

import click

from mastercrud.hooks import HookRegistry, HookService, register_builtin_hooks
from mastercrud.metadata.loader import EntityRegistry, MetadataLoader
from mastercrud.metadata.validator import ValidationIssue, validate_metadata_dir
from mastercrud.paths import resolve_base_path, resolve_metadata_path

_ISSUE_COLOURS = {"error": "red", "warning": "yellow"}


@click.group()
def metadata():
    """Inspect and check entity metadata."""


def _print_issues(issues: list[ValidationIssue]) -> int:
    """Echo each issue and return the number of errors among them."""
    for issue in issues:
        click.secho(str(issue), fg=_ISSUE_COLOURS.get(issue.severity))
    return sum(1 for issue in issues if issue.severity == "error")


def _load(metadata_path: Path) -> EntityRegistry:
    """Load the registry and resolve every hook name it references."""
    registry = MetadataLoader(metadata_path).load_all()
    hooks = HookRegistry()
    register_builtin_hooks(hooks)
    HookService.build(registry, hooks)
    return registry


@metadata.command()
@click.option("--strict", is_flag=True, help="Fail on warnings too.")
@click.option(
    "--path",
    "metadata_path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Metadata directory (default: MASTERCRUD_METADATA_PATH or ./metadata).",
)
def validate(strict: bool, metadata_path: Path | None):
    """Check entity files against the schema, then load them."""
    metadata_path = metadata_path or resolve_metadata_path(resolve_base_path())
    if not metadata_path.is_dir():
        raise click.ClickException(f"No metadata directory at {metadata_path}")

    error_count = _print_issues(validate_metadata_dir(metadata_path, strict=strict))
    if error_count:
        click.secho(f"\n{error_count} schema error(s) found", fg="red", bold=True)
        raise SystemExit(1)

    try:
        registry = _load(metadata_path)
    except ValueError as e:
        click.secho(f"\nInvalid metadata: {e}", fg="red", err=True)
        raise SystemExit(1)

    click.echo(f"\nLoaded {len(registry)} entities:")
    for entity in registry:
        search = ", ".join(entity.search_fields) or "-"
        click.echo(
            f"  ✓ {entity.key} -> {entity.table_name} "
            f"({len(entity.fields)} fields, search: {search})"
        )
    click.secho("\nAll metadata is valid.", fg="green", bold=True)
