"""Structural checks for entity YAML files.

The entity schema (``schemas/entity.schema.json``) rejects unknown keys,
unsafe identifiers and unsupported field types before the loader runs its
semantic checks. Files that pass the schema are also linted for
conventions the loader tolerates; those findings are warnings.

    issues = validate_metadata_dir(Path("metadata"), strict=True)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schemas" / "entity.schema.json"


@dataclass
class ValidationIssue:
    """One finding in one metadata file."""

    file: Path
    message: str
    path: str = ""  # e.g. "fields[1]/type"
    severity: str = "error"  # or "warning"

    def __str__(self) -> str:
        where = f"{self.file} at {self.path}" if self.path else str(self.file)
        return f"[{self.severity.upper()}] {where}: {self.message}"


@lru_cache(maxsize=1)
def load_entity_schema() -> dict[str, Any]:
    with SCHEMA_PATH.open() as fh:
        return json.load(fh)


def _location(error: ValidationError) -> str:
    """``fields[1]/type`` style location of a schema error."""
    location = ""
    for part in error.absolute_path:
        if isinstance(part, int):
            location += f"[{part}]"
        else:
            location += f"/{part}" if location else str(part)
    return location


def _lint(yaml_path: Path, doc: dict[str, Any]) -> list[ValidationIssue]:
    issues = []
    if not doc.get("search"):
        issues.append(
            ValidationIssue(
                file=yaml_path,
                path="search",
                message=f"'{doc['entity']}' has no search fields; ?q= will be ignored",
                severity="warning",
            )
        )
    if yaml_path.stem != doc["entity"]:
        issues.append(
            ValidationIssue(
                file=yaml_path,
                path="entity",
                message=f"File name does not match entity key '{doc['entity']}'",
                severity="warning",
            )
        )
    return issues


def validate_yaml_file(
    yaml_path: Path,
    schema: dict[str, Any] | None = None,
) -> list[ValidationIssue]:
    """Validate one entity file against the entity schema.

    Returns:
        Issues ordered by document location; empty when the file is valid.
    """
    try:
        doc = yaml.safe_load(yaml_path.read_text())
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if doc is None:
        return [ValidationIssue(file=yaml_path, message="File is empty")]

    validator = Draft202012Validator(schema or load_entity_schema())
    errors = sorted(validator.iter_errors(doc), key=lambda e: list(e.absolute_path))
    if errors:
        return [
            ValidationIssue(file=yaml_path, message=e.message, path=_location(e))
            for e in errors
        ]
    return _lint(yaml_path, doc)


def validate_metadata_dir(metadata_dir: Path, *, strict: bool = False) -> list[ValidationIssue]:
    """Validate every ``entities/*.yaml`` under ``metadata_dir``.

    With ``strict`` every warning is reported as an error.
    """
    if not metadata_dir.is_dir():
        return [
            ValidationIssue(
                file=metadata_dir,
                message=f"Metadata directory does not exist: {metadata_dir}",
            )
        ]

    entities_dir = metadata_dir / "entities"
    if not entities_dir.is_dir():
        issues = [
            ValidationIssue(
                file=entities_dir,
                message="No entities directory; no entities will be registered",
                severity="warning",
            )
        ]
    else:
        issues = []
        for yaml_file in sorted(entities_dir.glob("*.yaml")):
            issues.extend(validate_yaml_file(yaml_file))

    if strict:
        for issue in issues:
            issue.severity = "error"

    logger.debug("Validated metadata in %s: %d issue(s)", metadata_dir, len(issues))
    return issues
