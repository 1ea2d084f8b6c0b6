"""Project path resolution shared by the API and the CLI."""

import os
from pathlib import Path


def resolve_base_path() -> Path:
    """Project root: the parent of ``backend/`` when started from there."""
    cwd = Path.cwd()
    if cwd.name == "backend":
        return cwd.parent
    return cwd


def resolve_metadata_path(base_path: Path) -> Path:
    """MASTERCRUD_METADATA_PATH, else ``<base_path>/metadata``."""
    env_path = os.environ.get("MASTERCRUD_METADATA_PATH")
    if env_path:
        return Path(env_path)
    return base_path / "metadata"
