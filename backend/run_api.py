"""Local dev entrypoint for the MasterCRUD API."""

from __future__ import annotations

import os
import sys
from pathlib import Path


def _ensure_src_on_path() -> None:
    backend_dir = Path(__file__).resolve().parent
    src_dir = backend_dir / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


if __name__ == "__main__":
    _ensure_src_on_path()

    import uvicorn

    from mastercrud.logging_config import configure_logging

    configure_logging(level=os.environ.get("MASTERCRUD_LOG_LEVEL", "debug"))

    uvicorn.run(
        "mastercrud.api.app:app",
        host="127.0.0.1",
        port=int(os.environ.get("PORT") or os.environ.get("MASTERCRUD_PORT") or "8080"),
        reload=True,
        log_config=None,
    )
