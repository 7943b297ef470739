"""
Entry point for the mesh bridge service.

Running this script with ``python run.py`` will start the FastAPI
server exposing the mesh encode/decode endpoints.  The application
defined in ``backend/app/main.py`` is imported after adjusting the
Python path to include the repository root.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import logging
import uvicorn

logging.basicConfig(
    level=logging.DEBUG if os.getenv("MESH_BRIDGE_DEBUG") else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main() -> None:
    """Run the Uvicorn server hosting the mesh bridge application."""
    # Determine the repository root relative to this file and ensure it is on
    # sys.path so that ``backend`` can be imported as a package.
    repo_root = Path(__file__).resolve().parent
    if str(repo_root) not in sys.path:
        sys.path.append(str(repo_root))

    # Import inside main() to avoid modifying sys.path at module import time.
    from backend.app.main import app  # type: ignore

    host = os.getenv("MESH_BRIDGE_HOST", "0.0.0.0")
    port = int(os.getenv("MESH_BRIDGE_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
