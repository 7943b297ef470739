"""
Main application module for the mesh bridge backend.

This file sets up the FastAPI application, configures CORS so browser
clients can post meshes cross-origin, and exposes a simple health check
endpoint.  The mesh encode/decode router is included under the `/api`
namespace.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes_meshes import router as meshes_router


def create_app() -> FastAPI:
    """Factory to create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(title="Mesh bridge")

    # Allow all origins by default.  In production you should restrict
    # this to the domains that are allowed to access your API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint for monitoring and deployment probes.
    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(meshes_router, prefix="/api", tags=["meshes"])

    return app


# Application instance.  run.py imports it from `backend.app.main`; the
# tests import it as `app.main` with backend/ on sys.path.
app = create_app()
