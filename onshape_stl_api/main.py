"""FastAPI entry point exposing the STL import over plain HTTP."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI

from onshape_stl_mcp_server.client import OnshapeClient
from onshape_stl_mcp_server.config import load_settings
from onshape_stl_mcp_server.logging_config import configure_logging
from onshape_stl_mcp_server.server import SERVER_VERSION

from .routers import imports as imports_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = load_settings()
    configure_logging(settings.log_level, settings.json_logs)
    async with OnshapeClient(settings) as client:
        app.state.onshape_client = client
        yield
    app.state.onshape_client = None


app = FastAPI(
    title="Onshape STL Importer API",
    version=SERVER_VERSION,
    description="Create Onshape documents from ASCII STL text.",
    lifespan=lifespan,
)

app.include_router(imports_router.router)


@app.get("/")
async def index() -> Dict[str, Any]:
    return {
        "name": "onshape-stl-api",
        "version": app.version,
        "routes": [
            {"path": "/imports", "methods": ["POST"]},
        ],
    }
