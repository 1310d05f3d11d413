"""Model Context Protocol server that imports LLM-written ASCII STL into Onshape.

The calling model generates the STL text itself and hands it to the
``import_stl`` tool; this server never calls an LLM. It only forwards the
payload to Onshape and reports the new document back.
"""
from __future__ import annotations

import argparse
import sys
from typing import Annotated, Optional

import httpx
import structlog
from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent
from pydantic import Field

from .client import OnshapeClient
from .config import OnshapeSettings, load_settings
from .errors import ConfigurationError, OnshapeError
from .importer import import_stl
from .logging_config import configure_logging
from .schemas import HealthResponse, ImportStlRequest

SERVER_NAME = "Onshape STL Importer"
SERVER_VERSION = "2.0.0"

logger = structlog.get_logger(__name__)


def _text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


async def run_import_tool(client: OnshapeClient, request: ImportStlRequest) -> CallToolResult:
    """Run the import and render the tool result.

    Arguments arrive already validated against the tool signature.
    """

    try:
        result = await import_stl(client, request)
    except OnshapeError as exc:
        return _text_result(f"Error importing STL: {exc.message}", is_error=True)
    return _text_result(result.message())


def build_server(settings: OnshapeSettings, http_client: Optional[httpx.AsyncClient] = None) -> FastMCP:
    """Create the MCP server bound to one Onshape client for the process lifetime."""

    client = OnshapeClient(settings, http_client=http_client)
    server = FastMCP(
        name=SERVER_NAME,
        instructions=(
            "Creates an Onshape document from an ASCII STL string supplied by the LLM. "
            "Generate valid ASCII STL for the user's request, then call import_stl with it."
        ),
    )

    @server.tool(
        name="import_stl",
        title="Import STL",
        description="Create a private Onshape document and import the given ASCII STL into its Part Studio.",
    )
    async def import_stl_tool(
        stl: Annotated[str, Field(min_length=1, description="ASCII STL content to import into Onshape")],
        documentName: Annotated[
            Optional[str], Field(description="Name for the new Onshape document (default: 'AI Model <ISO date>')")
        ] = None,
        filename: Annotated[
            Optional[str], Field(description="Filename for the STL blob (default: 'model.stl')")
        ] = None,
        createNewPartStudio: Annotated[
            Optional[bool], Field(description="Create a new Part Studio for the STL import (default false)")
        ] = None,
    ) -> CallToolResult:
        request = ImportStlRequest(
            stl=stl,
            documentName=documentName,
            filename=filename,
            createNewPartStudio=createNewPartStudio,
        )
        return await run_import_tool(client, request)

    @server.tool(name="health_check", title="Health Check", description="Validate the Onshape STL server is available.")
    def health_check() -> HealthResponse:
        """Report server status without contacting Onshape."""

        return HealthResponse(name=SERVER_NAME, version=SERVER_VERSION, api_url=settings.api_url)

    return server


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run the Onshape STL importer MCP server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="Transport used by the server. Desktop hosts use 'stdio', remote hosts use HTTP.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Host/IP for HTTP transports.")
    parser.add_argument("--port", type=int, default=8000, help="Port for HTTP transports.")
    parser.add_argument(
        "--mount-path",
        default="/",
        help="Mount path used when running under SSE transport (e.g. '/onshape').",
    )
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level, settings.json_logs)
    server = build_server(settings)
    server.settings.host = args.host
    server.settings.port = int(args.port)

    logger.info("server_starting", transport=args.transport, api_url=settings.api_url, version=SERVER_VERSION)
    if args.transport == "stdio":
        server.run("stdio")
    elif args.transport == "sse":
        server.run("sse", mount_path=args.mount_path)
    else:
        server.settings.mount_path = args.mount_path
        server.run("streamable-http")


if __name__ == "__main__":
    main()
