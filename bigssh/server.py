"""bigssh FastMCP server.

Thin wiring of the bigssh tool onto a FastMCP server. Execution logic lives in
services/.
"""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from bigssh.services import get_dependencies
from bigssh.tools import bigssh
from bigssh.utils.console import MCPRequestFormatter


def _configure_logging() -> None:
    """Configure colorful logging for the bigssh package.

    Called at module load time so that logging is set up however the server
    is started.
    """
    log_level = os.getenv("BIGSSH_LOG_LEVEL", "INFO").upper()
    use_colors = os.getenv("BIGSSH_LOG_COLORS", "true").lower() != "false"

    if not sys.stderr.isatty():
        use_colors = False

    bigssh_logger = logging.getLogger("bigssh")
    bigssh_logger.setLevel(getattr(logging, log_level, logging.INFO))

    if not bigssh_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(MCPRequestFormatter(use_colors=use_colors))
        bigssh_logger.addHandler(handler)
        bigssh_logger.propagate = False

    for noisy_logger in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "asyncssh",
        "httpx",
        "httpcore",
        "fastmcp",
        "starlette",
        "anyio",
    ]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


_configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Load SSH hosts at startup.

    Yields:
        Dict with the configured host names
    """
    logger.info("bigssh server starting up")
    hosts = get_dependencies().config.get_hosts()
    logger.info(
        "Loaded %d SSH host(s): %s",
        len(hosts),
        ", ".join(sorted(hosts)) if hosts else "(none)",
    )
    logger.info("bigssh server ready to accept connections")
    try:
        yield {"hosts": list(hosts)}
    finally:
        logger.info("bigssh server shutdown complete")


def create_server() -> FastMCP:
    """Create the MCP server with the bigssh tool and health route."""
    server = FastMCP("bigssh", lifespan=app_lifespan)

    server.tool()(bigssh)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
