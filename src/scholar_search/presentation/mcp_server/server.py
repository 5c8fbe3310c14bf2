"""
Scholar Search MCP Server

Model Context Protocol surface over the literature pipeline.

Architecture:
- instructions.py: SERVER_INSTRUCTIONS for AI agents
- tools.py: tool implementations
- container: DI container (dependency-injector) for service lifecycle
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from scholar_search.container import ApplicationContainer, shutdown_container

from .instructions import SERVER_INSTRUCTIONS
from .tools import register_literature_tools

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

logger = logging.getLogger(__name__)

# ── Module-level DI container ──────────────────────────────────────────────
_container: ApplicationContainer | None = None


def get_container() -> ApplicationContainer:
    """Get the application DI container.

    Raises:
        RuntimeError: If ``create_server()`` has not been called yet.
    """
    if _container is None:
        msg = "Container not initialized. Call create_server() first."
        raise RuntimeError(msg)
    return _container


def _make_lifespan(
    container: ApplicationContainer,
) -> Callable[[FastMCP[Any]], AbstractAsyncContextManager[ApplicationContainer]]:
    """Create a FastMCP lifespan handler bound to *container*."""

    @asynccontextmanager
    async def _lifespan(server: FastMCP[Any]) -> AsyncIterator[ApplicationContainer]:
        """Application lifecycle: startup, yield, shutdown."""
        logger.info("Lifecycle: startup, resources ready")
        try:
            yield container
        finally:
            await shutdown_container(container)
            logger.info("Lifecycle: shutdown, HTTP clients closed")

    return _lifespan


def create_server(
    container: ApplicationContainer | None = None,
    name: str = "scholar-search",
    disable_security: bool = False,
) -> FastMCP:
    """
    Create and configure the Scholar Search MCP server.

    Args:
        container: Service container; settings come from the environment
                   when omitted.
        name: Server name.
        disable_security: Disable DNS rebinding protection (needed for remote access).

    Returns:
        Configured FastMCP server instance.
    """
    global _container
    logger.info("Initializing Scholar Search MCP Server...")

    _container = container or ApplicationContainer()

    if disable_security:
        transport_security = TransportSecuritySettings(enable_dns_rebinding_protection=False)
        logger.info("DNS rebinding protection disabled for remote access")
    else:
        transport_security = None

    mcp = FastMCP(
        name,
        instructions=SERVER_INSTRUCTIONS,
        transport_security=transport_security,
        lifespan=_make_lifespan(_container),
    )

    tools = register_literature_tools(mcp, _container)
    logger.info("Tool registration complete: %s", ", ".join(tools))

    return mcp


def main():
    """Run the MCP server (stdio)."""

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    server = create_server()
    server.run()


if __name__ == "__main__":
    main()
