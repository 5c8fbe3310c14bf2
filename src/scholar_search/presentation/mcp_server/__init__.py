"""
Scholar Search MCP Server

Usage:
    python -m scholar_search.presentation.mcp_server
"""

from .server import create_server, main

__all__ = ["create_server", "main"]
