"""
HTTP API for the literature pipeline.

Provides REST endpoints for multi-source search, single PubMed lookups and
literature synthesis.
"""

from .server import create_api_server, run_api_server

__all__ = ["create_api_server", "run_api_server"]
