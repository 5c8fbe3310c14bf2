"""Presentation Layer - MCP server for agent clients."""
