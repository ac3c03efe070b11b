"""Stock Research MCP Server: asynchronous multi-step ticker analysis."""

import os


def get_server_version() -> str:
    """Get version with fallback for dev mode."""
    if version := os.environ.get("SERVER_VERSION"):
        return version
    try:
        from importlib.metadata import version as pkg_version

        return pkg_version("stock-research-mcp")
    except Exception:
        return "dev"


SERVER_VERSION = get_server_version()
# Bump when job/step/report output schema changes materially
# v1: Initial schema (job, steps, report)
SCHEMA_VERSION = "1"
