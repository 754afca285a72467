"""Main MCP server entry point."""
import logging

from . import config
from .client import get_connection
from .config import mcp, ConfigurationError


def main():
    """Entry point for the MCP server."""
    # stdout carries the stdio protocol, so logs go to stderr
    logging.basicConfig(
        level=config.AZDO_LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        get_connection()
    except ConfigurationError as exc:
        raise SystemExit(str(exc))

    # Import all modules to trigger tool registration
    from . import tools  # noqa: F401

    if config.AZDO_MCP_TRANSPORT == "streamable-http":
        mcp.run(
            transport="streamable-http",
            host=config.AZDO_MCP_HOST,
            port=config.AZDO_MCP_PORT,
            path="/mcp",
        )
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
