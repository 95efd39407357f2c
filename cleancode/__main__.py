import asyncio
import logging
import sys

from .config import HOST, LOG_LEVEL, PORT, TRANSPORT
from .server import MCPServer

logger = logging.getLogger(__name__)


async def main():
    """
    Main entry point for the clean code planning MCP server.

    Serves a single ``cleancode`` tool that records planning steps,
    revisions and alternative branches for the lifetime of the process.
    """
    server = MCPServer()
    await server.run(transport=TRANSPORT, host=HOST, port=PORT)


def cli():
    # Records go to stderr; stdout carries the stdio protocol stream.
    logging.basicConfig(level=LOG_LEVEL)
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Clean Code MCP Server stopped")
    except Exception as e:
        logger.error(f"Fatal error running server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
