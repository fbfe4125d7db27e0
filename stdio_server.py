"""
Cats Gateway - stdio entry point.
Reads JSON-RPC requests line by line from stdin, answers on stdout.
All logging goes to stderr.
"""

import asyncio
import logging
import sys

from bootstrap import get_app_container
from cats_gateway.config import ConfigurationError
from cats_gateway.handlers.stdio import StdioServer


def main() -> int:
    logging.basicConfig(stream=sys.stderr, level=logging.INFO, format="[LOG] %(message)s")
    logger = logging.getLogger("cats-gateway")
    logger.info("Cats Gateway STDIO server starting...")

    try:
        container = get_app_container()
    except ConfigurationError as e:
        logger.critical(f"CRITICAL: {e}. Exiting.")
        return 2

    config = container.config
    logging.getLogger().setLevel(config.log_level)
    logger.info(f"Server information: {config.server_name} v{config.server_version}")
    logger.info(f"Available tools: {', '.join(config.tools)}")

    server = StdioServer(container.stdio_dispatcher)
    asyncio.run(server.run())
    logger.info(f"Handled {server.handled} requests, bye")
    return 0


if __name__ == "__main__":
    sys.exit(main())
