"""
Bootstrap module for the Cats Gateway.
Wires configuration, the upstream client and the per-transport dispatchers.
"""

from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Ensure env is loaded early
load_dotenv()
from cats_gateway.config import GatewayConfig
from cats_gateway.rpc.dispatcher import Dispatcher, Transport
from cats_gateway.tools import TOOL_HANDLERS
from cats_gateway.upstream import CatsClient


@dataclass(frozen=True)
class AppContainer:
    config: GatewayConfig
    client: CatsClient
    http_dispatcher: Dispatcher
    stdio_dispatcher: Dispatcher


def bootstrap(config: Optional[GatewayConfig] = None, client: Optional[CatsClient] = None) -> AppContainer:
    """Build the application container from configuration."""
    config = config or GatewayConfig()

    # Fail-Closed Configuration Check
    # Every advertised tool we implement must have an upstream endpoint
    for name in TOOL_HANDLERS:
        if name in config.tools:
            config.endpoint_path(name)

    client = client or CatsClient(config.base_url, config.endpoints)

    return AppContainer(
        config=config,
        client=client,
        http_dispatcher=Dispatcher(config, client, Transport.HTTP),
        stdio_dispatcher=Dispatcher(config, client, Transport.STDIO),
    )


# Application container instance
_container: Optional[AppContainer] = None


def get_app_container() -> AppContainer:
    """Get the application's container."""
    global _container
    if _container is None:
        _container = bootstrap()
    return _container
