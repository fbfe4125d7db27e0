"""
Cats Gateway - FastAPI Application
Exposes the cats API as JSON-RPC 2.0 over HTTP.
"""

import logging
import sys
from typing import Optional

import uvicorn
from bootstrap import AppContainer, get_app_container
from dotenv import load_dotenv
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from cats_gateway.config import ConfigurationError
from cats_gateway.routers import rpc

# Load environment variables from .env
load_dotenv()

logger = logging.getLogger("cats-gateway")


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    if container is None:
        try:
            container = get_app_container()
        except ConfigurationError as e:
            print(f"CRITICAL: {e}. Exiting.", file=sys.stderr)
            sys.exit(2)

    config = container.config
    app = FastAPI(
        title=config.server_name,
        description="JSON-RPC 2.0 gateway for the cats API",
        version=config.server_version,
    )
    app.state.container = container

    app.include_router(rpc.router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


def main() -> None:
    container = get_app_container()
    config = container.config
    logging.basicConfig(level=config.log_level)

    logger.info(f"Cats Gateway listening on {config.host}:{config.port}")
    logger.info(f"Server information: {config.server_name} v{config.server_version}")
    logger.info(f"Available tools: {', '.join(config.tools)}")

    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
