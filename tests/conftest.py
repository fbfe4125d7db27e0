import os
import sys
import uuid
from typing import Any, Dict, List, Optional

import pytest

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cats_gateway.config import Descriptor, GatewayConfig
from cats_gateway.rpc.dispatcher import Dispatcher, Transport
from cats_gateway.upstream import UpstreamError

CAT_FIELDS = ["uuid", "name", "description", "image", "date_created"]

DESCRIPTOR: Dict[str, Any] = {
    "server": {"name": "test-cats", "version": "9.9.9"},
    "api": {
        "baseUrl": "http://cats.test",
        "endpoints": {
            "get_random_cat": {"path": "/cats/random"},
            "get_cats": {"path": "/cats"},
        },
    },
    "tools": {
        "get_random_cat": {
            "description": "One random cat",
            "parameters": {"type": "object", "properties": {}},
            "returns": {"type": "object", "required": CAT_FIELDS},
            "examples": [{"parameters": {}}],
        },
        "get_cats": {
            "description": "Many cats",
            "parameters": {"type": "object", "properties": {"n": {"type": "integer"}}},
            "returns": {"type": "array"},
        },
    },
}


def make_cat(i: int = 0) -> Dict[str, Any]:
    return {
        "uuid": str(uuid.uuid4()),
        "name": f"Cat {i}",
        "description": "A test cat",
        "image": f"http://cats.test/img/{i}.png",
        "date_created": "2024-01-01T00:00:00Z",
    }


class FakeCatsClient:
    """In-memory stand-in for CatsClient."""

    def __init__(self, error: Optional[str] = None):
        self.error = error
        self.calls: List[Any] = []

    def get_random_cat(self) -> Dict[str, Any]:
        self.calls.append(("get_random_cat",))
        if self.error:
            raise UpstreamError(self.error)
        return make_cat()

    def get_cats(self, n: Any) -> List[Dict[str, Any]]:
        self.calls.append(("get_cats", n))
        if self.error:
            raise UpstreamError(self.error)
        return [make_cat(i) for i in range(int(n))]


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch) -> GatewayConfig:
    monkeypatch.delenv("CATS_API_BASE_URL", raising=False)
    return GatewayConfig(descriptor=Descriptor.model_validate(DESCRIPTOR))


@pytest.fixture
def client() -> FakeCatsClient:
    return FakeCatsClient()


@pytest.fixture
def failing_client() -> FakeCatsClient:
    return FakeCatsClient(error="Request failed with status code 503")


@pytest.fixture
def http_dispatcher(config: GatewayConfig, client: FakeCatsClient) -> Dispatcher:
    return Dispatcher(config, client, Transport.HTTP)  # type: ignore[arg-type]


@pytest.fixture
def stdio_dispatcher(config: GatewayConfig, client: FakeCatsClient) -> Dispatcher:
    return Dispatcher(config, client, Transport.STDIO)  # type: ignore[arg-type]
