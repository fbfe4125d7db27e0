import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_DESCRIPTOR_PATH = Path(__file__).resolve().parents[1] / "cats_mcp.json"


class ConfigurationError(Exception):
    """Raised when the gateway descriptor cannot be loaded or is malformed."""

    pass


# --- Descriptor Models ---
class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class ServerInfo(_Frozen):
    name: str
    version: str


class Endpoint(_Frozen):
    path: str


class ApiSection(_Frozen):
    base_url: str = Field(alias="baseUrl")
    endpoints: Dict[str, Endpoint] = Field(default_factory=dict)


class ToolSpec(_Frozen):
    description: str = ""
    parameters: Dict[str, Any] = Field(default_factory=dict)
    returns: Dict[str, Any] = Field(default_factory=dict)
    examples: Optional[List[Any]] = None


class Descriptor(_Frozen):
    server: ServerInfo
    api: ApiSection
    tools: Dict[str, ToolSpec] = Field(default_factory=dict)


def load_descriptor(path: Path) -> Descriptor:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read descriptor {path}: {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Descriptor {path} is not valid JSON: {e}") from e
    try:
        return Descriptor.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Descriptor {path} does not match schema: {e}") from e


class GatewayConfig:
    def __init__(self, descriptor: Optional[Descriptor] = None, path: Optional[str] = None):
        load_dotenv()

        if descriptor is None:
            source = path or os.getenv("CATS_MCP_CONFIG") or str(DEFAULT_DESCRIPTOR_PATH)
            descriptor = load_descriptor(Path(source))
        self._descriptor = descriptor

        # Env override for pointing the gateway at a different upstream
        self._base_url = os.getenv("CATS_API_BASE_URL") or descriptor.api.base_url

    @property
    def descriptor(self) -> Descriptor:
        return self._descriptor

    @property
    def server_name(self) -> str:
        return self._descriptor.server.name

    @property
    def server_version(self) -> str:
        return self._descriptor.server.version

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def tools(self) -> Dict[str, ToolSpec]:
        return self._descriptor.tools

    @property
    def endpoints(self) -> Dict[str, str]:
        return {name: ep.path for name, ep in self._descriptor.api.endpoints.items()}

    def endpoint_path(self, tool: str) -> str:
        endpoint = self._descriptor.api.endpoints.get(tool)
        if endpoint is None:
            raise ConfigurationError(f"No upstream endpoint configured for '{tool}'")
        return endpoint.path

    @property
    def host(self) -> str:
        return os.getenv("HOST", "0.0.0.0")

    @property
    def port(self) -> int:
        value = os.getenv("PORT", "3000")
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(f"PORT must be an integer, got '{value}'") from e

    @property
    def log_level(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO").upper()
