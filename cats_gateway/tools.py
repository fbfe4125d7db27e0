"""
Tool catalog and tool implementations backed by the cats API.

Two validation policies exist for the same tools:
- strict: direct JSON-RPC methods; bad params are a JSON-RPC Invalid params error.
- lenient: the `tools/call` indirection; `n` is optional and bad values are
  reported as a tool-level error.
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Union

from cats_gateway.config import GatewayConfig
from cats_gateway.rpc.errors import ErrorCode, RpcError
from cats_gateway.upstream import CatsClient, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_CAT_COUNT = 5


class ToolError(Exception):
    """A tool-level failure; carries the human readable message only."""

    pass


def build_catalog(config: GatewayConfig, include_examples: bool = False) -> Dict[str, List[Dict[str, Any]]]:
    """Build the `tools/list` result from configuration, in configuration order."""
    tools = []
    for name, spec in config.tools.items():
        entry = {
            "name": name,
            "description": spec.description,
            "parameters": copy.deepcopy(spec.parameters),
            "returns": copy.deepcopy(spec.returns),
        }
        if include_examples:
            entry["examples"] = copy.deepcopy(spec.examples or [])
        tools.append(entry)
    return {"tools": tools}


def is_count(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 1


def require_count(params: Any) -> Union[int, float]:
    if not isinstance(params, dict) or not is_count(params.get("n")):
        raise RpcError(ErrorCode.INVALID_PARAMS)
    return params["n"]


def optional_count(arguments: Dict[str, Any]) -> Union[int, float]:
    if "n" not in arguments:
        return DEFAULT_CAT_COUNT
    if not is_count(arguments["n"]):
        raise ToolError("Invalid parameter: n must be a positive integer")
    return arguments["n"]


def _fetch(what: str, call: Callable[[], Any]) -> Any:
    try:
        return call()
    except UpstreamError as e:
        logger.error(f"Error fetching {what}: {e}")
        raise ToolError(f"Error fetching {what}: {e}") from e


def get_random_cat(client: CatsClient, params: Any, strict: bool = True) -> Any:
    return _fetch("random cat", client.get_random_cat)


def get_cats(client: CatsClient, params: Any, strict: bool = True) -> Any:
    if strict:
        n = require_count(params)
    else:
        n = optional_count(params if isinstance(params, dict) else {})
    return _fetch("cats", lambda: client.get_cats(n))


TOOL_HANDLERS: Dict[str, Callable[..., Any]] = {
    "get_random_cat": get_random_cat,
    "get_cats": get_cats,
}
