import json
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from cats_gateway.config import GatewayConfig
from cats_gateway.metrics import RPC_REQUESTS
from cats_gateway.rpc.envelope import error_response, parse_message, success_response, validate_envelope
from cats_gateway.rpc.errors import ErrorCode, RpcError
from cats_gateway.tools import TOOL_HANDLERS, ToolError, build_catalog
from cats_gateway.upstream import CatsClient

logger = logging.getLogger(__name__)

TOOLS_LIST = "tools/list"
TOOLS_CALL = "tools/call"


class Transport(str, Enum):
    HTTP = "http"
    STDIO = "stdio"


class Dispatcher:
    """
    Transport-agnostic JSON-RPC dispatcher.

    The HTTP and stdio transports expose different contracts on purpose:
    - HTTP: direct tool methods only, tool failures use the JSON-RPC `error` field.
    - stdio: direct tool methods plus `tools/call`, which reports tool failures
      inside `result` as `{content, isError: true}`; the catalog carries examples.
    """

    def __init__(self, config: GatewayConfig, client: CatsClient, transport: Transport = Transport.HTTP):
        self.config = config
        self.client = client
        self.transport = Transport(transport)

        self._methods: Dict[str, Callable[[Any], Any]] = {TOOLS_LIST: self._tools_list}
        for name in TOOL_HANDLERS:
            self._methods[name] = self._direct(name)
        if self.transport is Transport.STDIO:
            self._methods[TOOLS_CALL] = self._tools_call

    @property
    def methods(self) -> list:
        return list(self._methods)

    def handle_raw(self, raw: Union[str, bytes]) -> Dict[str, Any]:
        """Parse a raw message and dispatch it. Never raises."""
        try:
            payload = parse_message(raw)
        except RpcError as e:
            logger.warning(f"Parse error: {e.__cause__}")
            self._count(None, "error")
            return error_response(None, e)
        return self.dispatch(payload)

    def dispatch(self, payload: Any) -> Dict[str, Any]:
        """Dispatch an already decoded JSON value. Never raises."""
        try:
            request = validate_envelope(payload)
        except RpcError as e:
            logger.warning(f"Invalid request: {payload!r}")
            self._count(None, "error")
            return error_response(e.request_id, e)

        handler = self._methods.get(request.method)
        if handler is None:
            logger.info(f"Method not found: {request.method}")
            self._count(None, "error")
            return error_response(request.id, RpcError(ErrorCode.METHOD_NOT_FOUND))

        try:
            result = handler(request.params)
        except RpcError as e:
            self._count(request.method, "error")
            return error_response(request.id, e)
        except ToolError as e:
            self._count(request.method, "error")
            return error_response(request.id, RpcError(ErrorCode.INTERNAL_ERROR, str(e)))
        except Exception as e:
            logger.exception(f"Unhandled failure in {request.method}")
            self._count(request.method, "error")
            return error_response(request.id, RpcError(ErrorCode.INTERNAL_ERROR, f"Internal error: {e}"))

        outcome = "tool_error" if isinstance(result, dict) and result.get("isError") else "ok"
        self._count(request.method, outcome)
        return success_response(request.id, result)

    # --- Methods ---

    def _tools_list(self, params: Any) -> Dict[str, Any]:
        catalog = build_catalog(self.config, include_examples=self.transport is Transport.STDIO)
        logger.info(f"Returning tools list with {len(catalog['tools'])} tools")
        return catalog

    def _direct(self, name: str) -> Callable[[Any], Any]:
        handler = TOOL_HANDLERS[name]

        def call(params: Any) -> Any:
            return handler(self.client, params, strict=True)

        return call

    def _tools_call(self, params: Any) -> Dict[str, Any]:
        if not isinstance(params, dict) or not params.get("name"):
            logger.warning("Invalid tool call: missing tool name")
            raise RpcError(ErrorCode.INVALID_PARAMS)

        name = params["name"]
        arguments = params.get("parameters") or {}
        logger.info(f"Tool call: {name} with params: {arguments!r}")

        handler = TOOL_HANDLERS.get(name) if isinstance(name, str) else None
        if handler is None:
            shown = name if isinstance(name, str) else json.dumps(name)
            logger.info(f"Tool not found: {shown}")
            return _tool_result({"error": f"Tool not found: {shown}"}, is_error=True)

        try:
            content = handler(self.client, arguments, strict=False)
        except ToolError as e:
            return _tool_result({"error": str(e)}, is_error=True)
        return _tool_result(content)

    def _count(self, method: Optional[str], outcome: str) -> None:
        # Unknown method names share one label value
        label = method if method in self._methods else "unknown"
        RPC_REQUESTS.labels(transport=self.transport.value, method=label, outcome=outcome).inc()


def _tool_result(content: Any, is_error: bool = False) -> Dict[str, Any]:
    return {"content": content, "isError": is_error}
