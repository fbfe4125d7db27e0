"""
JSON-RPC 2.0 envelope parsing, validation and response construction.
Shared by the HTTP and stdio transports.
"""

import json
import logging
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from cats_gateway.rpc.errors import ErrorCode, RpcError

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"


class RpcRequest(BaseModel):
    """A validated request envelope."""

    method: str
    params: Optional[Any] = None
    id: Optional[Any] = None


def _reject_constant(token: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {token}")


def parse_message(raw: Union[str, bytes]) -> Any:
    """Decode raw transport bytes into a JSON value.

    Raises RpcError(PARSE_ERROR) when the payload is not JSON; no id is
    recoverable in that case.
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw, parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError) as e:
        raise RpcError(ErrorCode.PARSE_ERROR) from e


def validate_envelope(value: Any) -> RpcRequest:
    if not isinstance(value, dict):
        raise RpcError(ErrorCode.INVALID_REQUEST)

    request_id = value.get("id")
    method = value.get("method")
    if value.get("jsonrpc") != JSONRPC_VERSION or not isinstance(method, str) or not method:
        raise RpcError(ErrorCode.INVALID_REQUEST, request_id=request_id)

    return RpcRequest(method=method, params=value.get("params"), id=request_id)


def success_response(request_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "result": result, "id": request_id}


def error_response(request_id: Any, error: RpcError) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "error": error.to_dict(), "id": request_id}


def encode_response(response: Dict[str, Any]) -> str:
    """Serialize a response as strict JSON.

    A result that cannot be written as JSON (e.g. NaN from upstream) is
    replaced by an Internal error carrying the same id.
    """
    try:
        return json.dumps(response, allow_nan=False)
    except (TypeError, ValueError) as e:
        logger.error(f"Response for id {response.get('id')!r} is not valid JSON: {e}")
        fallback = error_response(
            response.get("id"),
            RpcError(ErrorCode.INTERNAL_ERROR, "Internal error: result is not JSON serializable"),
        )
        return json.dumps(fallback, allow_nan=False)
