from enum import IntEnum
from typing import Any, Dict, Optional


class ErrorCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


MESSAGES = {
    ErrorCode.PARSE_ERROR: "Parse error",
    ErrorCode.INVALID_REQUEST: "Invalid Request",
    ErrorCode.METHOD_NOT_FOUND: "Method not found",
    ErrorCode.INVALID_PARAMS: "Invalid params",
    ErrorCode.INTERNAL_ERROR: "Internal error",
}


class RpcError(Exception):
    """A JSON-RPC level failure, rendered into the response `error` field.

    `request_id` is only set when the failure happens before the request id
    could be handed to the dispatcher (envelope validation).
    """

    def __init__(self, code: ErrorCode, message: Optional[str] = None, request_id: Any = None):
        self.code = ErrorCode(code)
        self.message = message or MESSAGES[self.code]
        self.request_id = request_id
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": int(self.code), "message": self.message}
