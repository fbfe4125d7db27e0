from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from cats_gateway.rpc.dispatcher import Dispatcher
from cats_gateway.rpc.envelope import encode_response

router = APIRouter(tags=["jsonrpc"])


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.container.http_dispatcher


@router.post("/")
async def handle_rpc(request: Request, dispatcher: Dispatcher = Depends(get_dispatcher)) -> Response:
    """
    JSON-RPC endpoint.
    Always answers 200; the outcome lives in the JSON-RPC envelope.
    """
    body = await request.body()
    # Upstream calls are blocking, keep them off the event loop
    response: Dict[str, Any] = await run_in_threadpool(dispatcher.handle_raw, body)
    return Response(content=encode_response(response), status_code=200, media_type="application/json")


@router.get("/health", response_class=PlainTextResponse)
def health_check() -> str:
    """Liveness check - no dependency checks"""
    return "OK"
