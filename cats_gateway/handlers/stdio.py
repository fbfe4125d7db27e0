import asyncio
import logging
import signal
import sys
from typing import Any, Callable, Dict, Optional

from cats_gateway.rpc.dispatcher import Dispatcher
from cats_gateway.rpc.envelope import encode_response, error_response
from cats_gateway.rpc.errors import ErrorCode, RpcError

logger = logging.getLogger(__name__)

# Max bytes per request line
LINE_LIMIT = 1024 * 1024


async def read_request(reader: asyncio.StreamReader) -> Optional[bytes]:
    """Read one line.

    Returns b"" at EOF and None when the line exceeded the reader limit. An
    oversized line is consumed up to and including its newline, so the next
    call starts at the next request.
    """
    try:
        return await reader.readuntil(b"\n")
    except asyncio.IncompleteReadError as e:
        # EOF, possibly after a final line without newline
        return e.partial
    except asyncio.LimitOverrunError:
        await _discard_line(reader)
        return None


async def _discard_line(reader: asyncio.StreamReader) -> None:
    while True:
        try:
            await reader.readuntil(b"\n")
            return
        except asyncio.LimitOverrunError as e:
            # Buffered bytes before the newline (or the whole buffer) are dropped
            await reader.readexactly(e.consumed)
        except asyncio.IncompleteReadError:
            return


def write_stdout(line: str) -> None:
    sys.stdout.write(line)
    sys.stdout.flush()


class StdioServer:
    """
    Line-delimited JSON-RPC over stdin/stdout.
    One request per input line, one response per output line, in input order.
    Nothing but responses is ever written to stdout.
    """

    def __init__(self, dispatcher: Dispatcher, write: Callable[[str], None] = write_stdout):
        self.dispatcher = dispatcher
        self.write = write
        self.handled = 0
        self._stopping = asyncio.Event()

    def stop(self, sig: Optional[signal.Signals] = None) -> None:
        if sig is not None:
            logger.info(f"Received {sig.name}, shutting down...")
        self._stopping.set()

    async def serve(self, reader: asyncio.StreamReader) -> None:
        """Process lines from `reader` until EOF or stop()."""
        stop_waiter = asyncio.ensure_future(self._stopping.wait())
        try:
            while not self._stopping.is_set():
                read = asyncio.ensure_future(read_request(reader))
                done, _ = await asyncio.wait({read, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)
                if read not in done:
                    read.cancel()
                    break

                line = read.result()
                if line is None:
                    logger.error(f"Parse error: request line longer than {LINE_LIMIT} bytes")
                    self._send(error_response(None, RpcError(ErrorCode.PARSE_ERROR)))
                    continue

                if not line:
                    logger.info("stdin closed")
                    break
                line = line.strip()
                if not line:
                    continue

                logger.info(f"Received request: {line.decode('utf-8', errors='replace')}")
                # Sequential on purpose: responses must keep input order
                response = await asyncio.to_thread(self.dispatcher.handle_raw, line)
                self._send(response)
        finally:
            stop_waiter.cancel()

    def _send(self, response: Dict[str, Any]) -> None:
        encoded = encode_response(response)
        logger.info(f"Sending response: {encoded}")
        self.write(encoded + "\n")
        self.handled += 1

    async def run(self) -> None:
        """Serve the process's own stdin until EOF or SIGINT/SIGTERM."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop, sig)
            except NotImplementedError:
                # Not supported by this event loop (Windows)
                pass

        reader = asyncio.StreamReader(limit=LINE_LIMIT)
        protocol = asyncio.StreamReaderProtocol(reader)
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)

        logger.info("STDIO server ready to process requests")
        await self.serve(reader)
