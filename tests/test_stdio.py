import asyncio
import json

import pytest

from cats_gateway.handlers.stdio import LINE_LIMIT, StdioServer


def run_lines(dispatcher, data: bytes):
    """Feed `data` to a StdioServer and return the raw output lines."""
    return run_chunks(dispatcher, [data])


def run_chunks(dispatcher, chunks, limit=LINE_LIMIT):
    """Feed `chunks` one at a time while the server is reading."""
    out = []

    async def go():
        reader = asyncio.StreamReader(limit=limit)
        server = StdioServer(dispatcher, write=out.append)
        task = asyncio.ensure_future(server.serve(reader))
        for chunk in chunks:
            reader.feed_data(chunk)
            await asyncio.sleep(0.01)
        reader.feed_eof()
        await asyncio.wait_for(task, timeout=10)
        return server

    server = asyncio.run(go())
    assert server.handled == len(out)
    return out


TOOLS_LIST = b'{"jsonrpc": "2.0", "method": "tools/list", "id": 2}\n'


class TestStdioServer:
    def test_one_response_per_line_in_order(self, stdio_dispatcher):
        lines = [
            {"jsonrpc": "2.0", "method": "tools/list", "id": 1},
            {"jsonrpc": "2.0", "method": "get_cats", "params": {"n": 2}, "id": 2},
            {"jsonrpc": "2.0", "method": "get_random_cat", "id": 3},
            {"jsonrpc": "2.0", "method": "missing", "id": 4},
        ]
        data = "".join(json.dumps(line) + "\n" for line in lines).encode()
        out = run_lines(stdio_dispatcher, data)

        assert all(line.endswith("\n") and line.count("\n") == 1 for line in out)
        responses = [json.loads(line) for line in out]
        assert [r["id"] for r in responses] == [1, 2, 3, 4]
        assert len(responses[1]["result"]) == 2
        assert responses[3]["error"]["code"] == -32601

    def test_parse_error_line(self, stdio_dispatcher):
        out = run_lines(stdio_dispatcher, b"this is not json\n")
        assert json.loads(out[0]) == {
            "jsonrpc": "2.0",
            "error": {"code": -32700, "message": "Parse error"},
            "id": None,
        }

    def test_blank_lines_ignored_and_last_line_without_newline(self, stdio_dispatcher):
        data = b'\n   \n{"jsonrpc": "2.0", "method": "tools/list", "id": 7}'
        out = run_lines(stdio_dispatcher, data)
        assert len(out) == 1
        assert json.loads(out[0])["id"] == 7

    def test_tools_call_invalid_n(self, stdio_dispatcher):
        request = {
            "jsonrpc": "2.0",
            "method": "tools/call",
            "params": {"name": "get_cats", "parameters": {"n": -1}},
            "id": 3,
        }
        out = run_lines(stdio_dispatcher, (json.dumps(request) + "\n").encode())
        response = json.loads(out[0])
        assert "error" not in response
        assert response["result"]["isError"] is True
        assert response["result"]["content"]["error"]

    def test_invalid_utf8_is_parse_error(self, stdio_dispatcher):
        out = run_lines(stdio_dispatcher, b"\xff\xfe\n")
        assert json.loads(out[0])["error"]["code"] == -32700

    def test_stop_ends_serving(self, stdio_dispatcher):
        out = []

        async def go():
            reader = asyncio.StreamReader()
            server = StdioServer(stdio_dispatcher, write=out.append)
            task = asyncio.ensure_future(server.serve(reader))
            reader.feed_data(b'{"jsonrpc": "2.0", "method": "tools/list", "id": 1}\n')
            for _ in range(200):
                if out:
                    break
                await asyncio.sleep(0.01)
            server.stop()
            # No EOF was fed, only stop() can end the loop
            await asyncio.wait_for(task, timeout=2)

        asyncio.run(go())
        assert len(out) == 1

    def test_non_json_constants_are_parse_errors(self, stdio_dispatcher, client):
        data = (
            b'{"jsonrpc":"2.0","method":"tools/list","id":NaN}\n'
            b'{"jsonrpc":"2.0","method":"tools/call","params":{"name":"get_cats","parameters":{"n":Infinity}},"id":3}\n'
        )
        out = run_lines(stdio_dispatcher, data)
        assert len(out) == 2
        for line in out:
            # Strict decoding: the output itself must not contain NaN
            response = json.loads(line, parse_constant=lambda token: pytest.fail(f"non-JSON {token}"))
            assert response == {"jsonrpc": "2.0", "error": {"code": -32700, "message": "Parse error"}, "id": None}
        assert client.calls == []


class TestOversizedLines:
    def test_oversized_line_gets_one_response(self, stdio_dispatcher):
        data = b"x" * (LINE_LIMIT * 3) + b"\n" + TOOLS_LIST
        out = run_lines(stdio_dispatcher, data)
        responses = [json.loads(line) for line in out]
        assert [r["id"] for r in responses] == [None, 2]
        assert responses[0]["error"]["code"] == -32700
        assert "result" in responses[1]

    def test_oversized_line_arriving_in_pieces(self, stdio_dispatcher):
        limit = 1024
        chunks = [b"y" * (limit * 2), b"y" * (limit * 3), b"y" * 10 + b"\n" + TOOLS_LIST]
        out = run_chunks(stdio_dispatcher, chunks, limit=limit)
        responses = [json.loads(line) for line in out]
        assert [r["id"] for r in responses] == [None, 2]

    def test_oversized_last_line_without_newline(self, stdio_dispatcher):
        limit = 1024
        out = run_chunks(stdio_dispatcher, [TOOLS_LIST, b"z" * (limit * 4)], limit=limit)
        responses = [json.loads(line) for line in out]
        assert [r["id"] for r in responses] == [2, None]
