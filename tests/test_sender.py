"""Tests for wren.server.sender response emission rules."""

import pytest

from wren.http.response import Response
from wren.server.sender import send_response


async def _send(response: Response, *, head: bool = False) -> list[dict]:
    messages: list[dict] = []

    async def send(message: dict) -> None:
        messages.append(message)

    await send_response(response, send, head=head)
    return messages


class TestSendResponse:
    @pytest.mark.asyncio
    async def test_start_then_body(self) -> None:
        messages = await _send(
            Response(status=200, body=b"hi", headers=(("Content-Type", "text/plain"),))
        )
        assert messages[0] == {
            "type": "http.response.start",
            "status": 200,
            "headers": [(b"content-type", b"text/plain"), (b"content-length", b"2")],
        }
        assert messages[1] == {"type": "http.response.body", "body": b"hi"}

    @pytest.mark.parametrize("status", [204, 304, 101])
    @pytest.mark.asyncio
    async def test_no_body_statuses(self, status: int) -> None:
        messages = await _send(Response(status=status, body=b"unexpected"))
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_head_keeps_length_drops_body(self) -> None:
        messages = await _send(Response(status=200, body=b"hello"), head=True)
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"5"
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_handler_content_length_replaced(self) -> None:
        messages = await _send(
            Response(status=200, body=b"abc", headers=(("Content-Length", "99"),))
        )
        lengths = [v for k, v in messages[0]["headers"] if k == b"content-length"]
        assert lengths == [b"3"]
