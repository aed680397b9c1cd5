"""Tests for wren.http.response — the mutable ServerResponse and frozen Response."""

import pytest

from wren.errors import ResponseError
from wren.http.request import Request
from wren.http.response import JSON_TYPE, Response, ServerResponse


class TestHeaders:
    def test_set_get_remove(self) -> None:
        response = ServerResponse()
        response.set_header("X-Id", "1")
        assert response.get_header("x-id") == "1"
        response.remove_header("X-ID")
        assert response.get_header("X-Id") is None

    def test_set_none_removes(self) -> None:
        response = ServerResponse()
        response.set("X-Id", "1")
        response.set("X-Id", None)
        assert "X-Id" not in response.headers

    def test_headers_frozen_after_write_head(self) -> None:
        response = ServerResponse()
        response.write_head(201, {"X-A": "1"})
        assert response.status_code == 201
        assert response.get_header("X-A") == "1"
        with pytest.raises(ResponseError):
            response.set_header("X-B", "2")
        with pytest.raises(ResponseError):
            response.remove_header("X-A")

    def test_non_latin1_value_rejected(self) -> None:
        response = ServerResponse()
        with pytest.raises(ResponseError):
            response.set_header("X-Name", "名前")
        with pytest.raises(ResponseError):
            response.set_header("Set-Cookie", ["a=1", "b=é€"])
        assert "X-Name" not in response.headers
        response.set_header("X-Name", "café")
        assert response.get_header("X-Name") == "café"

    def test_can_assign_content_type(self) -> None:
        response = ServerResponse()
        assert response.can_assign_content_type
        response.set_header("Content-Type", "text/plain")
        assert not response.can_assign_content_type


class TestBody:
    def test_write_and_end(self) -> None:
        response = ServerResponse()
        response.write("a")
        response.write(b"b")
        response.end("c")
        assert response.body == b"abc"
        assert response.finished
        assert response.headers_sent

    def test_write_after_end_raises(self) -> None:
        response = ServerResponse()
        response.end()
        with pytest.raises(ResponseError):
            response.write("late")

    def test_second_end_ignored(self) -> None:
        response = ServerResponse()
        response.end("once")
        response.end("twice")
        assert response.body == b"once"


class TestSend:
    def test_plain_text(self) -> None:
        response = ServerResponse()
        response.send("hello")
        assert response.content_type == "text/plain; charset=utf-8"
        assert response.body == b"hello"
        assert response.finished

    def test_html(self) -> None:
        response = ServerResponse()
        response.send("<html><body/></html>")
        assert response.content_type == "text/html; charset=utf-8"

    def test_bytes(self) -> None:
        response = ServerResponse()
        response.send(b"\x00\x01")
        assert response.content_type == "application/octet-stream"

    def test_dict_as_json(self) -> None:
        response = ServerResponse()
        response.send({"a": 1})
        assert response.content_type == JSON_TYPE
        assert response.body == b'{"a": 1}'

    def test_explicit_type_wins(self) -> None:
        response = ServerResponse()
        response.set_header("Content-Type", "text/csv")
        response.send("a,b")
        assert response.content_type == "text/csv"

    def test_status_chain(self) -> None:
        response = ServerResponse()
        response.status(418).send("teapot")
        assert response.status_code == 418

    def test_send_status(self) -> None:
        response = ServerResponse()
        response.send_status(404)
        assert response.status_code == 404
        assert response.body == b"HTTP status 404"

    def test_json_default_str(self) -> None:
        from datetime import date

        response = ServerResponse()
        response.json({"day": date(2024, 1, 2)})
        assert response.body == b'{"day": "2024-01-02"}'


class TestFormat:
    def _response(self, accept: str | None) -> ServerResponse:
        headers = {"accept": accept} if accept else {}
        response = ServerResponse()
        response.request = Request.build("GET", "/", headers=headers)
        return response

    def test_picks_accepted_type(self) -> None:
        response = self._response("application/json")
        response.format(
            {
                "text/html": lambda: response.send("<html></html>"),
                "application/json": lambda: response.json({"ok": True}),
            }
        )
        assert response.content_type == "application/json"
        assert response.body == b'{"ok": true}'

    def test_default(self) -> None:
        response = self._response("image/png")
        response.format(
            {
                "application/json": lambda: response.json({}),
                "default": lambda: response.send_status(406),
            }
        )
        assert response.status_code == 406

    def test_no_request_uses_default(self) -> None:
        response = ServerResponse()
        called: list[str] = []
        response.format(
            {"text/html": lambda: called.append("html"), "default": lambda: called.append("d")}
        )
        assert called == ["d"]


class TestSnapshot:
    def test_to_response(self) -> None:
        response = ServerResponse()
        response.status(201).json({"id": 1})
        snapshot = response.to_response()
        assert snapshot == Response(
            status=201,
            body=b'{"id": 1}',
            headers=(("content-type", JSON_TYPE),),
        )
        assert snapshot.json() == {"id": 1}
        assert snapshot.header("Content-Type") == JSON_TYPE
        assert snapshot.header("missing", "d") == "d"

    def test_repr(self) -> None:
        response = ServerResponse()
        assert repr(response) == "<ServerResponse 200 open>"
        response.end()
        assert repr(response) == "<ServerResponse 200 finished>"

    def test_text(self) -> None:
        assert Response(status=200, body="é".encode()).text == "é"
