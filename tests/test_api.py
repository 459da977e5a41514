"""
Tests for aura.api.ApiClient with ``urlopen`` patched out.
"""
import http.client
import json
import socket
import urllib.error
from unittest.mock import patch

import pytest

from aura.api import ApiClient, ApiError

URLOPEN = "aura.api.urllib.request.urlopen"


@pytest.fixture
def client():
    return ApiClient("http://backend.test/", timeout=10)


def _sent_request(mock_open):
    return mock_open.call_args[0][0]


class TestPostJson:
    def test_success_returns_object(self, client, json_response):
        with patch(URLOPEN, return_value=json_response({"ok": True})) as mock_open:
            assert client.post_json("/api/thing", {"a": 1}) == {"ok": True}

        request = _sent_request(mock_open)
        assert request.full_url == "http://backend.test/api/thing"
        assert request.get_method() == "POST"
        assert json.loads(request.data) == {"a": 1}
        assert request.get_header("Content-type") == "application/json"
        assert mock_open.call_args[1]["timeout"] == 10

    def test_bearer_token_header(self, client, json_response):
        with patch(URLOPEN, return_value=json_response({})) as mock_open:
            client.post_json("/x", {}, token="tok-123")
        assert _sent_request(mock_open).get_header("Authorization") == "Bearer tok-123"

    def test_no_token_no_auth_header(self, client, json_response):
        with patch(URLOPEN, return_value=json_response({})) as mock_open:
            client.post_json("/x", {})
        assert _sent_request(mock_open).get_header("Authorization") is None

    def test_timeout_override(self, client, json_response):
        with patch(URLOPEN, return_value=json_response({})) as mock_open:
            client.post_json("/x", {}, timeout=3)
        assert mock_open.call_args[1]["timeout"] == 3

    def test_http_error_carries_status_and_message(self, client, http_error):
        with patch(URLOPEN, side_effect=http_error(400, {"message": "Email taken"})):
            with pytest.raises(ApiError) as exc_info:
                client.post_json("/x", {})
        assert exc_info.value.status == 400
        assert exc_info.value.server_message == "Email taken"
        assert not exc_info.value.is_transport_error

    def test_http_error_without_json_body(self, client, http_error):
        with patch(URLOPEN, side_effect=http_error(502)):
            with pytest.raises(ApiError) as exc_info:
                client.post_json("/x", {})
        assert exc_info.value.status == 502
        assert exc_info.value.server_message is None

    def test_connection_refused(self, client):
        error = urllib.error.URLError(ConnectionRefusedError(111, "refused"))
        with patch(URLOPEN, side_effect=error):
            with pytest.raises(ApiError, match="Connection error") as exc_info:
                client.post_json("/x", {})
        assert exc_info.value.is_transport_error
        assert not exc_info.value.timed_out

    @pytest.mark.parametrize("error", [
        socket.timeout("timed out"),
        TimeoutError("timed out"),
        urllib.error.URLError(TimeoutError("timed out")),
        urllib.error.URLError(socket.timeout("timed out")),
    ])
    def test_timeout(self, client, error):
        with patch(URLOPEN, side_effect=error):
            with pytest.raises(ApiError, match="timed out") as exc_info:
                client.post_json("/x", {})
        assert exc_info.value.timed_out
        assert exc_info.value.is_transport_error

    def test_invalid_json(self, client, json_response):
        response = json_response({})
        response.read.return_value = b"<html>oops</html>"
        with patch(URLOPEN, return_value=response):
            with pytest.raises(ApiError, match="Invalid JSON"):
                client.post_json("/x", {})

    def test_truncated_body(self, client, json_response):
        response = json_response({})
        response.read.side_effect = http.client.IncompleteRead(b'{"sessi', 20)
        with patch(URLOPEN, return_value=response):
            with pytest.raises(ApiError, match="IncompleteRead") as exc_info:
                client.post_json("/x", {})
        assert exc_info.value.is_transport_error

    def test_non_object_body(self, client, json_response):
        with patch(URLOPEN, return_value=json_response(["a", "b"])):
            with pytest.raises(ApiError, match="expected an object"):
                client.post_json("/x", {})


class TestChatEndpoints:
    def test_create_chat_session(self, client, json_response):
        with patch(URLOPEN, return_value=json_response({"sessionId": "s1"})) as mock_open:
            assert client.create_chat_session("u1", token="tok") == "s1"
        request = _sent_request(mock_open)
        assert request.full_url == "http://backend.test/api/chat/session"
        assert json.loads(request.data) == {"userId": "u1"}

    @pytest.mark.parametrize("payload", [{}, {"sessionId": ""}, {"sessionId": 42}])
    def test_create_chat_session_requires_id(self, client, json_response, payload):
        with patch(URLOPEN, return_value=json_response(payload)):
            with pytest.raises(ApiError, match="sessionId"):
                client.create_chat_session("u1")

    def test_send_chat_message(self, client, json_response):
        with patch(URLOPEN, return_value=json_response({"response": "I hear you."})) as mock_open:
            reply = client.send_chat_message("s 1/x", "hello", "u1", token="tok", timeout=10)
        assert reply == "I hear you."
        request = _sent_request(mock_open)
        assert request.full_url == "http://backend.test/api/chat/s%201%2Fx/message"
        assert json.loads(request.data) == {"message": "hello", "userId": "u1"}

    def test_send_chat_message_requires_reply(self, client, json_response):
        with patch(URLOPEN, return_value=json_response({"reply": "wrong key"})):
            with pytest.raises(ApiError, match="reply"):
                client.send_chat_message("s1", "hello", "u1")
