"""
Pytest configuration and fixtures for the Aura client tests.

Qt runs headless; network access is replaced either by a fake API client
(controller and widget tests) or by patching ``urllib.request.urlopen``
(transport and auth tests).  Most tests collect workers instead of starting
them so they decide when, and in which order, requests complete; the
threaded tests start real QThreads and pump the event loop with
``wait_until``.
"""
import io
import json
import os
import threading
import time
import urllib.error
from unittest.mock import MagicMock

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from aura.api import ApiError
from aura.chat_session import Identity


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def identity():
    return Identity(user_id="u1", access_token="tok-123", name="Uma", email="uma@example.com")


class FakeChatClient:
    """Stands in for ``ApiClient``'s chat endpoints and records every call."""

    def __init__(self):
        self.base_url = "http://backend.test"
        self.session_calls = []
        self.message_calls = []
        self.session_result = "s1"
        self.replies = {}
        self.default_reply = "Tell me more."

    def create_chat_session(self, user_id, token=None):
        self.session_calls.append({"user_id": user_id, "token": token})
        if isinstance(self.session_result, Exception):
            raise self.session_result
        return self.session_result

    def send_chat_message(self, session_id, message, user_id, token=None, timeout=None):
        self.message_calls.append({
            "session_id": session_id, "message": message,
            "user_id": user_id, "token": token, "timeout": timeout,
        })
        reply = self.replies.get(message, self.default_reply)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_client():
    return FakeChatClient()


@pytest.fixture
def server_error():
    return ApiError("HTTP 500: Internal Server Error", status=500)


@pytest.fixture
def collected_workers():
    """Worker starter that queues workers instead of starting threads."""
    return []


@pytest.fixture
def json_response():
    """Build a context-manager mock for ``urlopen`` returning *payload*."""
    def _make(payload):
        response = MagicMock()
        response.read.return_value = json.dumps(payload).encode("utf-8")
        response.__enter__.return_value = response
        response.__exit__.return_value = False
        return response
    return _make


@pytest.fixture
def http_error():
    """Build an ``HTTPError`` with an optional JSON body."""
    def _make(code, payload=None, url="http://backend.test"):
        body = json.dumps(payload).encode("utf-8") if payload is not None else b""
        return urllib.error.HTTPError(url, code, "Error", hdrs={}, fp=io.BytesIO(body))
    return _make


@pytest.fixture
def wait_until(qapp):
    """Pump the Qt event loop until *predicate* holds, or fail after *timeout*."""
    def _wait(predicate, timeout=5.0):
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                pytest.fail(f"condition not met within {timeout}s")
            qapp.processEvents()
            time.sleep(0.01)
    return _wait


class GatedChatClient(FakeChatClient):
    """Holds every message request until ``gate`` is set."""

    def __init__(self):
        super().__init__()
        self.gate = threading.Event()

    def send_chat_message(self, *args, **kwargs):
        self.gate.wait(5)
        return super().send_chat_message(*args, **kwargs)


@pytest.fixture
def gated_client():
    client = GatedChatClient()
    yield client
    client.gate.set()
