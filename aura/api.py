"""
JSON-over-HTTP transport for the Aura backend.

Every call is a blocking ``POST`` with a caller-side timeout, so it must run
on a worker thread (see ``aura.workers``).  Transport failures, timeouts,
non-2xx statuses and malformed bodies are all raised as ``ApiError``.
"""
from __future__ import annotations

import http.client
import json
import socket
import ssl
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Optional

import certifi

from aura.constants import APP_NAME, APP_VERSION, DEFAULT_REQUEST_TIMEOUT, logger


class ApiError(Exception):
    """A request to the backend did not produce a usable response.

    ``status`` is the HTTP status code, or ``None`` when the server was
    never reached (connection refused, DNS failure, timeout).
    ``server_message`` is the ``message`` field of an error body, if any.
    """

    def __init__(self, message: str, status: Optional[int] = None,
                 server_message: Optional[str] = None, timed_out: bool = False):
        super().__init__(message)
        self.status = status
        self.server_message = server_message
        self.timed_out = timed_out

    @property
    def is_transport_error(self) -> bool:
        return self.status is None


def _ssl_context() -> ssl.SSLContext:
    return ssl.create_default_context(cafile=certifi.where())


def _parse_error_message(body: bytes) -> Optional[str]:
    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return None


class ApiClient:
    """Thin client for the chat and auth endpoints of one backend."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def post_json(self, path: str, payload: Dict[str, Any], *,
                  token: Optional[str] = None,
                  timeout: Optional[float] = None) -> Dict[str, Any]:
        """POST *payload* as JSON and return the decoded JSON object."""
        url = self.url_for(path)
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"{APP_NAME}/{APP_VERSION}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        request = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            headers=headers,
            method="POST",
        )
        effective_timeout = self.timeout if timeout is None else timeout
        logger.debug(f"ApiClient: POST {url} (timeout={effective_timeout}s)")

        try:
            with urllib.request.urlopen(request, timeout=effective_timeout,
                                        context=_ssl_context()) as response:
                body = response.read()
        except urllib.error.HTTPError as e:
            server_message = _parse_error_message(e.read() or b"")
            logger.debug(f"ApiClient: POST {url} failed with HTTP {e.code}")
            raise ApiError(f"HTTP {e.code}: {e.reason}", status=e.code,
                           server_message=server_message) from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, (TimeoutError, socket.timeout)):
                raise ApiError(f"Request timed out after {effective_timeout}s",
                               timed_out=True) from e
            raise ApiError(f"Connection error: {e.reason}") from e
        except (TimeoutError, socket.timeout) as e:
            raise ApiError(f"Request timed out after {effective_timeout}s",
                           timed_out=True) from e
        except OSError as e:
            raise ApiError(f"Connection error: {e}") from e
        except http.client.HTTPException as e:
            raise ApiError(f"Connection error: {type(e).__name__}: {e}") from e

        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise ApiError(f"Invalid JSON in response from {url}") from e
        if not isinstance(data, dict):
            raise ApiError(f"Unexpected response from {url} (expected an object)")
        return data

    # -- chat endpoints --

    def create_chat_session(self, user_id: str,
                            token: Optional[str] = None) -> str:
        """``POST /api/chat/session`` and return the new session id."""
        data = self.post_json("/api/chat/session", {"userId": user_id}, token=token)
        session_id = data.get("sessionId")
        if not isinstance(session_id, str) or not session_id:
            raise ApiError("Response did not include a sessionId")
        return session_id

    def send_chat_message(self, session_id: str, message: str, user_id: str,
                          token: Optional[str] = None,
                          timeout: Optional[float] = None) -> str:
        """``POST /api/chat/{session_id}/message`` and return the reply text."""
        path = f"/api/chat/{urllib.parse.quote(session_id, safe='')}/message"
        data = self.post_json(path, {"message": message, "userId": user_id},
                              token=token, timeout=timeout)
        reply = data.get("response")
        if not isinstance(reply, str):
            raise ApiError("Response did not include a reply")
        return reply
