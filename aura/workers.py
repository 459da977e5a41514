"""
Background QThread workers for backend requests.

Each worker performs exactly one blocking call and reports back with either
``succeeded(result)`` or ``failed(message)``.  Exceptions never leave
``run()``; the receiving slots execute on the GUI thread.
"""
from __future__ import annotations

from typing import Any, Optional

from PyQt6.QtCore import QThread, pyqtSignal

from aura.api import ApiClient, ApiError
from aura.auth import login, register_user
from aura.chat_session import (
    ChatSession, Identity, MessageDeliveryFailed, SessionCreationFailed,
)
from aura.constants import DEFAULT_REQUEST_TIMEOUT, logger


class ApiRequestWorker(QThread):
    """Base worker: runs ``perform()`` off the GUI thread."""

    succeeded = pyqtSignal(object)  # result of perform()
    failed = pyqtSignal(str)        # human-readable error

    def __init__(self, client: ApiClient, parent=None):
        super().__init__(parent)
        self.client = client
        self.error: Optional[Exception] = None

    def perform(self) -> Any:
        raise NotImplementedError

    def run(self):
        name = type(self).__name__
        logger.debug(f"{name}.run: starting")
        try:
            result = self.perform()
        except Exception as e:
            self.error = e
            logger.debug(f"{name}.run: failed: {type(e).__name__}: {e}")
            self.failed.emit(str(e))
            return
        logger.debug(f"{name}.run: finished")
        self.succeeded.emit(result)


class SessionCreateWorker(ApiRequestWorker):
    """Requests a new chat session for *identity*; emits a ``ChatSession``."""

    def __init__(self, client: ApiClient, identity: Identity, parent=None):
        super().__init__(client, parent)
        self.identity = identity

    def perform(self) -> ChatSession:
        try:
            session_id = self.client.create_chat_session(
                self.identity.user_id, token=self.identity.access_token)
        except ApiError as e:
            raise SessionCreationFailed(f"Failed to create chat session: {e}") from e
        return ChatSession(session_id)


class MessageSendWorker(ApiRequestWorker):
    """Sends one user message; emits the assistant's reply text."""

    def __init__(self, client: ApiClient, session: ChatSession, text: str,
                 identity: Identity, timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 parent=None):
        super().__init__(client, parent)
        self.session = session
        self.text = text
        self.identity = identity
        self.timeout = timeout

    def perform(self) -> str:
        try:
            return self.client.send_chat_message(
                self.session.session_id, self.text, self.identity.user_id,
                token=self.identity.access_token, timeout=self.timeout)
        except ApiError as e:
            raise MessageDeliveryFailed(f"Failed to send message: {e}") from e


class LoginWorker(ApiRequestWorker):
    """Signs in; emits the resolved ``Identity``."""

    def __init__(self, client: ApiClient, email: str, password: str,
                 timeout: float = DEFAULT_REQUEST_TIMEOUT, parent=None):
        super().__init__(client, parent)
        self.email = email
        self.password = password
        self.timeout = timeout

    def perform(self) -> Identity:
        return login(self.client, self.email, self.password, timeout=self.timeout)


class RegisterWorker(ApiRequestWorker):
    """Creates an account; emits the server's response body."""

    def __init__(self, client: ApiClient, name: str, email: str, password: str,
                 confirm_password: str, timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 parent=None):
        super().__init__(client, parent)
        self.name = name
        self.email = email
        self.password = password
        self.confirm_password = confirm_password
        self.timeout = timeout

    def perform(self) -> dict:
        return register_user(self.client, self.name, self.email, self.password,
                             self.confirm_password, timeout=self.timeout)
