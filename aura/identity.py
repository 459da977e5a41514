"""
Observable holder for the signed-in user.

The chat core only ever reads ``IdentityProvider.identity``; it never
mutates it.  Sign-in and sign-up run on background workers.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from aura.api import ApiClient
from aura.auth import RegistrationError, validate_registration
from aura.chat_session import Identity
from aura.constants import DEFAULT_REQUEST_TIMEOUT, logger
from aura.workers import ApiRequestWorker, LoginWorker, RegisterWorker


class IdentityState(Enum):
    ABSENT = "absent"
    PENDING = "pending"
    RESOLVED = "resolved"


class IdentityProvider(QObject):
    """Tracks whether a user is signed in, and who."""

    identity_changed = pyqtSignal(object)       # Identity or None
    login_failed = pyqtSignal(str)
    registration_succeeded = pyqtSignal(object)  # server response body
    registration_failed = pyqtSignal(str)

    def __init__(self, client: ApiClient, *,
                 timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 start_worker: Optional[Callable[[QThread], None]] = None,
                 parent=None):
        super().__init__(parent)
        self._client = client
        self._timeout = timeout
        self._start_worker = start_worker or (lambda w: w.start())
        self._identity: Optional[Identity] = None
        self._state = IdentityState.ABSENT
        self._workers: List[ApiRequestWorker] = []

    @property
    def state(self) -> IdentityState:
        return self._state

    @property
    def identity(self) -> Optional[Identity]:
        """The resolved identity, or ``None`` while absent or pending."""
        if self._state is IdentityState.RESOLVED:
            return self._identity
        return None

    # -- sign in / out --

    def sign_in(self, email: str, password: str) -> bool:
        if self._state is IdentityState.PENDING:
            return False
        self._state = IdentityState.PENDING
        worker = LoginWorker(self._client, email, password, timeout=self._timeout)
        worker.succeeded.connect(self._on_login_succeeded)
        worker.failed.connect(self._on_login_failed)
        self._launch(worker)
        return True

    def sign_out(self):
        if self._state is IdentityState.ABSENT:
            return
        logger.info("Auth: signed out")
        self._identity = None
        self._state = IdentityState.ABSENT
        self.identity_changed.emit(None)

    @pyqtSlot(object)
    def _on_login_succeeded(self, identity: Identity):
        self._identity = identity
        self._state = IdentityState.RESOLVED
        self.identity_changed.emit(identity)

    @pyqtSlot(str)
    def _on_login_failed(self, message: str):
        self._identity = None
        self._state = IdentityState.ABSENT
        self.login_failed.emit(message)

    # -- sign up --

    def register(self, name: str, email: str, password: str,
                 confirm_password: str) -> bool:
        """Validate locally and, if that passes, start the sign-up request."""
        try:
            validate_registration(password, confirm_password)
        except RegistrationError as e:
            self.registration_failed.emit(str(e))
            return False
        worker = RegisterWorker(self._client, name, email, password,
                                confirm_password, timeout=self._timeout)
        worker.succeeded.connect(self.registration_succeeded)
        worker.failed.connect(self.registration_failed)
        self._launch(worker)
        return True

    # -- worker bookkeeping --

    def _launch(self, worker: ApiRequestWorker):
        self._workers.append(worker)
        worker.finished.connect(self._on_worker_finished)
        self._start_worker(worker)

    @pyqtSlot()
    def _on_worker_finished(self):
        worker = self.sender()
        if worker in self._workers:
            self._workers.remove(worker)
            worker.deleteLater()

    def shutdown(self, timeout_ms: int = 5000):
        for worker in list(self._workers):
            if worker.isRunning():
                worker.wait(timeout_ms)
