"""
Chat session lifecycle: session establishment and message dispatch.

``ChatSessionController`` is the explicit session-manager object a chat
widget renders from.  It owns the ``ChatSession`` and the ``Transcript``
for one widget activation and is passed by reference to the UI layer.

All state changes happen on the GUI thread.  Network calls run on
``aura.workers`` QThreads; their completion signals are the only points at
which an outstanding request resumes.  User turns are appended in call
order, assistant/fallback turns in completion order.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Set

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from aura.api import ApiClient
from aura.chat_session import (
    ChatSession, Identity, MessageDeliveryFailed, SessionCreationFailed,
    Transcript, Turn,
)
from aura.constants import (
    DEFAULT_REQUEST_TIMEOUT, FALLBACK_TEXT, GREETING_TEXT, logger,
)
from aura.workers import ApiRequestWorker, MessageSendWorker, SessionCreateWorker


def _start_thread(worker: QThread) -> None:
    worker.start()


# Released controllers kept alive until their request threads finish.
_retiring: Set["ChatSessionController"] = set()


class ChatSessionController(QObject):
    """Binds one transcript to one server-issued chat session.

    ``start_worker`` decides how a prepared worker is run; the default
    starts its thread.  Tests pass a collector and call ``run()`` on the
    collected workers in whatever order they need.
    """

    turn_appended = pyqtSignal(object, int)  # Turn, index in transcript
    session_ready = pyqtSignal(object)       # ChatSession
    session_failed = pyqtSignal(str)         # SessionCreationFailed message
    waiting_changed = pyqtSignal(bool)       # True while a reply is outstanding

    def __init__(self, client: ApiClient, identity: Optional[Identity] = None,
                 *, send_timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 start_worker: Optional[Callable[[QThread], None]] = None,
                 parent=None):
        super().__init__(parent)
        self._client = client
        self._identity = identity
        self._send_timeout = send_timeout
        self._start_worker = start_worker or _start_thread
        self._session: Optional[ChatSession] = None
        self._session_pending = False
        self._pending_sends = 0
        self._workers: List[ApiRequestWorker] = []
        self._transcript = Transcript()
        self._transcript.subscribe(self._emit_turn_appended)

    # -- read-only state --

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def session(self) -> Optional[ChatSession]:
        return self._session

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def is_ready(self) -> bool:
        return self._session is not None

    @property
    def is_session_pending(self) -> bool:
        return self._session_pending

    @property
    def is_waiting(self) -> bool:
        """True while at least one sent message has no reply yet."""
        return self._pending_sends > 0

    @property
    def pending_sends(self) -> int:
        return self._pending_sends

    # -- session establishment --

    def establish_session(self, identity: Optional[Identity] = None) -> bool:
        """Request a chat session for *identity* (or the bound identity).

        Returns ``True`` if a request was issued.  Does nothing when no
        identity is available, a session already exists, or a request is
        already in flight.
        """
        identity = identity or self._identity
        if identity is None:
            logger.debug("Chat: no identity yet, session not requested")
            return False
        if self._identity is not None and identity != self._identity:
            logger.warning("Chat: controller is bound to another identity, "
                           "session not requested")
            return False
        if self._session is not None or self._session_pending:
            return False

        self._identity = identity
        self._session_pending = True
        logger.info(f"Chat: requesting session for user {identity.user_id}")

        worker = SessionCreateWorker(self._client, identity)
        worker.succeeded.connect(self._on_session_created)
        worker.failed.connect(self._on_session_failed)
        self._launch(worker)
        return True

    @pyqtSlot(object)
    def _on_session_created(self, session: ChatSession):
        self._session_pending = False
        self._session = session
        logger.info(f"Chat: session {session.session_id} established")
        self._transcript.append(Turn.assistant(GREETING_TEXT))
        self.session_ready.emit(session)

    @pyqtSlot(str)
    def _on_session_failed(self, message: str):
        self._session_pending = False
        logger.error(f"Chat: error creating chat session: "
                     f"{SessionCreationFailed(message)!r}")
        self.session_failed.emit(message)

    # -- message dispatch --

    def send_message(self, text: str) -> bool:
        """Append *text* as a user turn and dispatch it.

        Returns ``False`` without doing anything when *text* is blank or no
        session/identity is available.  Delivery failures are never raised;
        they arrive as a fallback assistant turn.
        """
        if not text or not text.strip():
            return False
        if self._session is None or self._identity is None:
            logger.debug("Chat: send ignored, no active session")
            return False

        self._transcript.append(Turn.user(text))
        self._pending_sends += 1
        if self._pending_sends == 1:
            self.waiting_changed.emit(True)

        logger.info(f"Chat: sending message to session {self._session.session_id} "
                    f"({len(text)} chars, {self._pending_sends} outstanding)")
        worker = MessageSendWorker(self._client, self._session, text,
                                   self._identity, timeout=self._send_timeout)
        worker.succeeded.connect(self._on_reply)
        worker.failed.connect(self._on_delivery_failed)
        self._launch(worker)
        return True

    @pyqtSlot(object)
    def _on_reply(self, reply: str):
        self._transcript.append(Turn.assistant(reply))
        self._reply_settled()

    @pyqtSlot(str)
    def _on_delivery_failed(self, message: str):
        logger.error(f"Chat: error sending message: "
                     f"{MessageDeliveryFailed(message)!r}")
        self._transcript.append(Turn.assistant(FALLBACK_TEXT))
        self._reply_settled()

    def _reply_settled(self):
        self._pending_sends = max(0, self._pending_sends - 1)
        if self._pending_sends == 0:
            self.waiting_changed.emit(False)

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
        if self in _retiring and not any(w.isRunning() for w in self._workers):
            _retiring.discard(self)
            logger.debug("Chat: released controller has no workers left")
            self.deleteLater()

    def release(self):
        """Detach from the UI without blocking on outstanding requests.

        The controller stays alive until its last worker finishes, then
        deletes itself.  Late replies land in the detached transcript only.
        """
        self._transcript.unsubscribe(self._emit_turn_appended)
        running = [w for w in self._workers if w.isRunning()]
        if running:
            logger.info(f"Chat: releasing controller with "
                        f"{len(running)} request(s) still running")
            _retiring.add(self)
        else:
            self.deleteLater()

    @property
    def is_retiring(self) -> bool:
        return self in _retiring

    def shutdown(self, timeout_ms: int = 5000):
        """Wait for outstanding request threads before the owner goes away."""
        for worker in list(self._workers):
            if worker.isRunning():
                worker.wait(timeout_ms)
        self._transcript.unsubscribe(self._emit_turn_appended)

    def _emit_turn_appended(self, turn: Turn, index: int):
        self.turn_appended.emit(turn, index)


def wait_for_released(timeout_ms: int = 5000):
    """Block until released controllers' requests finish; used at exit."""
    for controller in list(_retiring):
        controller.shutdown(timeout_ms)
    _retiring.clear()
