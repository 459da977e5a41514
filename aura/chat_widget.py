"""
Floating chat widget: a launcher button that expands into a chat panel.

The widget renders a ``ChatSessionController`` and drives it; it holds no
chat state of its own beyond which visual state it is in:

    CLOSED -> OPEN_SESSION_PENDING -> OPEN_READY -> CLOSED

Closing keeps the controller (and so the transcript and session) alive;
reopening resumes the same conversation.  Only ``teardown()`` or binding a
new controller discards them.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional

from PyQt6.QtCore import QSize, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QFont, QKeyEvent
from PyQt6.QtWidgets import (
    QFrame, QHBoxLayout, QLabel, QPushButton, QScrollArea, QSizePolicy,
    QTextEdit, QVBoxLayout, QWidget,
)

from aura.chat_controller import ChatSessionController
from aura.chat_session import ChatSession, ROLE_USER, Turn
from aura.constants import ASSISTANT_NAME, logger
from aura.icons import IconManager


class WidgetState(Enum):
    CLOSED = "closed"
    OPEN_SESSION_PENDING = "open_session_pending"
    OPEN_READY = "open_ready"


# ---------------------------------------------------------------------------
# Individual message bubble widget
# ---------------------------------------------------------------------------

class _MessageBubble(QFrame):
    """A single turn in the chat history."""

    def __init__(self, turn: Turn, parent=None):
        super().__init__(parent)
        self.turn = turn
        is_user = turn.role == ROLE_USER
        self.setObjectName("chat_bubble_user" if is_user
                           else "chat_bubble_assistant")
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setSizePolicy(QSizePolicy.Policy.Preferred,
                           QSizePolicy.Policy.Maximum)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 8, 10, 8)
        layout.setSpacing(2)

        role_label = QLabel("You" if is_user else ASSISTANT_NAME)
        role_label.setObjectName("chat_role_label")
        font = role_label.font()
        font.setWeight(QFont.Weight.DemiBold)
        role_label.setFont(font)
        layout.addWidget(role_label)

        self._content = QLabel(turn.content)
        self._content.setObjectName("chat_content")
        self._content.setWordWrap(True)
        self._content.setTextFormat(Qt.TextFormat.PlainText)
        self._content.setTextInteractionFlags(
            Qt.TextInteractionFlag.TextSelectableByMouse)
        layout.addWidget(self._content)

    def text(self) -> str:
        return self._content.text()


class _TypingIndicator(QLabel):
    """Animated "Aura is typing..." line shown while a reply is outstanding."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("chat_loading_label")
        self._dots = 0
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._animate)
        self.setVisible(False)

    def start(self):
        self._dots = 0
        self.setText(f"{ASSISTANT_NAME} is typing")
        self.setVisible(True)
        self._timer.start(500)

    def stop(self):
        self._timer.stop()
        self.setVisible(False)

    def _animate(self):
        self._dots = (self._dots + 1) % 4
        self.setText(f"{ASSISTANT_NAME} is typing{'.' * self._dots}")


class _ChatInput(QTextEdit):
    """Text input that submits on Enter and inserts newlines on Shift+Enter."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._submit_callback: Optional[Callable] = None
        self.setAcceptRichText(False)
        self.setPlaceholderText("Type your message...")
        self.setFixedHeight(48)

    def set_submit_callback(self, fn: Callable):
        self._submit_callback = fn

    def keyPressEvent(self, event: QKeyEvent):
        if (event.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter)
                and not event.modifiers() & Qt.KeyboardModifier.ShiftModifier):
            if self._submit_callback:
                self._submit_callback()
            return
        super().keyPressEvent(event)


# ---------------------------------------------------------------------------
# Floating chat widget
# ---------------------------------------------------------------------------

class FloatingChatWidget(QWidget):
    """Launcher button plus collapsible chat panel bound to one controller."""

    state_changed = pyqtSignal(object)   # WidgetState
    full_chat_requested = pyqtSignal()

    def __init__(self, controller: Optional[ChatSessionController] = None,
                 is_dark_fn: Optional[Callable[[], bool]] = None, parent=None):
        super().__init__(parent)
        self._is_dark_fn = is_dark_fn or (lambda: False)
        self._controller: Optional[ChatSessionController] = None
        self._state = WidgetState.CLOSED
        self._bubbles: List[_MessageBubble] = []

        self._setup_ui()
        if controller is not None:
            self.set_controller(controller)
        self._apply_state()

    # -- public API --

    @property
    def state(self) -> WidgetState:
        return self._state

    @property
    def controller(self) -> Optional[ChatSessionController]:
        return self._controller

    def is_open(self) -> bool:
        return self._state is not WidgetState.CLOSED

    def set_controller(self, controller: Optional[ChatSessionController]):
        """Bind a (new) controller, discarding the previous one.

        Returns immediately; requests still running on the old controller
        finish in the background and are not rendered.
        """
        self._bind(controller, wait=False)

    def _bind(self, controller: Optional[ChatSessionController], wait: bool):
        old = self._controller
        if old is controller:
            return
        if old is not None:
            old.turn_appended.disconnect(self._on_turn_appended)
            old.session_ready.disconnect(self._on_session_ready)
            old.session_failed.disconnect(self._on_session_failed)
            old.waiting_changed.disconnect(self._on_waiting_changed)
            if wait:
                old.shutdown()
            else:
                old.release()

        self._controller = controller
        self._clear_bubbles()
        self._typing.stop()

        if controller is not None:
            controller.turn_appended.connect(self._on_turn_appended)
            controller.session_ready.connect(self._on_session_ready)
            controller.session_failed.connect(self._on_session_failed)
            controller.waiting_changed.connect(self._on_waiting_changed)
            for turn in controller.transcript:
                self._add_bubble(turn)
            if controller.is_waiting:
                self._typing.start()

        if self.is_open():
            self._enter_open_state()
        self._apply_state()

    def toggle(self):
        if self.is_open():
            self.close_chat()
        else:
            self.open_chat()

    def open_chat(self):
        if self.is_open():
            return
        self._enter_open_state()
        self._apply_state()
        QTimer.singleShot(50, self._scroll_to_bottom)

    def close_chat(self):
        if not self.is_open():
            return
        self._set_state(WidgetState.CLOSED)
        self._apply_state()

    def teardown(self):
        """Discard the conversation and wait for running requests."""
        self._bind(None, wait=True)

    def rendered_texts(self) -> List[str]:
        return [b.text() for b in self._bubbles]

    # -- state machine --

    def _enter_open_state(self):
        controller = self._controller
        if controller is not None and controller.is_ready:
            self._set_state(WidgetState.OPEN_READY)
            return
        self._set_state(WidgetState.OPEN_SESSION_PENDING)
        if controller is not None and controller.identity is not None:
            controller.establish_session()

    def _set_state(self, state: WidgetState):
        if state is self._state:
            return
        logger.debug(f"Chat widget: {self._state.value} -> {state.value}")
        self._state = state
        self.state_changed.emit(state)

    def _apply_state(self):
        is_open = self.is_open()
        self._panel.setVisible(is_open)
        self._launcher.setVisible(not is_open)
        ready = self._state is WidgetState.OPEN_READY
        self._input.setEnabled(ready)
        self._update_send_enabled()
        if ready:
            self._input.setFocus()

    # -- controller signals --

    def _on_turn_appended(self, turn: Turn, index: int):
        self._add_bubble(turn)
        QTimer.singleShot(50, self._scroll_to_bottom)

    def _on_session_ready(self, session: ChatSession):
        if self.is_open():
            self._set_state(WidgetState.OPEN_READY)
            self._apply_state()

    def _on_session_failed(self, message: str):
        # Logged by the controller; the panel just stays non-ready.
        self._apply_state()

    def _on_waiting_changed(self, waiting: bool):
        if waiting:
            self._typing.start()
        else:
            self._typing.stop()
        QTimer.singleShot(50, self._scroll_to_bottom)

    # -- send --

    def _on_send(self):
        if self._state is not WidgetState.OPEN_READY or self._controller is None:
            return
        text = self._input.toPlainText()
        if not text.strip():
            return
        self._input.clear()
        self._controller.send_message(text)

    # -- UI setup --

    def _setup_ui(self):
        is_dark = self._is_dark_fn()
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(0)

        # Collapsed state: round launcher button
        self._launcher = QPushButton()
        self._launcher.setObjectName("chat_launcher")
        self._launcher.setIcon(IconManager.get_icon(
            "message_circle", is_dark=is_dark, tint="on_primary", size=24))
        self._launcher.setIconSize(QSize(24, 24))
        self._launcher.setFixedSize(56, 56)
        self._launcher.setToolTip(f"Chat with {ASSISTANT_NAME}")
        self._launcher.setCursor(Qt.CursorShape.PointingHandCursor)
        self._launcher.clicked.connect(self.toggle)
        outer.addWidget(self._launcher, alignment=Qt.AlignmentFlag.AlignRight
                        | Qt.AlignmentFlag.AlignBottom)

        # Expanded state: chat panel
        self._panel = QFrame()
        self._panel.setObjectName("chat_panel")
        self._panel.setFrameShape(QFrame.Shape.StyledPanel)
        self._panel.setMinimumSize(320, 384)
        panel_layout = QVBoxLayout(self._panel)
        panel_layout.setContentsMargins(0, 0, 0, 0)
        panel_layout.setSpacing(0)

        header = QFrame()
        header.setObjectName("chat_header")
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(12, 8, 8, 8)
        title = QLabel(f"Chat with {ASSISTANT_NAME}")
        title.setObjectName("chat_title")
        header_layout.addWidget(title)
        header_layout.addStretch()

        def _header_btn(icon_name, tooltip, callback):
            btn = QPushButton()
            btn.setObjectName("chat_header_btn")
            btn.setIcon(IconManager.get_icon(icon_name, is_dark=is_dark,
                                             tint="primary", size=16))
            btn.setIconSize(QSize(16, 16))
            btn.setFixedSize(28, 28)
            btn.setToolTip(tooltip)
            btn.setCursor(Qt.CursorShape.PointingHandCursor)
            btn.clicked.connect(callback)
            header_layout.addWidget(btn)
            return btn

        self._full_chat_btn = _header_btn("maximize", "Open full chat",
                                          self.full_chat_requested)
        self._close_btn = _header_btn("x", "Close chat", self.close_chat)
        panel_layout.addWidget(header)

        # Scrollable chat history
        self._scroll_area = QScrollArea()
        self._scroll_area.setWidgetResizable(True)
        self._scroll_area.setHorizontalScrollBarPolicy(
            Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self._scroll_area.setObjectName("chat_scroll_area")

        history = QWidget()
        history.setObjectName("chat_history_container")
        self._history_layout = QVBoxLayout(history)
        self._history_layout.setContentsMargins(8, 8, 8, 8)
        self._history_layout.setSpacing(10)
        self._typing = _TypingIndicator()
        self._history_layout.addWidget(self._typing)
        self._history_layout.addStretch()
        self._scroll_area.setWidget(history)
        panel_layout.addWidget(self._scroll_area, stretch=1)

        # Input row
        input_frame = QFrame()
        input_frame.setObjectName("chat_input_frame")
        input_layout = QHBoxLayout(input_frame)
        input_layout.setContentsMargins(8, 6, 8, 6)
        input_layout.setSpacing(6)

        self._input = _ChatInput()
        self._input.set_submit_callback(self._on_send)
        self._input.textChanged.connect(self._update_send_enabled)
        input_layout.addWidget(self._input, stretch=1)

        self._send_btn = QPushButton()
        self._send_btn.setObjectName("chat_send_btn")
        self._send_btn.setIcon(IconManager.get_icon(
            "send", is_dark=is_dark, tint="on_primary", size=16))
        self._send_btn.setIconSize(QSize(16, 16))
        self._send_btn.setFixedSize(36, 36)
        self._send_btn.setToolTip("Send message")
        self._send_btn.clicked.connect(self._on_send)
        input_layout.addWidget(self._send_btn)
        panel_layout.addWidget(input_frame)

        outer.addWidget(self._panel)

    def _update_send_enabled(self):
        ready = self._state is WidgetState.OPEN_READY
        self._send_btn.setEnabled(ready and bool(self._input.toPlainText().strip()))

    # -- history rendering --

    def _add_bubble(self, turn: Turn):
        bubble = _MessageBubble(turn)
        # Insert above the typing indicator and trailing stretch.
        idx = max(0, self._history_layout.count() - 2)
        self._history_layout.insertWidget(idx, bubble)
        self._bubbles.append(bubble)

    def _clear_bubbles(self):
        for bubble in self._bubbles:
            self._history_layout.removeWidget(bubble)
            bubble.deleteLater()
        self._bubbles.clear()

    def _scroll_to_bottom(self):
        sb = self._scroll_area.verticalScrollBar()
        sb.setValue(sb.maximum())
