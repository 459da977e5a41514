"""
Main application window and entry point.
"""
import sys
from typing import Optional

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QPalette
from PyQt6.QtWidgets import (
    QApplication, QDialog, QHBoxLayout, QLabel, QMainWindow, QVBoxLayout,
    QWidget,
)

from aura.api import ApiClient
from aura.chat_controller import ChatSessionController, wait_for_released
from aura.chat_session import Identity
from aura.chat_widget import FloatingChatWidget
from aura.constants import (
    APP_NAME, APP_VERSION, ClientConfig, load_config, logger, setup_logging,
)
from aura.dialogs import LoginDialog
from aura.icons import IconManager
from aura.identity import IdentityProvider
from aura.styles import get_application_stylesheet

_COMPACT_CHAT_SIZE = (384, 440)


class AuraMainWindow(QMainWindow):
    """Signed-in home view hosting the floating chat widget."""

    def __init__(self, config: Optional[ClientConfig] = None,
                 prompt_login: bool = True):
        super().__init__()
        self.config = config or ClientConfig()
        self.chat_client = ApiClient(self.config.api_url,
                                     timeout=self.config.request_timeout)
        self.auth_client = ApiClient(self.config.auth_url,
                                     timeout=self.config.request_timeout)
        self.identity_provider = IdentityProvider(
            self.auth_client, timeout=self.config.request_timeout, parent=self)
        self.identity_provider.identity_changed.connect(self._on_identity_changed)
        self._chat_expanded = False

        self._setup_window()
        self._setup_ui()
        self._setup_menubar()

        if prompt_login:
            QTimer.singleShot(0, self._prompt_sign_in)

    # -- setup --

    def _setup_window(self):
        self.setWindowTitle(f"{APP_NAME} {APP_VERSION}")
        self.setMinimumSize(720, 560)

    def _setup_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(24, 24, 24, 24)

        self.welcome_label = QLabel("Please sign in to chat with Aura.")
        font = self.welcome_label.font()
        font.setPointSize(20)
        font.setBold(True)
        self.welcome_label.setFont(font)
        layout.addWidget(self.welcome_label)

        self.subtitle_label = QLabel("")
        self.subtitle_label.setObjectName("secondary_label")
        layout.addWidget(self.subtitle_label)
        layout.addStretch()

        chat_row = QHBoxLayout()
        chat_row.addStretch()
        self.chat_widget = FloatingChatWidget(
            ChatSessionController(self.chat_client,
                                  send_timeout=self.config.request_timeout,
                                  parent=self),
            is_dark_fn=self._is_dark_mode)
        self.chat_widget.full_chat_requested.connect(self._toggle_full_chat)
        self.chat_widget.state_changed.connect(self._on_chat_state_changed)
        self._apply_chat_size()
        chat_row.addWidget(self.chat_widget, alignment=Qt.AlignmentFlag.AlignBottom)
        layout.addLayout(chat_row)

    def _setup_menubar(self):
        account_menu = self.menuBar().addMenu("Account")
        self.sign_in_action = QAction("Sign In...", self)
        self.sign_in_action.triggered.connect(self._prompt_sign_in)
        account_menu.addAction(self.sign_in_action)
        self.sign_out_action = QAction(
            IconManager.get_icon("log_out", is_dark=self._is_dark_mode(), size=16),
            "Sign Out", self)
        self.sign_out_action.triggered.connect(self.identity_provider.sign_out)
        self.sign_out_action.setEnabled(False)
        account_menu.addAction(self.sign_out_action)

        chat_menu = self.menuBar().addMenu("Chat")
        toggle_action = QAction("Show/Hide Chat", self)
        toggle_action.setShortcut("Ctrl+Shift+C")
        toggle_action.triggered.connect(self.chat_widget.toggle)
        chat_menu.addAction(toggle_action)

    # -- identity --

    def _prompt_sign_in(self):
        if self.identity_provider.identity is not None:
            return
        dialog = LoginDialog(self.identity_provider, self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            logger.info("Main window: sign-in dismissed")

    def _on_identity_changed(self, identity: Optional[Identity]):
        # A new identity always gets a fresh conversation; the old
        # controller deletes itself once its requests are done.
        self.chat_widget.set_controller(
            ChatSessionController(self.chat_client, identity,
                                  send_timeout=self.config.request_timeout,
                                  parent=self))
        signed_in = identity is not None
        self.sign_in_action.setEnabled(not signed_in)
        self.sign_out_action.setEnabled(signed_in)
        if signed_in:
            self.welcome_label.setText(f"Welcome, {identity.name or identity.email}")
            self.subtitle_label.setText("Aura is here whenever you want to talk.")
        else:
            self.welcome_label.setText("Please sign in to chat with Aura.")
            self.subtitle_label.setText("")

    # -- chat sizing --

    def _toggle_full_chat(self):
        self._chat_expanded = not self._chat_expanded
        self._apply_chat_size()

    def _on_chat_state_changed(self, state):
        if not self.chat_widget.is_open() and self._chat_expanded:
            self._chat_expanded = False
            self._apply_chat_size()

    def _apply_chat_size(self):
        if self._chat_expanded:
            self.chat_widget.setMinimumSize(0, 0)
            self.chat_widget.setMaximumSize(16777215, 16777215)
        else:
            self.chat_widget.setMaximumSize(*_COMPACT_CHAT_SIZE)

    def _is_dark_mode(self) -> bool:
        app = QApplication.instance()
        if app is None:
            return False
        window_color = app.palette().color(QPalette.ColorRole.Window)
        return window_color.lightness() < 128

    def closeEvent(self, event):
        self.chat_widget.teardown()
        self.identity_provider.shutdown()
        wait_for_released()
        super().closeEvent(event)


def main():
    """Application entry point."""
    config = load_config()
    setup_logging(config.to_dict())

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    is_dark = app.palette().color(QPalette.ColorRole.Window).lightness() < 128
    app.setStyleSheet(get_application_stylesheet(is_dark))

    logger.info(f"Application starting (version {APP_VERSION}, api={config.api_url})")

    window = AuraMainWindow(config)
    window.show()

    exit_code = app.exec()
    logger.info(f"Application exiting (code {exit_code})")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
