"""
Sign-in and sign-up dialogs.
"""
from typing import Optional

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QDialog, QFormLayout, QHBoxLayout, QLabel, QLineEdit, QProgressBar,
    QPushButton, QVBoxLayout,
)

from aura.auth import password_strength
from aura.constants import APP_NAME, logger
from aura.identity import IdentityProvider


def _header(text: str, subtitle: str, layout: QVBoxLayout):
    title = QLabel(text)
    title.setFont(QFont("", 18, QFont.Weight.Bold))
    title.setAlignment(Qt.AlignmentFlag.AlignCenter)
    layout.addWidget(title)

    sub = QLabel(subtitle)
    sub.setObjectName("secondary_label")
    sub.setAlignment(Qt.AlignmentFlag.AlignCenter)
    sub.setWordWrap(True)
    layout.addWidget(sub)


class LoginDialog(QDialog):
    """Email/password sign-in.  Accepts once the identity resolves."""

    def __init__(self, provider: IdentityProvider, parent=None):
        super().__init__(parent)
        self._provider = provider
        self.setWindowTitle(f"{APP_NAME} - Sign In")
        self.setMinimumWidth(380)
        self.setModal(True)

        layout = QVBoxLayout(self)
        layout.setSpacing(12)
        layout.setContentsMargins(24, 24, 24, 24)
        _header("Welcome back", "Sign in to continue your journey.", layout)

        form = QFormLayout()
        self.email_edit = QLineEdit()
        self.email_edit.setPlaceholderText("you@example.com")
        form.addRow("Email", self.email_edit)
        self.password_edit = QLineEdit()
        self.password_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self.password_edit.returnPressed.connect(self._on_submit)
        form.addRow("Password", self.password_edit)
        layout.addLayout(form)

        self.error_label = QLabel("")
        self.error_label.setObjectName("error_label")
        self.error_label.setWordWrap(True)
        self.error_label.setVisible(False)
        layout.addWidget(self.error_label)

        btn_row = QHBoxLayout()
        self.signup_btn = QPushButton("Create account")
        self.signup_btn.clicked.connect(self._on_signup)
        btn_row.addWidget(self.signup_btn)
        btn_row.addStretch()
        self.submit_btn = QPushButton("Sign In")
        self.submit_btn.setProperty("class", "primary")
        self.submit_btn.setDefault(True)
        self.submit_btn.clicked.connect(self._on_submit)
        btn_row.addWidget(self.submit_btn)
        layout.addLayout(btn_row)

        provider.identity_changed.connect(self._on_identity_changed)
        provider.login_failed.connect(self._on_login_failed)
        self._connected = True

    def _on_submit(self):
        self.error_label.setVisible(False)
        email = self.email_edit.text().strip()
        password = self.password_edit.text()
        if not email or not password:
            self._show_error("Please enter your email and password.")
            return
        if self._provider.sign_in(email, password):
            self.submit_btn.setEnabled(False)
            self.submit_btn.setText("Signing in...")

    def _on_signup(self):
        dialog = SignupDialog(self._provider, self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            self.email_edit.setText(dialog.email_edit.text().strip())
            self.password_edit.setFocus()

    def _on_identity_changed(self, identity):
        if identity is not None:
            self.accept()

    def _on_login_failed(self, message: str):
        self.submit_btn.setEnabled(True)
        self.submit_btn.setText("Sign In")
        self._show_error("Invalid email or password. Please try again.")

    def _show_error(self, text: str):
        self.error_label.setText(text)
        self.error_label.setVisible(True)

    def done(self, result: int):
        if self._connected:
            self._connected = False
            self._provider.identity_changed.disconnect(self._on_identity_changed)
            self._provider.login_failed.disconnect(self._on_login_failed)
        super().done(result)


class SignupDialog(QDialog):
    """Account creation with a live password-strength meter."""

    REDIRECT_DELAY_MS = 2000

    def __init__(self, provider: IdentityProvider, parent=None):
        super().__init__(parent)
        self._provider = provider
        self.setWindowTitle(f"{APP_NAME} - Sign Up")
        self.setMinimumWidth(420)
        self.setModal(True)

        layout = QVBoxLayout(self)
        layout.setSpacing(12)
        layout.setContentsMargins(24, 24, 24, 24)
        _header("Sign Up", "Create your account to start your journey.", layout)

        form = QFormLayout()
        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("Enter your name")
        form.addRow("Name", self.name_edit)
        self.email_edit = QLineEdit()
        self.email_edit.setPlaceholderText("Enter your email")
        form.addRow("Email", self.email_edit)
        self.password_edit = QLineEdit()
        self.password_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self.password_edit.textChanged.connect(self._update_strength)
        form.addRow("Password", self.password_edit)
        self.confirm_edit = QLineEdit()
        self.confirm_edit.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Confirm", self.confirm_edit)
        layout.addLayout(form)

        self.strength_bar = QProgressBar()
        self.strength_bar.setRange(0, 100)
        self.strength_bar.setTextVisible(False)
        layout.addWidget(self.strength_bar)
        self.strength_label = QLabel("")
        self.strength_label.setObjectName("secondary_label")
        layout.addWidget(self.strength_label)

        self.message_label = QLabel("")
        self.message_label.setWordWrap(True)
        self.message_label.setVisible(False)
        layout.addWidget(self.message_label)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        btn_row.addWidget(cancel_btn)
        self.submit_btn = QPushButton("Sign Up")
        self.submit_btn.setProperty("class", "primary")
        self.submit_btn.clicked.connect(self._on_submit)
        btn_row.addWidget(self.submit_btn)
        layout.addLayout(btn_row)

        provider.registration_succeeded.connect(self._on_registered)
        provider.registration_failed.connect(self._on_failed)
        self._connected = True

    def _update_strength(self, password: str):
        strength, label = password_strength(password)
        self.strength_bar.setValue(strength)
        self.strength_label.setText(label)

    def _on_submit(self):
        self._show_message("", error=False, visible=False)
        if self._provider.register(
                self.name_edit.text().strip(),
                self.email_edit.text().strip(),
                self.password_edit.text(),
                self.confirm_edit.text()):
            self.submit_btn.setEnabled(False)
            self.submit_btn.setText("Creating account...")

    def _on_registered(self, result: Optional[dict]):
        logger.info("Sign-up: account created")
        self._show_message("Account created successfully! Redirecting to login...",
                           error=False)
        QTimer.singleShot(self.REDIRECT_DELAY_MS, self.accept)

    def _on_failed(self, message: str):
        self.submit_btn.setEnabled(True)
        self.submit_btn.setText("Sign Up")
        self._show_message(message or "Signup failed. Please try again.", error=True)

    def _show_message(self, text: str, error: bool, visible: bool = True):
        self.message_label.setObjectName("error_label" if error else "success_label")
        # Re-polish so the objectName-based style applies.
        self.message_label.style().unpolish(self.message_label)
        self.message_label.style().polish(self.message_label)
        self.message_label.setText(text)
        self.message_label.setVisible(visible)

    def done(self, result: int):
        if self._connected:
            self._connected = False
            self._provider.registration_succeeded.disconnect(self._on_registered)
            self._provider.registration_failed.disconnect(self._on_failed)
        super().done(result)
