"""
Registration and login against the Aura auth endpoints.

Credential verification happens on the server; this module only validates
sign-up input locally, performs the two calls with a 10 second timeout, and
turns the login response into an ``Identity``.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

from aura.api import ApiClient, ApiError
from aura.chat_session import Identity
from aura.constants import CONNECTION_ERROR_TEXT, DEFAULT_REQUEST_TIMEOUT, logger

MIN_PASSWORD_LENGTH = 8
MIN_PASSWORD_STRENGTH = 50

WEAK_PASSWORD_TEXT = (
    "Please use a stronger password with uppercase letters, numbers, "
    "and special characters."
)


class AuthenticationDenied(Exception):
    """Login failed, timed out, or was rejected; no identity was issued."""


class RegistrationError(Exception):
    """Sign-up input was rejected locally or by the server."""


def password_strength(password: str) -> Tuple[int, str]:
    """Score *password* 0-100 in steps of 25 and return ``(score, label)``.

    One step each for: at least 8 characters, an uppercase letter, a digit,
    and a character that is neither a letter nor a digit.
    """
    if not password:
        return 0, ""

    strength = 0
    if len(password) >= MIN_PASSWORD_LENGTH:
        strength += 25
    if re.search(r"[A-Z]", password):
        strength += 25
    if re.search(r"[0-9]", password):
        strength += 25
    if re.search(r"[^A-Za-z0-9]", password):
        strength += 25

    if strength <= 25:
        label = "Weak password"
    elif strength <= 50:
        label = "Moderate password"
    elif strength <= 75:
        label = "Good password"
    else:
        label = "Strong password"
    return strength, label


def validate_registration(password: str, confirm_password: str) -> None:
    """Raise ``RegistrationError`` for the first failing sign-up check."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise RegistrationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
    if password != confirm_password:
        raise RegistrationError("Passwords do not match.")
    strength, _ = password_strength(password)
    if strength < MIN_PASSWORD_STRENGTH:
        raise RegistrationError(WEAK_PASSWORD_TEXT)


def register_user(client: ApiClient, name: str, email: str, password: str,
                  confirm_password: Optional[str] = None,
                  timeout: float = DEFAULT_REQUEST_TIMEOUT) -> Dict[str, Any]:
    """Validate locally, then ``POST /api/auth/register``.

    Returns the server's ``{user, token}`` body.  Local validation failures
    are raised before any request is made.
    """
    if confirm_password is None:
        confirm_password = password
    validate_registration(password, confirm_password)

    logger.info(f"Auth: registering user with backend {client.base_url}")
    try:
        return client.post_json(
            "/api/auth/register",
            {"name": name, "email": email, "password": password},
            timeout=timeout,
        )
    except ApiError as e:
        logger.error(f"Auth: registration failed: {e}")
        if e.is_transport_error:
            raise RegistrationError(CONNECTION_ERROR_TEXT) from e
        raise RegistrationError(e.server_message or "Registration failed") from e


def login(client: ApiClient, email: str, password: str,
          timeout: float = DEFAULT_REQUEST_TIMEOUT) -> Identity:
    """``POST /api/auth/login`` and return the resolved ``Identity``.

    Every failure mode is reported as ``AuthenticationDenied``.
    """
    if not email or not password:
        raise AuthenticationDenied("Email and password are required.")

    logger.info(f"Auth: logging in with backend {client.base_url}")
    try:
        data = client.post_json(
            "/api/auth/login",
            {"email": email, "password": password},
            timeout=timeout,
        )
    except ApiError as e:
        if e.timed_out:
            logger.error(f"Auth: login request timed out after {timeout} seconds")
        elif e.is_transport_error:
            logger.error(f"Auth: network error during login, backend might be unreachable: {e}")
        else:
            logger.error(f"Auth: login failed with status {e.status}")
        raise AuthenticationDenied("Invalid email or password.") from e

    identity = Identity.from_login_response(data)
    if not identity.user_id or not identity.access_token:
        logger.error("Auth: login response is missing the user id or token")
        raise AuthenticationDenied("Invalid response from server.")
    logger.info(f"Auth: signed in as {identity.user_id}")
    return identity
