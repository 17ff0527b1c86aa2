"""Signed-in user for the current session, and the signup form check."""
from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping
from urllib.parse import urlparse

from jobquest.api import AuthApi, ApiClient
from jobquest.errors import ApiError, ValidationError
from jobquest.log import get_logger
from jobquest.models import User

log = get_logger(__name__)

Listener = Callable[["User | None"], None]

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
MIN_PASSWORD_LENGTH = 8
SOCIAL_PROVIDERS = ("google", "github", "linkedin", "facebook")


@dataclass
class SignupForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    accept_terms: bool = False


def validate_signup(form: SignupForm) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.first_name.strip():
        errors["first_name"] = "First name is required"
    if not form.last_name.strip():
        errors["last_name"] = "Last name is required"
    if not form.email.strip():
        errors["email"] = "Email is required"
    elif not _EMAIL_RE.search(form.email):
        errors["email"] = "Please enter a valid email address"
    if not form.password:
        errors["password"] = "Password is required"
    elif len(form.password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if form.password != form.confirm_password:
        errors["confirm_password"] = "Passwords do not match"
    if not form.accept_terms:
        errors["accept_terms"] = "You must accept the terms and conditions"
    return errors


def social_identity(claims: Mapping[str, Any]) -> dict[str, str] | None:
    """``social_login`` arguments from OpenID Connect claims, or None without subject and e-mail."""
    subject, email = claims.get("sub"), claims.get("email")
    if not subject or not email:
        return None
    host = urlparse(str(claims.get("iss") or "")).hostname or str(claims.get("iss") or "")
    provider = next((p for p in SOCIAL_PROVIDERS if p in host), host or "oidc")
    return {
        "provider": provider,
        "social_id": str(subject),
        "email": str(email),
        "first_name": str(claims.get("given_name") or ""),
        "last_name": str(claims.get("family_name") or ""),
        "avatar": str(claims.get("picture") or ""),
    }


class AuthSession:
    """Holds the current user and the bearer token behind it."""

    def __init__(self, api: AuthApi, client: ApiClient) -> None:
        self.api = api
        self.client = client
        self.user: User | None = None
        self.loading = True
        self._listeners: list[Listener] = []

    # ── observers ──────────────────────────────────────────────────────

    def add_listener(self, callback: Listener) -> Callable[[], None]:
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def _set_user(self, user: User | None) -> None:
        previous = self.user
        self.user = user
        # listeners care about identity changes only
        if (previous and previous.id) == (user and user.id):
            return
        for callback in list(self._listeners):
            callback(user)

    # ── lifecycle ──────────────────────────────────────────────────────

    def init(self) -> User | None:
        """Restore the user behind a stored token; a rejected token is discarded."""
        try:
            if not self.client.token():
                return None
            try:
                data = self.api.me()
            except ApiError as exc:
                log.warning("Stored session rejected (%s); signing out", exc)
                self.client.clear_token()
                return None
            self._set_user(User.from_api(data.get("user", {})))
            log.info("Restored session for %s", self.user.email)
            return self.user
        finally:
            self.loading = False

    def _accept(self, data: dict) -> User:
        token = data.get("token")
        if not token:
            raise ApiError("Something went wrong", payload=data)
        self.client.set_token(token)
        user = User.from_api(data.get("user", {}))
        self._set_user(user)
        return user

    def login(self, email: str, password: str) -> User:
        user = self._accept(self.api.signin(email.strip(), password))
        log.info("Signed in as %s", user.email)
        return user

    def signup(self, form: SignupForm) -> User:
        errors = validate_signup(form)
        if errors:
            raise ValidationError(errors)
        user = self._accept(self.api.signup(
            form.first_name.strip(), form.last_name.strip(), form.email.strip(), form.password,
        ))
        log.info("Created account for %s", user.email)
        return user

    def social_login(self, provider: str, social_id: str, email: str,
                     first_name: str = "", last_name: str = "", avatar: str = "") -> User:
        user = self._accept(self.api.social(provider, social_id, email, first_name, last_name, avatar))
        log.info("Signed in with %s as %s", provider, user.email)
        return user

    def reset_password(self, token: str, password: str, confirm_password: str) -> str:
        """Set a new password from an e-mailed reset token; returns the server's message."""
        errors: dict[str, str] = {}
        if not token.strip():
            errors["token"] = "Reset token is required"
        if len(password) < MIN_PASSWORD_LENGTH:
            errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        if password != confirm_password:
            errors["confirm_password"] = "Passwords do not match"
        if errors:
            raise ValidationError(errors)
        data = self.api.reset_password(token.strip(), password)
        log.info("Password reset completed")
        return (data or {}).get("message") or "Password reset successful"

    def logout(self) -> None:
        self.client.clear_token()
        if self.user is not None:
            log.info("Signed out %s", self.user.email)
        self._set_user(None)

    def update_user(self, **changes) -> User | None:
        """Merge fields into the current user; no-op when signed out."""
        if self.user is None:
            return None
        known = {f.name for f in fields(User)}
        for key, value in changes.items():
            if key in known:
                setattr(self.user, key, value)
        return self.user

    @property
    def needs_profile(self) -> bool:
        return self.user is not None and not self.user.has_profile
