"""Endpoints under /api/auth."""
from __future__ import annotations

from typing import Any

from jobquest.api.base import ApiResource


class AuthApi(ApiResource):
    prefix = "/api/auth"

    def signup(self, first_name: str, last_name: str, email: str, password: str) -> dict:
        """Returns ``{token, user}``."""
        return self.client.post(self.path("signup"), {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": password,
        }, auth=False)

    def signin(self, email: str, password: str) -> dict:
        return self.client.post(self.path("signin"), {"email": email, "password": password}, auth=False)

    def social(self, provider: str, social_id: str, email: str,
               first_name: str = "", last_name: str = "", avatar: str = "") -> dict:
        payload: dict[str, Any] = {
            "provider": provider,
            "socialId": social_id,
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
        }
        if avatar:
            payload["avatar"] = avatar
        return self.client.post(self.path("social"), payload, auth=False)

    def me(self) -> dict:
        """Current user for the stored token: ``{user}``."""
        return self.client.get(self.path("me"))

    def forgot_password(self, email: str) -> dict:
        return self.client.post(self.path("forgot-password"), {"email": email}, auth=False)

    def reset_password(self, token: str, password: str) -> dict:
        return self.client.post(self.path("reset-password"), {"token": token, "password": password}, auth=False)
