"""HTTP plumbing shared by every backend resource."""
from __future__ import annotations

import threading
from typing import Any

import requests

from jobquest.config import TOKEN_KEY, api_base_url, http_timeout
from jobquest.errors import ApiError, RequestCancelled
from jobquest.log import get_logger
from jobquest.retry import retry
from jobquest.search import clean_params
from jobquest.storage import LocalStore

log = get_logger(__name__)

__all__ = ["ApiClient", "ApiResource", "RequestScope", "clean_params", "error_message"]


class RequestScope:
    """Cancellation token for requests issued on behalf of one view."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def check(self) -> None:
        if self.cancelled:
            raise RequestCancelled()


def error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Network error"
    if isinstance(body, dict):
        for key in ("message", "error", "msg"):
            if body.get(key):
                return str(body[key])
    return "Something went wrong"


def _transient(exc: BaseException) -> bool:
    return isinstance(exc, ApiError) and exc.transient


class ApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        store: LocalStore | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or api_base_url()).rstrip("/")
        self.store = store or LocalStore()
        self.timeout = timeout if timeout is not None else http_timeout()
        self.session = session or requests.Session()

    # ── token ──────────────────────────────────────────────────────────

    def token(self) -> str | None:
        return self.store.get(TOKEN_KEY) or None

    def set_token(self, token: str) -> None:
        self.store.set(TOKEN_KEY, token)

    def clear_token(self) -> None:
        self.store.remove(TOKEN_KEY)

    # ── requests ───────────────────────────────────────────────────────

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: Any = None,
        data: dict | None = None,
        files: dict | None = None,
        auth: bool = True,
        scope: RequestScope | None = None,
    ) -> requests.Response:
        if scope is not None:
            scope.check()

        headers: dict[str, str] = {}
        token = self.token() if auth else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(
                method,
                url,
                params=clean_params(params) if params else None,
                json=json,
                data=data,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log.error("%s %s failed: %s", method, path, exc)
            raise ApiError("Network error") from exc

        if scope is not None:
            scope.check()

        if not 200 <= r.status_code < 300:
            message = error_message(r)
            log.warning("%s %s -> %d: %s", method, path, r.status_code, message)
            raise ApiError(message, status=r.status_code, payload=r.text)
        return r

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body ({} when empty)."""
        r = self._send(method, path, **kwargs)
        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError as exc:
            raise ApiError("Network error", status=r.status_code, payload=r.text) from exc

    @retry(max_attempts=2, base_delay=0.5, retryable=(ApiError,), when=_transient)
    def get(
        self,
        path: str,
        params: dict | None = None,
        *,
        auth: bool = True,
        scope: RequestScope | None = None,
    ) -> Any:
        return self.request("GET", path, params=params, auth=auth, scope=scope)

    @retry(max_attempts=2, base_delay=0.5, retryable=(ApiError,), when=_transient)
    def get_text(self, path: str, params: dict | None = None) -> str:
        return self._send("GET", path, params=params).text

    def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return self.request("PUT", path, json=json, **kwargs)

    def patch(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return self.request("PATCH", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)


class ApiResource:
    """One backend router. Subclasses set ``prefix`` and wrap its endpoints."""

    prefix = "/api"

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def path(self, *parts: Any) -> str:
        tail = "/".join(str(p).strip("/") for p in parts if p != "")
        return f"{self.prefix}/{tail}" if tail else self.prefix
