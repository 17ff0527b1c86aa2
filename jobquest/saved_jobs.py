"""Bookmarked jobs for the session, shared by every listing and detail view.

All changes go through :meth:`SavedJobs.toggle_bookmark`, which is also where
the signed-in check lives. Views subscribe to be told when the set changes.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, KeysView

from jobquest.api import UsersApi
from jobquest.auth import AuthSession
from jobquest.errors import ApiError
from jobquest.log import get_logger
from jobquest.models import User
from jobquest.notices import Banner, SIGN_IN_TO_SAVE, sign_in_banner
from jobquest.storage import LocalStore

log = get_logger(__name__)

CACHE_KEY_PREFIX = "jobquest_saved_jobs"

Subscriber = Callable[[KeysView[str]], None]


def cache_key(user_id: str | None) -> str:
    return f"{CACHE_KEY_PREFIX}_{user_id or 'guest'}"


class BookmarkStatus(str, Enum):
    SAVED = "saved"
    REMOVED = "removed"
    REQUIRES_AUTH = "requires_auth"
    FAILED = "failed"


@dataclass
class BookmarkResult:
    status: BookmarkStatus
    job_id: str
    banner: Banner | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (BookmarkStatus.SAVED, BookmarkStatus.REMOVED)


class SavedJobs:
    def __init__(self, auth: AuthSession, users: UsersApi, store: LocalStore | None = None) -> None:
        self.auth = auth
        self.users = users
        self.store = store or LocalStore()
        # dict keeps insertion order and gives a live read-only keys view
        self._ids: dict[str, None] = {}
        self._lock = threading.Lock()
        # serializes toggles; re-entrant so a subscriber may toggle again
        self._toggle_lock = threading.RLock()
        self._subscribers: list[Subscriber] = []
        auth.add_listener(self._on_user_changed)

    # ── queries ────────────────────────────────────────────────────────

    @property
    def saved_ids(self) -> KeysView[str]:
        return self._ids.keys()

    def is_job_saved(self, job_id: str | None) -> bool:
        return bool(job_id) and job_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    # ── observers ──────────────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self.saved_ids)
            except Exception:
                log.exception("Saved-jobs subscriber %r failed", callback)

    # ── persistence ────────────────────────────────────────────────────

    def _write_cache(self, user: User | None) -> None:
        self.store.set(cache_key(user.id if user else None), list(self._ids))

    def _replace(self, ids: list[str]) -> None:
        self._ids.clear()
        self._ids.update(dict.fromkeys(i for i in ids if i))

    def _revert(self, job_id: str, removing: bool, snapshot: list[str]) -> None:
        """Undo one optimistic toggle, keeping changes made since and the old order."""
        if not removing:
            self._ids.pop(job_id, None)
            return
        kept = [i for i in snapshot if i == job_id or i in self._ids]
        self._replace(kept + [i for i in self._ids if i not in snapshot])

    def hydrate(self) -> None:
        """Load the signed-in user's set: local cache first, then the backend's list."""
        user = self.auth.user
        with self._lock:
            if user is None:
                self._replace([])
            else:
                cached = self.store.get(cache_key(user.id), [])
                if not isinstance(cached, list):
                    log.warning("Ignoring malformed saved-jobs cache for %s", user.id)
                    cached = []
                self._replace([str(i) for i in cached])
                try:
                    self._replace(self.users.saved_jobs())
                    self._write_cache(user)
                except ApiError as exc:
                    log.warning("Could not load saved jobs from backend (%s); using cache", exc)
            count = len(self._ids)
        log.info("Saved jobs hydrated for %s: %d", user.id if user else "guest", count)
        self._notify()

    def _on_user_changed(self, user: User | None) -> None:
        if user is None:
            with self._lock:
                self._replace([])
            log.debug("Cleared saved jobs on sign-out")
            self._notify()
        else:
            self.hydrate()

    # ── mutation ───────────────────────────────────────────────────────

    def toggle_bookmark(self, job_id: str, now: float | None = None) -> BookmarkResult:
        user = self.auth.user
        if user is None:
            log.debug("Bookmark of %s refused: not signed in", job_id)
            return BookmarkResult(
                BookmarkStatus.REQUIRES_AUTH, job_id, banner=sign_in_banner(SIGN_IN_TO_SAVE, now=now),
            )

        with self._toggle_lock:
            with self._lock:
                snapshot = list(self._ids)
                removing = job_id in self._ids
                if removing:
                    del self._ids[job_id]
                else:
                    self._ids[job_id] = None
                self._write_cache(user)
            self._notify()

            try:
                if removing:
                    self.users.unsave_job(job_id)
                else:
                    self.users.save_job(job_id)
            except ApiError as exc:
                # the backend already agrees with the new state
                if exc.mentions("already saved", "not in saved"):
                    log.debug("Backend already in sync for %s: %s", job_id, exc.message)
                else:
                    log.error("Bookmark %s for %s failed: %s", "removal" if removing else "save", job_id, exc)
                    with self._lock:
                        self._revert(job_id, removing, snapshot)
                        self._write_cache(user)
                    self._notify()
                    return BookmarkResult(BookmarkStatus.FAILED, job_id, error=exc.message)

        status = BookmarkStatus.REMOVED if removing else BookmarkStatus.SAVED
        log.info("Job %s %s", job_id, status.value)
        return BookmarkResult(status, job_id)
