"""Transient banners that hide themselves after a few seconds."""
from __future__ import annotations

import time
from dataclasses import dataclass, field

from jobquest.config import load_settings

SIGN_IN_TO_SAVE = "Please sign in to save jobs."
SIGN_IN_FOR_PROFILE = "Please sign in to create your profile."


def default_duration() -> float:
    return float(load_settings().get("banner_seconds", 5.0))


@dataclass
class Banner:
    message: str
    kind: str = "info"
    shown_at: float = field(default_factory=time.monotonic)
    duration: float = 5.0
    actions: tuple[str, ...] = ()
    dismissed: bool = False

    def visible(self, now: float | None = None) -> bool:
        if self.dismissed:
            return False
        now = time.monotonic() if now is None else now
        return now - self.shown_at < self.duration

    def dismiss(self) -> None:
        self.dismissed = True


def sign_in_banner(message: str = SIGN_IN_TO_SAVE, now: float | None = None,
                   duration: float | None = None) -> Banner:
    """Prompt shown instead of a member-only action; offers sign in / sign up."""
    return Banner(
        message=message,
        kind="warning",
        shown_at=time.monotonic() if now is None else now,
        duration=default_duration() if duration is None else duration,
        actions=("sign_in", "sign_up"),
    )


def live_banner(state, key: str = "banner", now: float | None = None) -> Banner | None:
    """The banner stored under ``key`` while it is still up; drops it once hidden."""
    banner: Banner | None = state.get(key)
    if banner is None or not banner.visible(now):
        state.pop(key, None)
        return None
    return banner
