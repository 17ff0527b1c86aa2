"""Account settings for a signed-in member: preferences, applied jobs, deletion."""
from __future__ import annotations

from jobquest.api import UsersApi
from jobquest.auth import AuthSession
from jobquest.errors import ApiError, PermissionDenied, ValidationError
from jobquest.log import get_logger

log = get_logger(__name__)

# backend preference key -> label
PREFERENCES: dict[str, str] = {
    "jobAlerts": "Job alerts",
    "newsletter": "Newsletter",
    "darkMode": "Dark mode",
}
DEFAULT_PREFERENCES: dict[str, bool] = {"jobAlerts": True, "newsletter": True, "darkMode": False}

DELETE_CONFIRMATION = "DELETE"


class AccountSettings:
    def __init__(self, users: UsersApi, auth: AuthSession) -> None:
        self.users = users
        self.auth = auth
        self.error: str | None = None

    def _require_user(self, action: str):
        user = self.auth.user
        if user is None:
            raise PermissionDenied(f"Sign in to {action}")
        return user

    def preferences(self) -> dict[str, bool]:
        user = self.auth.user
        current = dict(DEFAULT_PREFERENCES)
        if user is not None:
            current.update({k: v for k, v in user.preferences.items() if k in PREFERENCES})
        return current

    def save_preferences(self, **preferences: bool) -> bool:
        self._require_user("change your preferences")
        unknown = set(preferences) - set(PREFERENCES)
        if unknown:
            raise ValidationError({k: f"Unknown preference: {k}" for k in sorted(unknown)})
        try:
            self.users.update_preferences(**preferences)
        except ApiError as exc:
            log.error("Saving preferences failed: %s", exc)
            self.error = "Failed to save preferences. Please try again."
            return False
        self.auth.update_user(preferences={**self.preferences(), **preferences})
        self.error = None
        log.info("Preferences saved: %s", preferences)
        return True

    def applied_job_ids(self) -> list[str]:
        """Ids of jobs the member applied to; empty when the call fails."""
        self._require_user("see applied jobs")
        try:
            data = self.users.applied_jobs()
        except ApiError as exc:
            log.warning("Applied jobs unavailable: %s", exc)
            return []
        rows = data.get("appliedJobs", []) if isinstance(data, dict) else data
        ids = []
        for row in rows or []:
            job = row.get("job", row) if isinstance(row, dict) else row
            job_id = (job.get("_id") or job.get("id")) if isinstance(job, dict) else job
            if job_id:
                ids.append(str(job_id))
        return ids

    def delete_account(self, confirmation: str) -> bool:
        """Delete the account once ``confirmation`` reads DELETE, then sign out."""
        user = self._require_user("delete your account")
        if confirmation.strip() != DELETE_CONFIRMATION:
            raise ValidationError({"confirmation": f'Type "{DELETE_CONFIRMATION}" to confirm'})
        try:
            self.users.delete_account()
        except ApiError as exc:
            log.error("Deleting account %s failed: %s", user.id, exc)
            self.error = exc.message or "Failed to delete account"
            return False
        log.info("Deleted account %s", user.email)
        self.auth.logout()
        return True
