"""Endpoints under /api/users: profile, bookmarks, preferences."""
from __future__ import annotations

from jobquest.api.base import ApiResource


class UsersApi(ApiResource):
    prefix = "/api/users"

    def profile(self) -> dict:
        return self.client.get(self.path("profile"))

    def update_profile(self, data: list[tuple[str, str]], files: dict | None = None) -> dict:
        """Multipart PUT. ``data`` is a list of pairs so ``skills[]`` can repeat."""
        return self.client.request("PUT", self.path("profile"), data=data, files=files or None)

    def saved_jobs(self) -> list[str]:
        data = self.client.get(self.path("saved-jobs")) or {}
        ids = data.get("savedJobs", []) if isinstance(data, dict) else data
        # populated documents come back as objects
        return [str(j.get("_id") or j.get("id")) if isinstance(j, dict) else str(j) for j in ids]

    def save_job(self, job_id: str) -> dict:
        return self.client.post(self.path("save-job", job_id))

    def unsave_job(self, job_id: str) -> dict:
        return self.client.delete(self.path("unsave-job", job_id))

    def applied_jobs(self) -> list:
        return self.client.get(self.path("applied-jobs")) or []

    def update_preferences(self, **preferences: bool) -> dict:
        return self.client.put(self.path("preferences"), preferences)

    def delete_account(self) -> dict:
        return self.client.delete(self.path("account"))
