"""Endpoints under /api/guest-applications (no account needed)."""
from __future__ import annotations

from urllib.parse import quote

from jobquest.api.base import ApiResource


class GuestApplicationsApi(ApiResource):
    prefix = "/api/guest-applications"

    def submit(self, payload: dict) -> dict:
        """POST ``{firstName, lastName, email, phone, coverLetter, jobId, jobTitle, companyName}``."""
        return self.client.post(self.path(), payload, auth=False)

    def by_email(self, email: str) -> dict:
        return self.client.get(self.path("by-email", quote(email, safe="")), auth=False)

    def by_job(self, job_id: str) -> dict:
        return self.client.get(self.path("by-job", job_id), auth=False)
