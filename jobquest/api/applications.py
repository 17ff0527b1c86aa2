"""Endpoints under /api/applications (signed-in members)."""
from __future__ import annotations

from typing import Any

from jobquest.api.base import ApiResource


class ApplicationsApi(ApiResource):
    prefix = "/api/applications"

    def create(self, job_id: str, application_method: str, contact_email: str,
               email_subject: str, email_body: str) -> dict:
        return self.client.post(self.path(), {
            "jobId": job_id,
            "applicationMethod": application_method,
            "contactEmail": contact_email,
            "emailSubject": email_subject,
            "emailBody": email_body,
        })

    def list(self, status: str = "all", page: int = 1, limit: int = 10,
             sort_by: str = "appliedAt", sort_order: str = "desc") -> dict:
        """Returns ``{applications, pagination, statistics}``."""
        return self.client.get(self.path(), {
            "status": status,
            "page": page,
            "limit": limit,
            "sortBy": sort_by,
            "sortOrder": sort_order,
        })

    def get(self, application_id: str) -> dict:
        return self.client.get(self.path(application_id))

    def update(self, application_id: str, **fields: Any) -> dict:
        return self.client.put(self.path(application_id), fields)

    def delete(self, application_id: str) -> dict:
        return self.client.delete(self.path(application_id))

    def stats(self) -> dict:
        return self.client.get(self.path("stats", "summary"))
