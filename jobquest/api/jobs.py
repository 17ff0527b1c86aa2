"""Endpoints under /api/jobs, public listing and the admin CRUD routes."""
from __future__ import annotations

from jobquest.api.base import ApiResource, RequestScope
from jobquest.log import get_logger
from jobquest.models import Job, JobPage
from jobquest.search import JobQuery

log = get_logger(__name__)


class JobsApi(ApiResource):
    prefix = "/api/jobs"

    def list_jobs(self, query: JobQuery, scope: RequestScope | None = None) -> JobPage:
        data = self.client.get(self.path(), query.to_params(), auth=False, scope=scope)
        page = JobPage.from_api(data or {}, page=query.page)
        log.debug("Fetched %d jobs (page %d/%d)", len(page.jobs), page.page, page.total_pages)
        return page

    def featured(self, scope: RequestScope | None = None) -> list[Job]:
        data = self.client.get(self.path("featured"), auth=False, scope=scope)
        return [Job.from_api(j) for j in data or []]

    def get_job(self, job_id: str, scope: RequestScope | None = None) -> Job:
        data = self.client.get(self.path(job_id), auth=False, scope=scope)
        return Job.from_api(data.get("job", data) if isinstance(data, dict) else {})

    def category_stats(self) -> list[dict]:
        return self.client.get(self.path("categories", "stats"), auth=False) or []

    # ── admin ──────────────────────────────────────────────────────────

    def admin_jobs(self, params: dict | None = None) -> JobPage:
        data = self.client.get(self.path("admin"), params or {})
        return JobPage.from_api(data or {})

    def create_job(self, data: dict, files: dict | None = None) -> dict:
        """Multipart POST; ``files`` may carry a ``jobImage`` tuple."""
        return self.client.request("POST", self.path("admin"), data=data, files=files or None)

    def update_job(self, job_id: str, data: dict, files: dict | None = None) -> dict:
        return self.client.request("PUT", self.path("admin", job_id), data=data, files=files or None)

    def delete_job(self, job_id: str) -> dict:
        return self.client.delete(self.path("admin", job_id))
