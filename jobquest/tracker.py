"""My Applications: the signed-in member's application history."""
from __future__ import annotations

import pandas as pd

from jobquest.api import ApplicationsApi
from jobquest.auth import AuthSession
from jobquest.errors import ApiError, PermissionDenied
from jobquest.formatting import format_date, status_label
from jobquest.log import get_logger
from jobquest.models import APPLICATION_STATUSES, Application

log = get_logger(__name__)

SORT_OPTIONS: dict[str, tuple[str, str]] = {
    "Newest first": ("appliedAt", "desc"),
    "Oldest first": ("appliedAt", "asc"),
    "Status": ("status", "asc"),
}
COLUMNS: list[str] = ["Job", "Company", "Status", "Method", "Applied"]


def empty_stats() -> dict[str, int]:
    return {"total": 0, **{s: 0 for s in APPLICATION_STATUSES}}


class MyApplications:
    def __init__(self, api: ApplicationsApi, auth: AuthSession, page_size: int = 10) -> None:
        self.api = api
        self.auth = auth
        self.page_size = page_size
        self.applications: list[Application] = []
        self.stats: dict[str, int] = empty_stats()
        self.total_pages = 0
        self.page = 1
        self.error: str | None = None

    def _require_user(self) -> None:
        if self.auth.user is None:
            raise PermissionDenied("Sign in to see your applications")

    def refresh(self, status: str = "all", sort: str = "Newest first", page: int = 1) -> list[Application]:
        self._require_user()
        sort_by, sort_order = SORT_OPTIONS.get(sort, SORT_OPTIONS["Newest first"])
        try:
            data = self.api.list(status=status or "all", page=page, limit=self.page_size,
                                 sort_by=sort_by, sort_order=sort_order) or {}
        except ApiError as exc:
            log.error("Loading applications failed: %s", exc)
            self.applications = []
            self.error = "Failed to load applications"
            return []

        self.applications = [Application.from_api(a) for a in data.get("applications", [])]
        pagination = data.get("pagination", {})
        self.total_pages = int(pagination.get("totalPages", 1) or 1)
        self.page = int(pagination.get("currentPage", page) or page)
        self.stats = {**empty_stats(), **(data.get("statistics") or {})}
        self.error = None
        log.info("Loaded %d applications (status=%s)", len(self.applications), status)
        return self.applications

    def search(self, text: str) -> list[Application]:
        needle = text.strip().lower()
        if not needle:
            return list(self.applications)
        return [a for a in self.applications
                if needle in a.job_title.lower() or needle in a.company.lower()]

    def withdraw(self, application_id: str) -> bool:
        self._require_user()
        try:
            self.api.update(application_id, status="withdrawn")
        except ApiError as exc:
            log.error("Withdrawing application %s failed: %s", application_id, exc)
            self.error = exc.message
            return False
        log.info("Withdrew application %s", application_id)
        return True

    def delete(self, application_id: str) -> bool:
        self._require_user()
        try:
            self.api.delete(application_id)
        except ApiError as exc:
            log.error("Deleting application %s failed: %s", application_id, exc)
            self.error = exc.message
            return False
        self.applications = [a for a in self.applications if a.id != application_id]
        log.info("Deleted application %s", application_id)
        return True

    def to_frame(self, applications: list[Application] | None = None) -> pd.DataFrame:
        rows = [
            {
                "Job": a.job_title,
                "Company": a.company,
                "Status": status_label(a.status),
                "Method": status_label(a.application_method),
                "Applied": format_date(a.applied_at),
            }
            for a in (self.applications if applications is None else applications)
        ]
        return pd.DataFrame(rows, columns=COLUMNS)
