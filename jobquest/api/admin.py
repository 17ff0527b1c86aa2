"""Endpoints under /api/admin."""
from __future__ import annotations

from jobquest.api.base import ApiResource
from jobquest.models import AdminPermissions


class AdminApi(ApiResource):
    prefix = "/api/admin"

    def dashboard(self) -> dict:
        """Returns ``{statistics, recentActivity}``."""
        return self.client.get(self.path("dashboard")) or {}

    def permissions(self) -> AdminPermissions:
        data = self.client.get(self.path("permissions")) or {}
        return AdminPermissions.from_api(data.get("permissions", data))

    # ── users ──────────────────────────────────────────────────────────

    def users(self, page: int = 1, limit: int = 20, search: str = "",
              role: str = "", is_active: bool | None = None) -> dict:
        """Returns ``{users, pagination: {totalPages, totalUsers}}``."""
        return self.client.get(self.path("users"), {
            "page": page, "limit": limit, "search": search, "role": role, "isActive": is_active,
        }) or {}

    def user_details(self, user_id: str) -> dict:
        return self.client.get(self.path("users", user_id)) or {}

    def update_user_status(self, user_id: str, is_active: bool) -> dict:
        return self.client.patch(self.path("users", user_id, "status"), {"isActive": is_active})

    def update_user_role(self, user_id: str, role: str) -> dict:
        return self.client.patch(self.path("users", user_id, "role"), {"role": role})

    # ── jobs / companies ───────────────────────────────────────────────

    def jobs(self, page: int = 1, limit: int = 20, status: str = "", search: str = "") -> dict:
        return self.client.get(self.path("jobs"), {
            "page": page, "limit": limit, "status": status, "search": search,
        }) or {}

    def update_job_status(self, job_id: str, status: str) -> dict:
        return self.client.patch(self.path("jobs", job_id, "status"), {"status": status})

    def companies(self, page: int = 1, limit: int = 20, search: str = "") -> dict:
        return self.client.get(self.path("companies"), {"page": page, "limit": limit, "search": search}) or {}

    def verify_company(self, company_id: str, is_verified: bool = True) -> dict:
        return self.client.patch(self.path("companies", company_id, "verify"), {"isVerified": is_verified})

    # ── guest applications ─────────────────────────────────────────────

    def guest_applications(self, page: int = 1, limit: int = 20, status: str = "",
                           search: str = "") -> dict:
        """Returns ``{applications, pagination: {totalPages, totalItems}}``."""
        return self.client.get(self.path("guest-applications"), {
            "page": page, "limit": limit, "status": status, "search": search,
        }) or {}

    def guest_application_stats(self) -> dict:
        return self.client.get(self.path("guest-applications", "stats")) or {}

    def update_guest_application_status(self, application_id: str, status: str, notes: str = "") -> dict:
        return self.client.put(
            self.path("guest-applications", application_id, "status"),
            {"status": status, "notes": notes},
        )

    def delete_guest_application(self, application_id: str) -> dict:
        return self.client.delete(self.path("guest-applications", application_id))

    def export_guest_applications_csv(self, status: str = "") -> str:
        return self.client.get_text(self.path("guest-applications", "export", "csv"), {"status": status})
