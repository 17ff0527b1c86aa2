"""Admin back-office view-models.

Each view fetches a page, offers mutations that call the backend and then
refetch. Role checks here only decide what the UI offers; the backend
makes the real decision.
"""
from __future__ import annotations

import json
import mimetypes
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable

import pandas as pd

from jobquest.api import AdminApi, ContactApi, GuestApplicationsApi, JobsApi, NewsletterApi
from jobquest.config import EXPORTS_DIR, load_settings
from jobquest.errors import ApiError, PermissionDenied, ValidationError
from jobquest.formatting import format_date, status_label
from jobquest.log import get_logger
from jobquest.models import (
    CONTACT_STATUSES,
    GUEST_APPLICATION_STATUSES,
    USER_ROLES,
    AdminPermissions,
    ContactMessage,
    GuestApplication,
    Job,
    Subscriber,
    User,
)
from jobquest.search import filter_admin_jobs

log = get_logger(__name__)

ADMIN_GUEST_STATUSES: list[str] = GUEST_APPLICATION_STATUSES


def _page_size() -> int:
    return int(load_settings()["page_size"]["admin"])


# ── users ─────────────────────────────────────────────────────────────────


class UserManagement:
    def __init__(self, api: AdminApi, page_size: int | None = None) -> None:
        self.api = api
        self.page_size = page_size or _page_size()
        self.permissions = AdminPermissions.fallback()
        self.users: list[User] = []
        self.total_pages = 0
        self.total_users = 0
        self.page = 1
        self.filters: dict[str, Any] = {}
        self.error: str | None = None

    def load_permissions(self) -> AdminPermissions:
        try:
            self.permissions = self.api.permissions()
        except ApiError as exc:
            log.warning("Permissions check failed (%s); using defaults", exc)
            self.permissions = AdminPermissions.fallback()
        return self.permissions

    def refresh(self, page: int = 1, search: str = "", role: str = "", status: str = "") -> list[User]:
        self.filters = {"search": search, "role": role, "status": status}
        is_active = {"active": True, "inactive": False}.get(status)
        try:
            data = self.api.users(page=page, limit=self.page_size, search=search.strip(),
                                  role=role, is_active=is_active)
        except ApiError as exc:
            log.error("Loading users failed: %s", exc)
            self.users, self.error = [], "Failed to fetch users"
            return []
        self.users = [User.from_api(u) for u in data.get("users", [])]
        pagination = data.get("pagination", {})
        self.total_pages = int(pagination.get("totalPages", 1) or 1)
        self.total_users = int(pagination.get("totalUsers", len(self.users)) or 0)
        self.page = page
        self.error = None
        return self.users

    def _refetch(self) -> None:
        self.refresh(self.page, **self.filters)

    def role_options(self) -> list[str]:
        return [r for r in USER_ROLES if r != "super_admin" or self.permissions.can_change_roles]

    def can_toggle(self, user: User) -> bool:
        return self.permissions.can_change_roles or user.role != "super_admin"

    def toggle_status(self, user: User) -> bool:
        if not self.can_toggle(user):
            raise PermissionDenied("Only super admins can change the status of super admin accounts")
        try:
            self.api.update_user_status(user.id, not user.is_active)
        except ApiError as exc:
            log.error("Status change for %s failed: %s", user.email, exc)
            self.error = exc.message or "Failed to update user status"
            return False
        log.info("User %s %s", user.email, "deactivated" if user.is_active else "activated")
        self._refetch()
        return True

    def change_role(self, user: User, role: str) -> bool:
        if not self.permissions.can_change_roles:
            raise PermissionDenied("Only super admins can change roles")
        if role not in USER_ROLES:
            raise ValidationError({"role": f"Unknown role: {role}"})
        try:
            self.api.update_user_role(user.id, role)
        except ApiError as exc:
            log.error("Role change for %s failed: %s", user.email, exc)
            self.error = exc.message or "Failed to update user role"
            return False
        log.info("User %s role %s -> %s", user.email, user.role, role)
        self._refetch()
        return True

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "Name": u.full_name,
                "Email": u.email,
                "Role": status_label(u.role),
                "Active": u.is_active,
                "Joined": format_date(u.created_at),
            }
            for u in self.users
        ]
        return pd.DataFrame(rows, columns=["Name", "Email", "Role", "Active", "Joined"])


# ── jobs ──────────────────────────────────────────────────────────────────


def _clean(items: list[str]) -> list[str]:
    return [i.strip() for i in items if i and i.strip()]


@dataclass
class JobForm:
    title: str = ""
    company_name: str = ""
    description: str = ""
    location: str = ""
    is_remote: bool = False
    job_type: str = "full-time"
    experience_level: str = ""
    category: str = "technology"
    featured: bool = False
    urgent: bool = False
    salary_min: float | None = None
    salary_max: float | None = None
    currency: str = "USD"
    requirements: list[str] = field(default_factory=list)
    responsibilities: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    application_deadline: str = ""
    link: str = ""

    @classmethod
    def from_job(cls, job: Job) -> "JobForm":
        raw = job.raw or {}
        deadline = (job.deadline or "")[:10]
        return cls(
            title=job.title,
            company_name=job.company,
            description=job.description,
            location=job.location,
            is_remote=job.is_remote,
            job_type=job.job_type or "full-time",
            experience_level=job.experience_level,
            category=job.category or "technology",
            featured=job.featured,
            urgent=bool(raw.get("urgent", False)),
            salary_min=job.salary.min,
            salary_max=job.salary.max,
            currency=job.salary.currency,
            requirements=list(job.requirements),
            responsibilities=list(job.responsibilities),
            skills=list(job.skills),
            benefits=list(job.benefits),
            tags=[str(t) for t in raw.get("tags") or []],
            application_deadline=deadline,
            link=job.link or "",
        )

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        for name, label in (("title", "Title"), ("company_name", "Company"),
                            ("description", "Description"), ("location", "Location")):
            if not getattr(self, name).strip():
                errors[name] = f"{label} is required"
        if self.salary_min and self.salary_max and self.salary_min > self.salary_max:
            errors["salary"] = "Minimum salary cannot exceed maximum salary"
        return errors

    def to_multipart(self) -> dict[str, str]:
        data = {
            "title": self.title.strip(),
            "companyName": self.company_name.strip(),
            "description": self.description.strip(),
            "location": self.location.strip(),
            "isRemote": "true" if self.is_remote else "false",
            "jobType": self.job_type,
            "category": self.category,
            "featured": "true" if self.featured else "false",
            "urgent": "true" if self.urgent else "false",
            "requirements": json.dumps(_clean(self.requirements)),
            "responsibilities": json.dumps(_clean(self.responsibilities)),
            "skills": json.dumps(_clean(self.skills)),
            "benefits": json.dumps(_clean(self.benefits)),
            "tags": json.dumps(_clean(self.tags)),
        }
        if self.experience_level:
            data["experienceLevel"] = self.experience_level
        if self.salary_min or self.salary_max:
            data["salary"] = json.dumps({
                "min": self.salary_min or "",
                "max": self.salary_max or "",
                "currency": self.currency,
            })
        if self.application_deadline:
            data["applicationDeadline"] = self.application_deadline
        if self.link.strip():
            data["link"] = self.link.strip()
        return data


def job_image(name: str, content: bytes, max_mb: float | None = None) -> dict:
    """``files`` entry for a poster upload; images only, within the size limit."""
    if max_mb is None:
        max_mb = float(load_settings().get("max_image_mb", 5))
    if len(content) > max_mb * 1024 * 1024:
        raise ValidationError({"image": f"Image size must be less than {max_mb:g}MB"})
    mime = mimetypes.guess_type(name)[0] or ""
    if not mime.startswith("image/"):
        raise ValidationError({"image": "Please select a valid image file"})
    return {"jobImage": (Path(name).name, content, mime)}


class JobManagement:
    def __init__(self, jobs_api: JobsApi, admin_api: AdminApi, page_size: int = 100) -> None:
        self.jobs_api = jobs_api
        self.admin_api = admin_api
        self.page_size = page_size
        self.jobs: list[Job] = []
        self.error: str | None = None

    def refresh(self) -> list[Job]:
        try:
            page = self.jobs_api.admin_jobs({"page": 1, "limit": self.page_size})
        except ApiError as exc:
            log.error("Loading admin jobs failed: %s", exc)
            self.jobs, self.error = [], "Failed to fetch jobs"
            return []
        self.jobs = page.jobs
        self.error = None
        return self.jobs

    def filtered(self, search: str = "", status: str = "all", category: str = "all") -> list[Job]:
        return filter_admin_jobs(self.jobs, search, status, category)

    def save(self, form: JobForm, job_id: str | None = None, image: dict | None = None) -> bool:
        errors = form.validate()
        if errors:
            raise ValidationError(errors)
        try:
            if job_id:
                self.jobs_api.update_job(job_id, form.to_multipart(), files=image)
            else:
                self.jobs_api.create_job(form.to_multipart(), files=image)
        except ApiError as exc:
            log.error("Saving job %r failed: %s", form.title, exc)
            self.error = exc.message or "Failed to save job"
            return False
        log.info("%s job %r", "Updated" if job_id else "Created", form.title)
        self.refresh()
        return True

    def delete(self, job_id: str) -> bool:
        try:
            self.jobs_api.delete_job(job_id)
        except ApiError as exc:
            log.error("Deleting job %s failed: %s", job_id, exc)
            self.error = "Failed to delete job"
            return False
        log.info("Deleted job %s", job_id)
        self.refresh()
        return True

    def set_status(self, job_id: str, status: str) -> bool:
        try:
            self.admin_api.update_job_status(job_id, status)
        except ApiError as exc:
            log.error("Status change for job %s failed: %s", job_id, exc)
            self.error = exc.message or "Failed to update job status"
            return False
        self.refresh()
        return True


# ── guest applications ────────────────────────────────────────────────────


class GuestApplicationManagement:
    def __init__(self, api: AdminApi, page_size: int | None = None,
                 guests: GuestApplicationsApi | None = None) -> None:
        self.api = api
        self.guests = guests
        self.page_size = page_size or _page_size()
        self.applications: list[GuestApplication] = []
        self.stats: dict[str, int] = {}
        self.total_pages = 0
        self.total_items = 0
        self.page = 1
        self.filters: dict[str, str] = {}
        self.error: str | None = None

    def refresh(self, page: int = 1, status: str = "", search: str = "") -> list[GuestApplication]:
        self.filters = {"status": status, "search": search}
        try:
            data = self.api.guest_applications(page=page, limit=self.page_size,
                                               status="" if status == "all" else status,
                                               search=search.strip())
        except ApiError as exc:
            log.error("Loading guest applications failed: %s", exc)
            self.applications, self.error = [], "Failed to fetch guest applications"
            return []
        self.applications = [GuestApplication.from_api(a) for a in data.get("applications", [])]
        pagination = data.get("pagination", {})
        self.total_pages = int(pagination.get("totalPages", 1) or 1)
        self.total_items = int(pagination.get("totalItems", len(self.applications)) or 0)
        self.page = page
        self.error = None
        self.load_stats()
        return self.applications

    def for_job(self, job_id: str) -> list[GuestApplication]:
        """Guest applications sent for one posting."""
        if self.guests is None:
            return []
        try:
            data = self.guests.by_job(job_id)
        except ApiError as exc:
            log.warning("Guest applications for job %s unavailable: %s", job_id, exc)
            return []
        return [GuestApplication.from_api(a) for a in (data or {}).get("applications", [])]

    def load_stats(self) -> dict[str, int]:
        try:
            self.stats = self.api.guest_application_stats()
        except ApiError as exc:
            log.warning("Guest application stats unavailable: %s", exc)
        return self.stats

    def update_status(self, application_id: str, status: str, notes: str = "") -> bool:
        if status not in ADMIN_GUEST_STATUSES:
            raise ValidationError({"status": f"Unknown status: {status}"})
        try:
            self.api.update_guest_application_status(application_id, status, notes)
        except ApiError as exc:
            log.error("Status change for guest application %s failed: %s", application_id, exc)
            self.error = exc.message or "Failed to update application status"
            return False
        self.refresh(self.page, **self.filters)
        return True

    def delete(self, application_id: str) -> bool:
        try:
            self.api.delete_guest_application(application_id)
        except ApiError as exc:
            log.error("Deleting guest application %s failed: %s", application_id, exc)
            self.error = exc.message or "Failed to delete application"
            return False
        self.refresh(self.page, **self.filters)
        return True

    def export_csv(self, status: str = "", dest_dir: Path | None = None, today: date | None = None) -> Path:
        """Download the backend's CSV export into ``exports/``."""
        text = self.api.export_guest_applications_csv(status="" if status == "all" else status)
        dest_dir = dest_dir or EXPORTS_DIR
        dest_dir.mkdir(parents=True, exist_ok=True)
        path = dest_dir / f"guest-applications-{(today or date.today()).isoformat()}.csv"
        path.write_text(text, encoding="utf-8")
        log.info("Exported guest applications -> %s", path)
        return path

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "Name": a.full_name,
                "Email": a.email,
                "Phone": a.phone,
                "Job": a.job_title,
                "Company": a.company_name,
                "Status": status_label(a.status),
                "Applied": format_date(a.applied_at),
            }
            for a in self.applications
        ]
        return pd.DataFrame(rows, columns=["Name", "Email", "Phone", "Job", "Company", "Status", "Applied"])


# ── dashboard ─────────────────────────────────────────────────────────────


class AdminDashboard:
    """Overview, newsletter subscribers and contact messages, loaded side by side."""

    def __init__(self, admin_api: AdminApi, newsletter_api: NewsletterApi, contact_api: ContactApi,
                 contacts_page_size: int | None = None) -> None:
        self.admin_api = admin_api
        self.newsletter_api = newsletter_api
        self.contact_api = contact_api
        if contacts_page_size is None:
            contacts_page_size = int(load_settings()["page_size"]["contacts"])
        self.contacts_page_size = contacts_page_size

        self.statistics: dict = {}
        self.recent_activity: dict = {}
        self.subscribers: list[Subscriber] = []
        self.subscriber_total = 0
        self.contacts: list[ContactMessage] = []
        self.contact_pagination: dict = {}
        self.contact_stats: dict = {}
        self.contact_page = 1
        self.contact_status = ""
        self.error: str | None = None
        self.loading = False
        self._lock = threading.Lock()

    # each loader fetches, then applies its own slice under the lock

    def _load_dashboard(self) -> None:
        data = self.admin_api.dashboard()
        with self._lock:
            self.statistics = data.get("statistics", {})
            self.recent_activity = data.get("recentActivity", {})

    def _load_newsletter(self) -> None:
        subscribers, total = self.newsletter_api.subscribers()
        with self._lock:
            self.subscribers, self.subscriber_total = subscribers, total

    def _load_contacts(self) -> None:
        messages, pagination = self.contact_api.list(
            page=self.contact_page, limit=self.contacts_page_size, status=self.contact_status,
        )
        stats = self.contact_api.stats()
        with self._lock:
            self.contacts, self.contact_pagination, self.contact_stats = messages, pagination, stats

    def load(self) -> None:
        self.loading = True
        self.error = None
        loaders: dict[str, Callable[[], None]] = {
            "dashboard": self._load_dashboard,
            "newsletter": self._load_newsletter,
            "contacts": self._load_contacts,
        }
        with ThreadPoolExecutor(max_workers=len(loaders)) as pool:
            futures = {pool.submit(fn): name for name, fn in loaders.items()}
            for future in as_completed(futures):
                name = futures[future]
                try:
                    future.result()
                except ApiError as exc:
                    if name == "dashboard":
                        log.error("Dashboard load failed: %s", exc)
                        self.error = "Failed to load dashboard data"
                    else:
                        log.warning("%s section failed to load: %s", name.capitalize(), exc)
        self.loading = False

    def reload_contacts(self, page: int = 1, status: str = "") -> None:
        self.contact_page, self.contact_status = page, status
        try:
            self._load_contacts()
        except ApiError as exc:
            log.warning("Contacts failed to load: %s", exc)

    def reply_contact(self, contact_id: str, reply: str) -> bool:
        if not reply.strip():
            raise ValidationError({"reply": "Please enter a reply message"})
        try:
            self.contact_api.reply(contact_id, reply.strip())
        except ApiError as exc:
            log.error("Reply to contact %s failed: %s", contact_id, exc)
            self.error = exc.message
            return False
        log.info("Replied to contact %s", contact_id)
        self.reload_contacts(self.contact_page, self.contact_status)
        return True

    def set_contact_status(self, contact_id: str, status: str) -> bool:
        if status not in CONTACT_STATUSES:
            raise ValidationError({"status": f"Unknown status: {status}"})
        try:
            self.contact_api.update_status(contact_id, status)
        except ApiError as exc:
            log.error("Status change for contact %s failed: %s", contact_id, exc)
            self.error = exc.message
            return False
        self.reload_contacts(self.contact_page, self.contact_status)
        return True

    def delete_contact(self, contact_id: str) -> bool:
        try:
            self.contact_api.delete(contact_id)
        except ApiError as exc:
            log.error("Deleting contact %s failed: %s", contact_id, exc)
            self.error = exc.message
            return False
        self.reload_contacts(self.contact_page, self.contact_status)
        return True

    def delete_subscriber(self, subscriber_id: str) -> bool:
        try:
            self.newsletter_api.delete_subscriber(subscriber_id)
        except ApiError as exc:
            log.error("Deleting subscriber %s failed: %s", subscriber_id, exc)
            self.error = exc.message
            return False
        with self._lock:
            self.subscribers = [s for s in self.subscribers if s.id != subscriber_id]
            self.subscriber_total = max(self.subscriber_total - 1, 0)
        return True
