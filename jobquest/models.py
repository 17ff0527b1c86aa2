"""Data models for the records the backend hands the client."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

APPLICATION_STATUSES: list[str] = [
    "applied", "under_review", "interview_scheduled", "offered", "rejected", "withdrawn",
]
GUEST_APPLICATION_STATUSES: list[str] = ["pending", "reviewed", "accepted", "rejected"]
CONTACT_STATUSES: list[str] = ["new", "read", "replied", "closed"]
USER_ROLES: list[str] = ["user", "employer", "admin", "super_admin"]
JOB_STATUSES: list[str] = ["draft", "active", "paused", "closed", "expired"]
JOB_TYPES: list[str] = ["full-time", "part-time", "contract", "freelance", "internship"]
EXPERIENCE_LEVELS: list[str] = ["entry", "mid", "senior", "executive"]
JOB_CATEGORIES: list[str] = [
    "technology", "design", "marketing", "sales", "finance",
    "healthcare", "education", "engineering", "hr", "operations",
    "customer-service", "legal", "consulting", "research", "other",
]


def _record_id(data: dict) -> str:
    return str(data.get("id") or data.get("_id") or "")


def _num(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _str_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v not in (None, "")]


@dataclass
class Salary:
    min: float | None = None
    max: float | None = None
    currency: str = "USD"
    period: str = "yearly"

    @classmethod
    def from_api(cls, data: dict | None) -> "Salary":
        data = data or {}
        return cls(
            min=_num(data.get("min")),
            max=_num(data.get("max")),
            currency=data.get("currency") or "USD",
            period=data.get("period") or "yearly",
        )


@dataclass
class Job:
    id: str
    title: str
    company: str
    location: str = ""
    is_remote: bool = False
    job_type: str = ""
    experience_level: str = ""
    category: str = ""
    salary: Salary = field(default_factory=Salary)
    created_at: str | None = None
    deadline: str | None = None
    image_url: str | None = None
    link: str | None = None
    description: str = ""
    skills: list[str] = field(default_factory=list)
    requirements: list[str] = field(default_factory=list)
    responsibilities: list[str] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)
    status: str = "active"
    featured: bool = False
    raw: dict = field(default_factory=dict)

    @property
    def contact(self) -> str | None:
        """Address applications are e-mailed to; the backend stores it as ``link``."""
        link = (self.link or "").strip()
        return link or None

    @classmethod
    def from_api(cls, data: dict) -> "Job":
        company = data.get("company") or data.get("Company")
        if isinstance(company, dict):
            company_name = company.get("name") or ""
        else:
            company_name = company or ""
        company_name = company_name or data.get("companyName") or ""

        image = data.get("imageUrl") or data.get("image")
        if isinstance(image, dict):
            image = image.get("path") or image.get("filename")

        return cls(
            id=_record_id(data),
            title=data.get("title", ""),
            company=company_name,
            location=data.get("location", "") or "",
            is_remote=bool(data.get("isRemote", False)),
            job_type=data.get("jobType", "") or "",
            experience_level=data.get("experienceLevel", "") or "",
            category=data.get("category", "") or "",
            salary=Salary.from_api(data.get("salary")),
            created_at=data.get("createdAt"),
            deadline=data.get("applicationDeadline") or None,
            image_url=image or None,
            link=data.get("link") or None,
            description=data.get("description", "") or "",
            skills=_str_list(data.get("skills")),
            requirements=_str_list(data.get("requirements")),
            responsibilities=_str_list(data.get("responsibilities")),
            benefits=_str_list(data.get("benefits")),
            status=data.get("status", "active") or "active",
            featured=bool(data.get("featured", False)),
            raw=data,
        )


@dataclass
class JobPage:
    jobs: list[Job]
    total: int
    total_pages: int
    page: int

    @classmethod
    def from_api(cls, data: dict, page: int = 1) -> "JobPage":
        jobs = [Job.from_api(j) for j in data.get("jobs") or []]
        # /api/jobs answers "total", the admin list "totalJobs"
        total = data.get("totalJobs") or data.get("total") or len(jobs)
        return cls(
            jobs=jobs,
            total=int(total),
            total_pages=int(data.get("totalPages") or 1),
            page=int(data.get("currentPage") or page),
        )


@dataclass
class User:
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str = "user"
    phone: str = ""
    location: str = ""
    bio: str = ""
    skills: list[str] = field(default_factory=list)
    experience: str = ""
    resume: dict | None = None
    has_profile: bool = False
    is_active: bool = True
    created_at: str | None = None
    preferences: dict[str, bool] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role in ("admin", "super_admin")

    @classmethod
    def from_api(cls, data: dict) -> "User":
        resume = data.get("resume")
        prefs = data.get("preferences")
        return cls(
            id=_record_id(data),
            email=data.get("email", ""),
            first_name=data.get("firstName", "") or "",
            last_name=data.get("lastName", "") or "",
            role=data.get("role", "user") or "user",
            phone=data.get("phone", "") or "",
            location=data.get("location", "") or "",
            bio=data.get("bio", "") or "",
            skills=_str_list(data.get("skills")),
            experience=data.get("experience", "") or "",
            resume=resume if isinstance(resume, dict) else None,
            has_profile=bool(data.get("hasProfile", False)),
            is_active=bool(data.get("isActive", True)),
            created_at=data.get("createdAt"),
            preferences={k: bool(v) for k, v in prefs.items()} if isinstance(prefs, dict) else {},
        )


@dataclass
class Application:
    id: str
    job_id: str
    job_title: str
    company: str
    status: str
    application_method: str = ""
    contact_email: str = ""
    notes: str = ""
    applied_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Application":
        job = data.get("job") or data.get("Job") or {}
        job_id = data.get("jobId")
        if isinstance(job_id, dict):
            job, job_id = job_id, _record_id(job_id)
        return cls(
            id=_record_id(data),
            job_id=str(job_id or _record_id(job)),
            job_title=job.get("title", "") if isinstance(job, dict) else "",
            company=Job.from_api(job).company if isinstance(job, dict) and job else "",
            status=data.get("status", "applied") or "applied",
            application_method=data.get("applicationMethod", "") or "",
            contact_email=data.get("contactEmail", "") or "",
            notes=data.get("notes", "") or "",
            applied_at=data.get("appliedAt") or data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class GuestApplication:
    id: str
    job_id: str
    job_title: str
    company_name: str
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    cover_letter: str = ""
    status: str = "pending"
    notes: str = ""
    applied_at: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_api(cls, data: dict) -> "GuestApplication":
        job_id = data.get("jobId")
        if isinstance(job_id, dict):
            job_id = _record_id(job_id)
        return cls(
            id=_record_id(data),
            job_id=str(job_id or ""),
            job_title=data.get("jobTitle", "") or "",
            company_name=data.get("companyName", "") or "",
            first_name=data.get("firstName", "") or "",
            last_name=data.get("lastName", "") or "",
            email=data.get("email", "") or "",
            phone=data.get("phone", "") or "",
            cover_letter=data.get("coverLetter", "") or "",
            status=data.get("status", "pending") or "pending",
            notes=data.get("notes", "") or "",
            applied_at=data.get("appliedAt") or data.get("createdAt"),
        )


@dataclass
class Subscriber:
    id: str
    email: str
    subscribed_at: str | None = None
    is_active: bool = True

    @classmethod
    def from_api(cls, data: dict) -> "Subscriber":
        return cls(
            id=_record_id(data),
            email=data.get("email", ""),
            subscribed_at=data.get("subscribedAt") or data.get("createdAt"),
            is_active=bool(data.get("isActive", True)),
        )


@dataclass
class ContactMessage:
    id: str
    first_name: str
    last_name: str
    email: str
    subject: str
    message: str
    status: str = "new"
    phone: str = ""
    reply: str = ""
    created_at: str | None = None
    replied_at: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_api(cls, data: dict) -> "ContactMessage":
        return cls(
            id=_record_id(data),
            first_name=data.get("firstName", "") or "",
            last_name=data.get("lastName", "") or "",
            email=data.get("email", "") or "",
            subject=data.get("subject", "") or "",
            message=data.get("message", "") or "",
            status=data.get("status", "new") or "new",
            phone=data.get("phone", "") or "",
            reply=data.get("reply", "") or "",
            created_at=data.get("createdAt"),
            replied_at=data.get("repliedAt"),
        )


@dataclass
class AdminPermissions:
    can_change_roles: bool = False
    can_manage_users: bool = False
    can_manage_jobs: bool = False
    can_manage_companies: bool = False

    @classmethod
    def from_api(cls, data: dict | None) -> "AdminPermissions":
        data = data or {}
        return cls(
            can_change_roles=bool(data.get("canChangeRoles", False)),
            can_manage_users=bool(data.get("canManageUsers", False)),
            can_manage_jobs=bool(data.get("canManageJobs", False)),
            can_manage_companies=bool(data.get("canManageCompanies", False)),
        )

    @classmethod
    def fallback(cls) -> "AdminPermissions":
        """Used when the permissions call fails: plain admin rights, no role changes."""
        return cls(
            can_change_roles=False,
            can_manage_users=True,
            can_manage_jobs=True,
            can_manage_companies=True,
        )
