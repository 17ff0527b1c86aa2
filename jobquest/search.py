"""Job queries sent to /api/jobs and the free-text filter applied on the client."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from jobquest.models import Job


def clean_params(params: dict[str, Any] | None) -> dict[str, str]:
    """Drop empty values and render the rest the way the backend parses them."""
    out: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            out[key] = "true" if value else "false"
        else:
            out[key] = str(value)
    return out


@dataclass
class JobQuery:
    page: int = 1
    limit: int = 10
    search: str = ""
    location: str = ""
    category: str = ""
    job_type: str = ""
    experience_level: str = ""
    remote: bool | None = None
    featured: bool | None = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"

    def to_params(self) -> dict[str, str]:
        return clean_params({
            "page": self.page,
            "limit": self.limit,
            "search": self.search.strip(),
            "location": self.location.strip(),
            "category": self.category,
            "jobType": self.job_type,
            "experienceLevel": self.experience_level,
            # the backend only looks for "true"; False means "no filter"
            "remote": True if self.remote else None,
            "featured": True if self.featured else None,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order,
        })


def _haystack(job: Job) -> str:
    parts = [job.title, job.company, job.location, job.description, " ".join(job.skills)]
    return " ".join(p for p in parts if p).lower()


def matches(job: Job, text: str) -> bool:
    terms = text.lower().split()
    if not terms:
        return True
    hay = _haystack(job)
    return all(t in hay for t in terms)


def filter_jobs(jobs: Iterable[Job], text: str) -> list[Job]:
    """Jobs whose text fields contain every whitespace-separated term."""
    return [j for j in jobs if matches(j, text)]


def filter_admin_jobs(
    jobs: Iterable[Job],
    search: str = "",
    status: str = "",
    category: str = "",
) -> list[Job]:
    """Admin job table filter: search over title and company, exact status and category."""
    needle = search.strip().lower()
    out = []
    for job in jobs:
        if needle and needle not in job.title.lower() and needle not in job.company.lower():
            continue
        if status and status != "all" and job.status != status:
            continue
        if category and category != "all" and job.category != category:
            continue
        out.append(job)
    return out
