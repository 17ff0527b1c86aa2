"""Job listing view-models: fetch a page, keep the newest answer, build cards."""
from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime

from jobquest.api import JobsApi, RequestScope
from jobquest.config import load_settings
from jobquest.errors import ApiError, RequestCancelled
from jobquest.formatting import DeadlineInfo, classify_deadline, format_salary, time_ago
from jobquest.log import get_logger
from jobquest.models import Job
from jobquest.saved_jobs import SavedJobs
from jobquest.search import JobQuery, filter_jobs
from jobquest.share import ShareLinks, share_links

log = get_logger(__name__)

# preset -> settings page_size key
PRESETS: dict[str, str] = {
    "all_jobs": "all_jobs",
    "search_results": "search",
    "carousel": "carousel",
    "category": "category",
}


@dataclass
class JobCard:
    job: Job
    deadline: DeadlineInfo | None
    salary: str | None
    posted: str
    share: ShareLinks
    saved: bool


def build_card(job: Job, saved_jobs: SavedJobs | None = None, origin: str | None = None,
               now: datetime | None = None) -> JobCard:
    return JobCard(
        job=job,
        deadline=classify_deadline(job.deadline, now),
        salary=format_salary(job.salary),
        posted=time_ago(job.created_at, now),
        share=share_links(job, origin),
        saved=saved_jobs.is_job_saved(job.id) if saved_jobs is not None else False,
    )


class JobListing:
    """One listing view. Only the most recent fetch may update it."""

    def __init__(self, jobs_api: JobsApi, preset: str = "all_jobs", page_size: int | None = None) -> None:
        if preset not in PRESETS:
            raise ValueError(f"Unknown listing preset: {preset}")
        self.api = jobs_api
        self.preset = preset
        if page_size is None:
            page_size = int(load_settings()["page_size"][PRESETS[preset]])
        self.page_size = page_size

        self.jobs: list[Job] = []
        self.total = 0
        self.total_pages = 0
        self.page = 1
        self.error: str | None = None
        self.loading = False
        self.query: JobQuery | None = None

        self._generation = 0
        self._scope: RequestScope | None = None
        self._lock = threading.Lock()
        self._closed = False

    def _begin(self) -> tuple[int, RequestScope]:
        with self._lock:
            if self._scope is not None:
                self._scope.cancel()
            self._generation += 1
            self._scope = RequestScope()
            self.loading = True
            return self._generation, self._scope

    def _current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def fetch(self, query: JobQuery | None = None) -> bool:
        """Fetch a page. Returns False when the result was discarded or failed."""
        if self._closed:
            return False
        query = replace(query or JobQuery(), limit=self.page_size)
        generation, scope = self._begin()
        try:
            if self.preset == "carousel":
                jobs = self.api.featured(scope=scope)[: self.page_size]
                total, pages, page = len(jobs), 1, 1
            else:
                result = self.api.list_jobs(query, scope=scope)
                jobs, total, pages, page = result.jobs, result.total, result.total_pages, result.page
        except RequestCancelled:
            log.debug("%s fetch %d cancelled", self.preset, generation)
            return False
        except ApiError as exc:
            with self._lock:
                if not self._current(generation):
                    return False
                log.error("%s fetch failed: %s", self.preset, exc)
                self.jobs, self.total, self.total_pages = [], 0, 0
                self.error = exc.message
                self.loading = False
            return False

        with self._lock:
            if not self._current(generation):
                log.debug("Discarding stale %s result (generation %d)", self.preset, generation)
                return False
            self.jobs, self.total, self.total_pages, self.page = jobs, total, pages, page
            self.query = query
            self.error = None
            self.loading = False
        log.info("%s: %d jobs (page %d/%d)", self.preset, len(jobs), page, pages)
        return True

    def visible_jobs(self, text: str = "") -> list[Job]:
        return filter_jobs(self.jobs, text)

    def cards(self, saved_jobs: SavedJobs | None = None, text: str = "",
              origin: str | None = None, now: datetime | None = None) -> list[JobCard]:
        return [build_card(j, saved_jobs, origin, now) for j in self.visible_jobs(text)]

    def close(self) -> None:
        with self._lock:
            self._closed = True
            if self._scope is not None:
                self._scope.cancel()
            self.loading = False


class SavedJobsListing:
    """Full job records for the bookmarked ids."""

    def __init__(self, jobs_api: JobsApi, saved_jobs: SavedJobs) -> None:
        self.api = jobs_api
        self.saved_jobs = saved_jobs
        self.jobs: list[Job] = []
        self.missing: list[str] = []
        self.error: str | None = None

    def fetch(self) -> list[Job]:
        jobs: list[Job] = []
        missing: list[str] = []
        failed = 0
        for job_id in list(self.saved_jobs.saved_ids):
            try:
                jobs.append(self.api.get_job(job_id))
            except ApiError as exc:
                if exc.status == 404:
                    missing.append(job_id)
                else:
                    failed += 1
                    log.warning("Could not load saved job %s: %s", job_id, exc)
        if missing:
            log.info("Dropping %d saved jobs the backend no longer has", len(missing))
        self.jobs, self.missing = jobs, missing
        self.error = f"{failed} saved jobs could not be loaded" if failed else None
        return jobs

    def cards(self, text: str = "", origin: str | None = None, now: datetime | None = None) -> list[JobCard]:
        return [build_card(j, self.saved_jobs, origin, now) for j in filter_jobs(self.jobs, text)]


def category_counts(jobs_api: JobsApi) -> dict[str, int]:
    """Active jobs per category, keyed by category value. Empty when the stats call fails."""
    try:
        stats = jobs_api.category_stats()
    except ApiError as exc:
        log.warning("Category stats unavailable: %s", exc)
        return {}
    counts = {
        str(item["_id"]): item["count"]
        for item in stats
        if isinstance(item, dict) and item.get("_id") and isinstance(item.get("count"), int)
    }
    log.debug("Category stats: %s", counts)
    return counts
