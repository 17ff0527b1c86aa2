"""Apply dialog for one job: guest form or member e-mail compose.

    IDLE --apply--> GUEST_FORM --submit ok--> SUBMITTED_GUEST --0.8s--> EMAIL_CHOICE | CLOSED
         \\-------> COMPOSE_CHOICE --provider--> CLOSED

``close()`` ends the flow from any state. A guest application that already
reached the backend stays submitted.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from enum import Enum

from jobquest.api import ApplicationsApi, GuestApplicationsApi
from jobquest.auth import AuthSession
from jobquest.config import load_settings
from jobquest.errors import ApiError
from jobquest.letters import (
    NO_EMAIL_PLACEHOLDER,
    application_subject,
    contact_summary,
    guest_letter,
    member_letter,
)
from jobquest.log import get_logger
from jobquest.models import Job
from jobquest.share import Provider, compose_url

log = get_logger(__name__)

NO_CONTACT_NOTICE = "No contact email found for this job. Please contact the company directly."
MISSING_FIELDS = "Please fill in all required fields."


class ApplyState(str, Enum):
    IDLE = "idle"
    GUEST_FORM = "guest_form"
    SUBMITTED_GUEST = "submitted_guest"
    COMPOSE_CHOICE = "compose_choice"
    EMAIL_CHOICE = "email_choice"
    CLOSED = "closed"


@dataclass
class GuestForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    cover_letter: str = ""

    def missing(self) -> list[str]:
        required = {"first_name": self.first_name, "last_name": self.last_name, "email": self.email}
        return [name for name, value in required.items() if not value.strip()]

    def payload(self, job: Job) -> dict:
        return {
            "firstName": self.first_name.strip(),
            "lastName": self.last_name.strip(),
            "email": self.email.strip(),
            "phone": self.phone.strip(),
            "coverLetter": self.cover_letter,
            "jobId": job.id,
            "jobTitle": job.title,
            "companyName": job.company,
        }


@dataclass
class ComposeResult:
    url: str | None
    recorded: bool = False
    error: str | None = None
    notice: str | None = None


class ApplicationFlow:
    def __init__(
        self,
        job: Job,
        auth: AuthSession,
        guest_api: GuestApplicationsApi,
        applications_api: ApplicationsApi,
        follow_up_seconds: float | None = None,
    ) -> None:
        self.job = job
        self.auth = auth
        self.guest_api = guest_api
        self.applications_api = applications_api
        if follow_up_seconds is None:
            follow_up_seconds = float(load_settings().get("guest_follow_up_seconds", 0.8))
        self.follow_up_seconds = follow_up_seconds

        self.state = ApplyState.IDLE
        self.error: str | None = None
        self.field_errors: list[str] = []
        self.submitting = False
        self.submitted_at: float | None = None
        self.guest: GuestForm | None = None
        self._lock = threading.Lock()

    # ── derived ────────────────────────────────────────────────────────

    @property
    def has_contact(self) -> bool:
        return self.job.contact is not None

    @property
    def providers_enabled(self) -> bool:
        return self.has_contact

    @property
    def notice(self) -> str | None:
        if self.state in (ApplyState.COMPOSE_CHOICE, ApplyState.EMAIL_CHOICE) and not self.has_contact:
            return NO_CONTACT_NOTICE
        return None

    # ── transitions ────────────────────────────────────────────────────

    def click_apply(self) -> ApplyState:
        if self.state not in (ApplyState.IDLE, ApplyState.CLOSED):
            return self.state
        self.error = None
        self.state = ApplyState.GUEST_FORM if self.auth.user is None else ApplyState.COMPOSE_CHOICE
        log.debug("Apply clicked for %s -> %s", self.job.id, self.state.value)
        return self.state

    def submit_guest(self, form: GuestForm, now: float | None = None) -> bool:
        """Send the guest application. Returns True once the backend accepted it."""
        if self.state is not ApplyState.GUEST_FORM:
            log.warning("Guest submit ignored in state %s", self.state.value)
            return False

        self.field_errors = form.missing()
        if self.field_errors:
            self.error = MISSING_FIELDS
            return False

        self.error = None
        self.submitting = True
        try:
            self.guest_api.submit(form.payload(self.job))
        except ApiError as exc:
            log.error("Guest application for %s failed: %s", self.job.id, exc)
            with self._lock:
                if self.state is ApplyState.GUEST_FORM:
                    self.error = exc.message
            return False
        finally:
            self.submitting = False

        with self._lock:
            if self.state is not ApplyState.GUEST_FORM:
                log.info("Guest application for %s sent after the dialog closed", self.job.id)
                return True
            self.guest = form
            self.submitted_at = time.monotonic() if now is None else now
            self.state = ApplyState.SUBMITTED_GUEST
        log.info("Guest application submitted for %s by %s", self.job.id, form.email.strip())
        return True

    def tick(self, now: float | None = None) -> ApplyState:
        """Advance out of SUBMITTED_GUEST once the follow-up delay has passed."""
        with self._lock:
            if self.state is ApplyState.SUBMITTED_GUEST and self.submitted_at is not None:
                now = time.monotonic() if now is None else now
                if now - self.submitted_at >= self.follow_up_seconds:
                    self.state = ApplyState.EMAIL_CHOICE if self.has_contact else ApplyState.CLOSED
            return self.state

    def _letter(self) -> str:
        if self.guest is not None:
            g = self.guest
            return guest_letter(self.job, g.first_name.strip(), g.last_name.strip(), g.email.strip(), g.phone.strip())
        return member_letter(self.job, self.auth.user)

    def choose_provider(self, provider: Provider | str) -> ComposeResult:
        provider = Provider(provider)
        if self.state not in (ApplyState.COMPOSE_CHOICE, ApplyState.EMAIL_CHOICE):
            return ComposeResult(url=None, error=f"Cannot compose in state {self.state.value}")
        contact = self.job.contact
        if contact is None:
            return ComposeResult(url=None, notice=NO_CONTACT_NOTICE)

        subject = application_subject(self.job)
        body = self._letter()
        url = compose_url(provider, contact, subject, body)

        recorded = False
        if self.state is ApplyState.COMPOSE_CHOICE and self.auth.user is not None:
            try:
                self.applications_api.create(self.job.id, provider.value, contact, subject, body)
                recorded = True
                log.info("Recorded %s application for %s", provider.value, self.job.id)
            except ApiError as exc:
                if exc.mentions("already applied"):
                    log.info("Already applied for %s", self.job.id)
                    recorded = True
                else:
                    log.error("Recording application for %s failed: %s", self.job.id, exc)
                    self.error = exc.message
                    return ComposeResult(url=url, recorded=False, error=exc.message)

        self.error = None
        self.state = ApplyState.CLOSED
        return ComposeResult(url=url, recorded=recorded)

    def copy_email_text(self) -> str:
        """Clipboard text for "Copy Email"; a placeholder when the job has no contact."""
        return self.job.contact or NO_EMAIL_PLACEHOLDER

    def copy_details_text(self) -> str:
        return contact_summary(self.job)

    def request_signup(self) -> ApplyState:
        log.debug("Guest chose to sign up instead of applying to %s", self.job.id)
        return self.close()

    def close(self) -> ApplyState:
        with self._lock:
            self.state = ApplyState.CLOSED
            self.error = None
        return self.state
