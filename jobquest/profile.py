"""Profile create/edit and resume links."""
from __future__ import annotations

import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from jobquest.api import UsersApi
from jobquest.auth import AuthSession
from jobquest.errors import ApiError, PermissionDenied, ValidationError
from jobquest.log import get_logger
from jobquest.models import User
from jobquest.notices import Banner, SIGN_IN_FOR_PROFILE, sign_in_banner
from jobquest.share import asset_base_url

log = get_logger(__name__)

EXPERIENCE_OPTIONS: dict[str, str] = {
    "entry": "Entry Level (0-2 years)",
    "mid": "Mid Level (3-5 years)",
    "senior": "Senior Level (6-10 years)",
    "executive": "Executive (10+ years)",
}


def parse_skills(text: str) -> list[str]:
    return [s.strip() for s in (text or "").split(",") if s.strip()]


def resume_url(filename: str | None, base: str | None = None) -> str | None:
    """Download URL for a stored resume: absolute URL, stored path or bare file name."""
    if not filename:
        return None
    if re.match(r"^https?://", filename, re.IGNORECASE):
        return filename
    base = (base or asset_base_url()).rstrip("/")
    if "uploads\\resumes\\" in filename or "uploads/resumes/" in filename:
        clean = filename.replace("\\", "/").lstrip("/")
        return f"{base}/{clean}"
    return f"{base}/uploads/resumes/{filename}"


@dataclass
class ProfileForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    experience: str = ""
    skills: str = ""
    bio: str = ""

    @classmethod
    def from_user(cls, user: User) -> "ProfileForm":
        return cls(
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            phone=user.phone,
            location=user.location,
            experience=user.experience,
            skills=", ".join(user.skills),
            bio=user.bio,
        )

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.first_name.strip():
            errors["first_name"] = "First name is required"
        if not self.last_name.strip():
            errors["last_name"] = "Last name is required"
        if not self.email.strip():
            errors["email"] = "Email is required"
        return errors

    def to_multipart(self) -> list[tuple[str, str]]:
        """Form pairs; empty fields are left out and skills repeat as ``skills[]``."""
        pairs = [
            ("firstName", self.first_name),
            ("lastName", self.last_name),
            ("email", self.email),
            ("phone", self.phone),
            ("location", self.location),
            ("experience", self.experience),
            ("bio", self.bio),
        ]
        data = [(k, v.strip()) for k, v in pairs if v and v.strip()]
        data += [("skills[]", s) for s in parse_skills(self.skills)]
        return data


def resume_file(name: str, content: bytes | BinaryIO) -> dict:
    mime = mimetypes.guess_type(name)[0] or "application/octet-stream"
    return {"resume": (Path(name).name, content, mime)}


class ProfileEditor:
    def __init__(self, users: UsersApi, auth: AuthSession) -> None:
        self.users = users
        self.auth = auth
        self.error: str | None = None

    def open(self, now: float | None = None) -> ProfileForm | Banner:
        """Form prefilled from the user, or the sign-in banner for guests."""
        user = self.auth.user
        if user is None:
            return sign_in_banner(SIGN_IN_FOR_PROFILE, now=now)
        return ProfileForm.from_user(user)

    def save(self, form: ProfileForm, resume: dict | None = None) -> User:
        if self.auth.user is None:
            raise PermissionDenied(SIGN_IN_FOR_PROFILE)
        errors = form.validate()
        if errors:
            raise ValidationError(errors)
        try:
            data = self.users.update_profile(form.to_multipart(), files=resume)
        except ApiError as exc:
            log.error("Profile update failed: %s", exc)
            self.error = "Failed to save profile. Please try again."
            raise
        updated = User.from_api(data or {})
        self.auth.update_user(
            first_name=updated.first_name,
            last_name=updated.last_name,
            email=updated.email or self.auth.user.email,
            phone=updated.phone,
            location=updated.location,
            bio=updated.bio,
            skills=updated.skills,
            experience=updated.experience,
            resume=updated.resume,
            has_profile=updated.has_profile,
        )
        self.error = None
        log.info("Profile saved for %s (complete=%s)", self.auth.user.email, updated.has_profile)
        return self.auth.user
