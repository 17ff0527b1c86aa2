"""Share links, webmail compose links and clipboard copy."""
from __future__ import annotations

import re
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

import requests

from jobquest.config import api_base_url, site_origin
from jobquest.log import get_logger
from jobquest.models import Job

log = get_logger(__name__)

# (command, args) tried in order until one is installed
_CLIPBOARD_COMMANDS: list[list[str]] = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
]


def encode_component(value: str) -> str:
    """Percent-encode like the browser's encodeURIComponent."""
    return quote(value, safe="-_.!~*'()")


def job_url(job_id: str, origin: str | None = None) -> str:
    return f"{(origin or site_origin()).rstrip('/')}/job/{job_id}"


@dataclass(frozen=True)
class ShareLinks:
    url: str
    email: str
    linkedin: str
    twitter: str
    whatsapp: str


def share_links(job: Job, origin: str | None = None) -> ShareLinks:
    url = job_url(job.id, origin)

    subject = f"Check out this job: {job.title}"
    body = (
        "I found this job opportunity that might interest you:\n\n"
        f"{job.title} at {job.company}\nLocation: {job.location}\n\n{url}"
    )
    linkedin_title = f"Check out this job opportunity: {job.title} at {job.company}"
    tweet = f"🔍 Job Alert: {job.title} at {job.company} in {job.location}"
    whatsapp = f"Check out this job: {job.title} at {job.company}\n{url}"

    return ShareLinks(
        url=url,
        email=f"mailto:?subject={encode_component(subject)}&body={encode_component(body)}",
        linkedin=(
            "https://www.linkedin.com/sharing/share-offsite/"
            f"?url={encode_component(url)}&title={encode_component(linkedin_title)}"
        ),
        twitter=f"https://twitter.com/intent/tweet?text={encode_component(tweet)}&url={encode_component(url)}",
        whatsapp=f"https://wa.me/?text={encode_component(whatsapp)}",
    )


class Provider(str, Enum):
    GMAIL = "gmail"
    OUTLOOK = "outlook"
    EMAIL_CLIENT = "email_client"

    @property
    def label(self) -> str:
        return {"gmail": "Gmail", "outlook": "Outlook", "email_client": "Email app"}[self.value]


def compose_url(provider: Provider, to: str, subject: str, body: str) -> str:
    s, b = encode_component(subject), encode_component(body)
    if provider is Provider.GMAIL:
        return f"https://mail.google.com/mail/?view=cm&fs=1&to={encode_component(to)}&subject={s}&body={b}"
    if provider is Provider.OUTLOOK:
        return f"https://outlook.live.com/mail/0/deeplink/compose?to={encode_component(to)}&subject={s}&body={b}"
    return f"mailto:{to}?subject={s}&body={b}"


def copy_to_clipboard(text: str) -> bool:
    """Put ``text`` on the system clipboard.

    Returns False when no clipboard tool is available or it fails, so the
    caller can show the text for a manual copy instead.
    """
    for cmd in _CLIPBOARD_COMMANDS:
        if shutil.which(cmd[0]) is None:
            continue
        try:
            proc = subprocess.run(cmd, input=text, text=True, capture_output=True, timeout=5)
        except (subprocess.TimeoutExpired, OSError) as exc:
            log.warning("Clipboard command %s failed: %s", cmd[0], exc)
            continue
        if proc.returncode == 0:
            log.debug("Copied %d chars with %s", len(text), cmd[0])
            return True
        log.warning("Clipboard command %s exited %d", cmd[0], proc.returncode)
    return False


def copy_locally(text: str, enabled: bool) -> bool:
    """Server-side copy, tried only when the session runs on the server machine."""
    return enabled and copy_to_clipboard(text)


# ── job poster ────────────────────────────────────────────────────────────


def asset_base_url() -> str:
    return api_base_url()


def poster_url(image: str | None, base: str | None = None) -> str | None:
    """Absolute URL for a stored poster path (``/uploads/jobs/...``) or bare file name."""
    if not image:
        return None
    if re.match(r"^https?://", image, re.IGNORECASE):
        return image
    base = (base or asset_base_url()).rstrip("/")
    if "/" in image:
        return f"{base}/{image.lstrip('/')}"
    return f"{base}/api/uploads/jobs/{image}"


def fetch_poster(url: str, timeout: float = 15) -> bytes:
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    return r.content


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", value, flags=re.IGNORECASE).lower()


def poster_filename(job: Job, image: str | None = None) -> str:
    image = image or job.image_url or ""
    name = image.rsplit("/", 1)[-1]
    extension = name.rsplit(".", 1)[-1] if "." in name else "jpg"
    return f"{_slug(job.title)}_{_slug(job.company or 'company')}_job_poster.{extension}"
