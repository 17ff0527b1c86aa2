"""Subject and body text for application e-mails."""
from __future__ import annotations

from jobquest.models import Job, User

NO_EMAIL_PLACEHOLDER = "Email not available"
SIGNATURE_PLACEHOLDER = "[Your Name]"


def application_subject(job: Job) -> str:
    return f"Application for {job.title} position"


def _letter(job: Job, details: list[str], signature: str) -> str:
    lines = [
        "Dear Hiring Manager,",
        "",
        f"I am writing to express my interest in the {job.title} position at {job.company}.",
        "",
    ]
    if details:
        lines += ["My contact details:", *details, ""]
    else:
        lines += [
            "I have attached my resume and cover letter for your review.",
            "",
        ]
    lines += [
        "I would welcome the opportunity to discuss how my skills and experience align with your needs.",
        "",
        "Thank you for your consideration.",
        "",
        "Best regards,",
        signature,
    ]
    return "\n".join(lines)


def guest_letter(job: Job, first_name: str, last_name: str, email: str, phone: str = "") -> str:
    name = f"{first_name} {last_name}".strip()
    details = [f"Name: {name}", f"Email: {email}", f"Phone: {phone}"]
    return _letter(job, details, name)


def member_letter(job: Job, user: User | None) -> str:
    """Body for a signed-in member; falls back to a placeholder signature."""
    if user is None:
        return _letter(job, [], SIGNATURE_PLACEHOLDER)
    details = []
    if user.full_name:
        details.append(f"Name: {user.full_name}")
    if user.email:
        details.append(f"Email: {user.email}")
    if user.phone:
        details.append(f"Phone: {user.phone}")
    return _letter(job, details, user.full_name or SIGNATURE_PLACEHOLDER)


def contact_summary(job: Job) -> str:
    """Text the member "Copy Email" action puts on the clipboard."""
    return (
        f"Job Title: {job.title}\n"
        f"Company: {job.company}\n"
        f"Email: {job.contact or NO_EMAIL_PLACEHOLDER}"
    )
