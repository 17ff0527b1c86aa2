"""Contact-us form and newsletter sign-up."""
from __future__ import annotations

import re
from dataclasses import dataclass

from jobquest.api import ContactApi, NewsletterApi
from jobquest.errors import ValidationError
from jobquest.log import get_logger

log = get_logger(__name__)

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
DEFAULT_SENT_MESSAGE = "Your message has been sent successfully. We will get back to you soon!"


@dataclass
class ContactForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    subject: str = ""
    message: str = ""

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        for name, label in (("first_name", "First name"), ("last_name", "Last name"),
                            ("email", "Email"), ("subject", "Subject"), ("message", "Message")):
            if not getattr(self, name).strip():
                errors[name] = f"{label} is required"
        return errors

    def payload(self) -> dict:
        return {
            "firstName": self.first_name.strip(),
            "lastName": self.last_name.strip(),
            "email": self.email.strip(),
            "phone": self.phone.strip(),
            "subject": self.subject.strip(),
            "message": self.message.strip(),
        }


def submit_contact(api: ContactApi, form: ContactForm) -> str:
    """Send the form; returns the backend's confirmation text."""
    errors = form.validate()
    if errors:
        raise ValidationError(errors)
    data = api.submit(form.payload())
    log.info("Contact message sent from %s", form.email.strip())
    return (data or {}).get("message") or DEFAULT_SENT_MESSAGE


def subscribe_newsletter(api: NewsletterApi, email: str) -> str:
    email = email.strip()
    if not email:
        raise ValidationError({"email": "Email is required"})
    if not _EMAIL_RE.search(email):
        raise ValidationError({"email": "Please enter a valid email address"})
    data = api.subscribe(email)
    log.info("Subscribed %s to the newsletter", email)
    return (data or {}).get("message") or "Successfully subscribed to newsletter!"
