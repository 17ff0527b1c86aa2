from dataclasses import dataclass

from .base import ApiClient, ApiResource, RequestScope, clean_params
from .auth import AuthApi
from .jobs import JobsApi
from .users import UsersApi
from .applications import ApplicationsApi
from .guest_applications import GuestApplicationsApi
from .newsletter import NewsletterApi
from .contact import ContactApi
from .admin import AdminApi

from jobquest.log import get_logger
from jobquest.storage import LocalStore

log = get_logger(__name__)

__all__ = [
    "ApiClient", "ApiResource", "RequestScope", "clean_params",
    "AuthApi", "JobsApi", "UsersApi", "ApplicationsApi", "GuestApplicationsApi",
    "NewsletterApi", "ContactApi", "AdminApi",
    "Backend", "connect",
]


@dataclass
class Backend:
    client: ApiClient
    auth: AuthApi
    jobs: JobsApi
    users: UsersApi
    applications: ApplicationsApi
    guest_applications: GuestApplicationsApi
    newsletter: NewsletterApi
    contact: ContactApi
    admin: AdminApi


def connect(base_url: str | None = None, store: LocalStore | None = None, session=None) -> Backend:
    client = ApiClient(base_url=base_url, store=store, session=session)
    log.info("Using JobQuest backend at %s", client.base_url)
    return Backend(
        client=client,
        auth=AuthApi(client),
        jobs=JobsApi(client),
        users=UsersApi(client),
        applications=ApplicationsApi(client),
        guest_applications=GuestApplicationsApi(client),
        newsletter=NewsletterApi(client),
        contact=ContactApi(client),
        admin=AdminApi(client),
    )
