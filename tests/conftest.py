"""
Shared fixtures.

The HTTP layer is faked by handing ApiClient a MagicMock session; higher
layers get MagicMock API objects with the same method names.
"""
from __future__ import annotations

import os

os.environ.setdefault("JOBQUEST_LOG_FILE", "0")

import json
from unittest.mock import MagicMock

import pytest
import requests

from jobquest.api import ApiClient, connect
from jobquest.auth import AuthSession
from jobquest.models import Job, User
from jobquest.saved_jobs import SavedJobs
from jobquest.storage import LocalStore


def make_response(status: int = 200, body=None, text: str | None = None) -> MagicMock:
    """A requests.Response stand-in with the attributes ApiClient reads."""
    r = MagicMock(spec=requests.Response)
    r.status_code = status
    if text is None:
        text = "" if body is None else json.dumps(body)
    r.text = text
    r.content = text.encode("utf-8")
    if body is None and text:
        r.json.side_effect = ValueError("not json")
    elif body is None:
        r.json.side_effect = ValueError("empty")
    else:
        r.json.return_value = body
    return r


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "local_storage.json")


@pytest.fixture
def session():
    s = MagicMock(spec=requests.Session)
    s.request.return_value = make_response(200, {})
    return s


@pytest.fixture
def client(store, session):
    return ApiClient(base_url="http://api.test", store=store, timeout=5, session=session)


@pytest.fixture
def backend(store, session):
    return connect(base_url="http://api.test", store=store, session=session)


@pytest.fixture
def no_sleep(mocker):
    return mocker.patch("jobquest.retry.time.sleep")


@pytest.fixture
def member():
    return User(id="u1", email="ada@example.com", first_name="Ada", last_name="Lovelace",
                phone="555-0100", has_profile=True)


@pytest.fixture
def admin_user():
    return User(id="a1", email="root@example.com", first_name="Root", last_name="Admin", role="admin")


@pytest.fixture
def auth_api():
    return MagicMock()


@pytest.fixture
def auth(auth_api, client):
    session = AuthSession(auth_api, client)
    session.loading = False
    return session


@pytest.fixture
def users_api():
    api = MagicMock()
    api.saved_jobs.return_value = []
    return api


@pytest.fixture
def saved_jobs(auth, users_api, store):
    return SavedJobs(auth, users_api, store)


@pytest.fixture
def job():
    return Job(
        id="j1",
        title="Backend Engineer",
        company="Acme",
        location="Berlin",
        job_type="full-time",
        link="jobs@acme.test",
        created_at="2026-10-01T09:00:00Z",
        deadline="2026-10-25T23:59:00Z",
        skills=["python", "postgres"],
    )


@pytest.fixture
def job_no_contact():
    return Job(id="j2", title="Designer", company="Studio", location="Remote")


def sign_in(auth: AuthSession, user: User) -> None:
    """Put ``user`` in the session the way a login would."""
    auth._set_user(user)
