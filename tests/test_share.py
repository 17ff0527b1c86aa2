"""Tests for share links, compose URLs, posters and clipboard copy."""
from __future__ import annotations

import subprocess
from unittest.mock import MagicMock

import pytest

from jobquest.models import Job
from jobquest.share import (
    Provider,
    compose_url,
    copy_locally,
    copy_to_clipboard,
    encode_component,
    fetch_poster,
    job_url,
    poster_filename,
    poster_url,
    share_links,
)


class TestEncoding:
    def test_keeps_unreserved_marks(self):
        assert encode_component("a-b_c.d!e~f*g'h(i)") == "a-b_c.d!e~f*g'h(i)"

    def test_escapes_reserved(self):
        assert encode_component("a b&c/d?e=f") == "a%20b%26c%2Fd%3Fe%3Df"

    def test_utf8(self):
        assert encode_component("🔍") == "%F0%9F%94%8D"


class TestShareLinks:
    """Each link embeds the canonical job URL."""

    def test_job_url(self):
        assert job_url("42", "https://jobquest.example/") == "https://jobquest.example/job/42"

    def test_links(self, job):
        links = share_links(job, "https://jq.io")
        url = "https://jq.io/job/j1"
        assert links.url == url
        assert links.email.startswith("mailto:?subject=Check%20out%20this%20job%3A%20Backend%20Engineer&body=")
        assert encode_component(url) in links.email
        assert links.linkedin == (
            "https://www.linkedin.com/sharing/share-offsite/?url=https%3A%2F%2Fjq.io%2Fjob%2Fj1"
            "&title=" + encode_component("Check out this job opportunity: Backend Engineer at Acme")
        )
        assert links.twitter.startswith("https://twitter.com/intent/tweet?text=%F0%9F%94%8D%20Job%20Alert")
        assert links.twitter.endswith("&url=https%3A%2F%2Fjq.io%2Fjob%2Fj1")
        assert links.whatsapp == "https://wa.me/?text=" + encode_component(
            f"Check out this job: Backend Engineer at Acme\n{url}"
        )


class TestComposeUrl:
    def test_gmail(self):
        url = compose_url(Provider.GMAIL, "hr@a.io", "Hi there", "Line 1\nLine 2")
        assert url == ("https://mail.google.com/mail/?view=cm&fs=1&to=hr%40a.io"
                       "&subject=Hi%20there&body=Line%201%0ALine%202")

    def test_outlook(self):
        url = compose_url(Provider.OUTLOOK, "hr@a.io", "S", "B")
        assert url == "https://outlook.live.com/mail/0/deeplink/compose?to=hr%40a.io&subject=S&body=B"

    def test_mailto_keeps_address_raw(self):
        assert compose_url(Provider.EMAIL_CLIENT, "hr@a.io", "S", "B") == "mailto:hr@a.io?subject=S&body=B"

    def test_provider_from_string(self):
        assert Provider("outlook") is Provider.OUTLOOK
        assert Provider.EMAIL_CLIENT.label == "Email app"


class TestPoster:
    def test_absolute_url_passes_through(self):
        assert poster_url("HTTPS://cdn.io/a.png", "http://api") == "HTTPS://cdn.io/a.png"

    def test_stored_path(self):
        assert poster_url("/uploads/jobs/a.png", "http://api/") == "http://api/uploads/jobs/a.png"

    def test_bare_name(self):
        assert poster_url("a.png", "http://api") == "http://api/api/uploads/jobs/a.png"

    def test_missing(self):
        assert poster_url(None) is None

    def test_filename(self):
        job = Job(id="1", title="Sr. Dev (Remote)", company="Acme & Co")
        assert poster_filename(job, "/uploads/jobs/x.webp") == "sr__dev__remote__acme___co_job_poster.webp"

    def test_filename_default_extension(self):
        assert poster_filename(Job(id="1", title="Dev", company=""), "noext").endswith("_company_job_poster.jpg")

    def test_fetch(self, mocker):
        get = mocker.patch("jobquest.share.requests.get")
        get.return_value.content = b"PNG"
        assert fetch_poster("http://api/a.png", timeout=3) == b"PNG"
        get.assert_called_once_with("http://api/a.png", timeout=3)
        get.return_value.raise_for_status.assert_called_once()


class TestClipboard:
    def test_no_tool_available(self, mocker):
        mocker.patch("jobquest.share.shutil.which", return_value=None)
        run = mocker.patch("jobquest.share.subprocess.run")
        assert copy_to_clipboard("x") is False
        run.assert_not_called()

    def test_first_installed_tool_wins(self, mocker):
        mocker.patch("jobquest.share.shutil.which",
                     side_effect=lambda c: "/usr/bin/xclip" if c == "xclip" else None)
        run = mocker.patch("jobquest.share.subprocess.run", return_value=MagicMock(returncode=0))
        assert copy_to_clipboard("hello") is True
        assert run.call_args.args[0] == ["xclip", "-selection", "clipboard"]
        assert run.call_args.kwargs["input"] == "hello"

    def test_failing_tool_falls_through(self, mocker):
        mocker.patch("jobquest.share.shutil.which", return_value="/bin/tool")
        mocker.patch("jobquest.share.subprocess.run",
                     side_effect=subprocess.TimeoutExpired("pbcopy", 5))
        assert copy_to_clipboard("x") is False

    def test_remote_session_never_touches_server_clipboard(self, mocker):
        run = mocker.patch("jobquest.share.subprocess.run")
        assert copy_locally("x", enabled=False) is False
        run.assert_not_called()

    def test_local_session_copies(self, mocker):
        mocker.patch("jobquest.share.shutil.which", return_value="/usr/bin/pbcopy")
        mocker.patch("jobquest.share.subprocess.run", return_value=MagicMock(returncode=0))
        assert copy_locally("x", enabled=True) is True


@pytest.mark.parametrize("provider", list(Provider))
def test_compose_url_encodes_subject(provider):
    assert "Application%20for" in compose_url(provider, "a@b.c", "Application for X", "")
