"""Tests for record parsing, letters, banners and settings."""
from __future__ import annotations

import pytest

from jobquest import config
from jobquest.letters import application_subject, guest_letter, member_letter
from jobquest.models import AdminPermissions, Job, JobPage, User
from jobquest.notices import Banner, live_banner, sign_in_banner


class TestJob:
    def test_company_shapes(self):
        assert Job.from_api({"_id": "1", "company": {"name": "Acme"}}).company == "Acme"
        assert Job.from_api({"id": 2, "Company": "Beta"}).company == "Beta"
        assert Job.from_api({"_id": "3", "companyName": "Gamma"}).company == "Gamma"

    def test_contact_and_image(self):
        job = Job.from_api({"_id": "1", "link": "  ", "image": {"path": "/uploads/jobs/x.png"}})
        assert job.contact is None
        assert job.image_url == "/uploads/jobs/x.png"
        assert Job.from_api({"_id": "1", "link": " hr@a.io "}).contact == "hr@a.io"

    def test_salary_and_lists(self):
        job = Job.from_api({"_id": "1", "salary": {"min": "1000", "max": None, "currency": "EUR"},
                            "skills": ["py", "", None], "requirements": "one"})
        assert (job.salary.min, job.salary.max, job.salary.currency) == (1000.0, None, "EUR")
        assert job.skills == ["py"]
        assert job.requirements == ["one"]

    def test_page_total_fallbacks(self):
        assert JobPage.from_api({"jobs": [{"_id": "1"}], "totalJobs": 40}).total == 40
        assert JobPage.from_api({"jobs": [{"_id": "1"}]}, page=3).total == 1
        assert JobPage.from_api({"jobs": [], "currentPage": 2}).page == 2


class TestUser:
    def test_roles(self):
        assert User.from_api({"_id": "1", "role": "super_admin"}).is_admin
        assert not User.from_api({"_id": "1"}).is_admin

    def test_permissions(self):
        perms = AdminPermissions.from_api({"canChangeRoles": True, "canManageJobs": True})
        assert perms.can_change_roles and perms.can_manage_jobs and not perms.can_manage_users


class TestLetters:
    def test_subject(self, job):
        assert application_subject(job) == "Application for Backend Engineer position"

    def test_guest_letter(self, job):
        body = guest_letter(job, "Grace", "Hopper", "g@navy.mil")
        assert "position at Acme" in body
        assert "Name: Grace Hopper\nEmail: g@navy.mil\nPhone: " in body
        assert body.endswith("Best regards,\nGrace Hopper")

    def test_member_letter(self, job, member):
        body = member_letter(job, member)
        assert "Phone: 555-0100" in body
        assert body.endswith("Ada Lovelace")

    def test_member_letter_without_user(self, job):
        body = member_letter(job, None)
        assert "attached my resume" in body
        assert body.endswith("[Your Name]")


class TestBanner:
    def test_expires(self):
        banner = Banner("hi", shown_at=0.0, duration=5.0)
        assert banner.visible(now=4.9)
        assert not banner.visible(now=5.0)

    def test_dismiss(self):
        banner = sign_in_banner(now=0.0, duration=5.0)
        banner.dismiss()
        assert not banner.visible(now=1.0)
        assert banner.kind == "warning"

    def test_live_banner_drops_expired(self):
        state = {"banner": Banner("hi", shown_at=0.0, duration=5.0)}
        assert live_banner(state, now=4.0) is state["banner"]
        assert live_banner(state, now=5.0) is None
        assert "banner" not in state

    def test_live_banner_drops_dismissed(self):
        banner = Banner("hi", shown_at=0.0)
        banner.dismiss()
        state = {"banner": banner}
        assert live_banner(state, now=1.0) is None and state == {}
        assert live_banner({}) is None


class TestConfig:
    def test_api_base_url_strips_api(self, monkeypatch):
        monkeypatch.setenv("JOBQUEST_API_URL", "https://api.jq.io/api/")
        assert config.api_base_url() == "https://api.jq.io"

    def test_site_origin(self, monkeypatch):
        monkeypatch.setenv("JOBQUEST_SITE_ORIGIN", "https://jq.io/")
        assert config.site_origin() == "https://jq.io"

    def test_bad_timeout_falls_back(self, monkeypatch):
        monkeypatch.setenv("JOBQUEST_HTTP_TIMEOUT", "soon")
        assert config.http_timeout() == 15.0

    def test_settings_merge(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("page_size:\n  search: 25\nbanner_seconds: 2\n", encoding="utf-8")
        settings = config.load_settings(path)
        assert settings["page_size"]["search"] == 25
        assert settings["page_size"]["all_jobs"] == 12
        assert settings["banner_seconds"] == 2

    @pytest.mark.parametrize("content", ["", "- a\n- b\n"])
    def test_settings_empty_or_wrong_shape(self, tmp_path, content):
        path = tmp_path / "settings.yaml"
        path.write_text(content, encoding="utf-8")
        assert config.load_settings(path) == config.DEFAULT_SETTINGS

    def test_missing_settings_file(self, tmp_path):
        assert config.load_settings(tmp_path / "nope.yaml") == config.DEFAULT_SETTINGS
