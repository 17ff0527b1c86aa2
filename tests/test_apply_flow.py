"""Tests for the apply dialog state machine."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import sign_in
from jobquest.apply_flow import (
    MISSING_FIELDS,
    NO_CONTACT_NOTICE,
    ApplicationFlow,
    ApplyState,
    GuestForm,
)
from jobquest.errors import ApiError
from jobquest.letters import NO_EMAIL_PLACEHOLDER
from jobquest.share import Provider


@pytest.fixture
def guest_api():
    return MagicMock()


@pytest.fixture
def applications_api():
    return MagicMock()


@pytest.fixture
def make_flow(auth, guest_api, applications_api):
    def _make(job):
        return ApplicationFlow(job, auth, guest_api, applications_api, follow_up_seconds=0.8)
    return _make


def _guest_form():
    return GuestForm(first_name="Grace", last_name="Hopper", email="grace@navy.mil", phone="123")


class TestGuestPath:
    def test_apply_opens_guest_form(self, make_flow, job):
        flow = make_flow(job)
        assert flow.click_apply() is ApplyState.GUEST_FORM

    def test_missing_fields_block_submit(self, make_flow, job, guest_api):
        flow = make_flow(job)
        flow.click_apply()
        assert flow.submit_guest(GuestForm(first_name="A", email=" ")) is False
        assert flow.error == MISSING_FIELDS
        assert flow.field_errors == ["last_name", "email"]
        guest_api.submit.assert_not_called()
        assert flow.state is ApplyState.GUEST_FORM

    def test_submit_sends_payload(self, make_flow, job, guest_api):
        flow = make_flow(job)
        flow.click_apply()
        assert flow.submit_guest(_guest_form(), now=10.0)
        payload = guest_api.submit.call_args.args[0]
        assert payload["jobId"] == "j1"
        assert payload["jobTitle"] == "Backend Engineer"
        assert payload["companyName"] == "Acme"
        assert flow.state is ApplyState.SUBMITTED_GUEST

    def test_follow_up_offers_email_when_job_has_contact(self, make_flow, job):
        flow = make_flow(job)
        flow.click_apply()
        flow.submit_guest(_guest_form(), now=10.0)
        assert flow.tick(now=10.5) is ApplyState.SUBMITTED_GUEST
        assert flow.tick(now=10.8) is ApplyState.EMAIL_CHOICE

    def test_follow_up_closes_without_contact(self, make_flow, job_no_contact):
        flow = make_flow(job_no_contact)
        flow.click_apply()
        flow.submit_guest(_guest_form(), now=0.0)
        assert flow.tick(now=1.0) is ApplyState.CLOSED

    def test_backend_error_stays_on_form(self, make_flow, job, guest_api):
        guest_api.submit.side_effect = ApiError("You have already applied for this job", status=400)
        flow = make_flow(job)
        flow.click_apply()
        assert flow.submit_guest(_guest_form()) is False
        assert flow.error == "You have already applied for this job"
        assert flow.state is ApplyState.GUEST_FORM
        assert not flow.submitting

    def test_close_during_submit_keeps_dialog_closed(self, make_flow, job, guest_api):
        flow = make_flow(job)
        flow.click_apply()
        guest_api.submit.side_effect = lambda payload: flow.close()
        assert flow.submit_guest(_guest_form()) is True
        assert flow.state is ApplyState.CLOSED

    def test_guest_email_uses_guest_details(self, make_flow, job):
        flow = make_flow(job)
        flow.click_apply()
        flow.submit_guest(_guest_form(), now=0.0)
        flow.tick(now=1.0)
        result = flow.choose_provider(Provider.EMAIL_CLIENT)
        assert result.url.startswith("mailto:jobs@acme.test?subject=Application%20for%20Backend%20Engineer")
        assert "Grace%20Hopper" in result.url
        assert result.recorded is False
        assert flow.state is ApplyState.CLOSED

    def test_request_signup_closes(self, make_flow, job):
        flow = make_flow(job)
        flow.click_apply()
        assert flow.request_signup() is ApplyState.CLOSED


class TestMemberPath:
    def test_apply_opens_compose_choice(self, auth, make_flow, job, member):
        sign_in(auth, member)
        assert make_flow(job).click_apply() is ApplyState.COMPOSE_CHOICE

    def test_choose_provider_records_application(self, auth, make_flow, job, member, applications_api):
        sign_in(auth, member)
        flow = make_flow(job)
        flow.click_apply()
        result = flow.choose_provider("gmail")
        assert result.recorded and result.error is None
        assert result.url.startswith("https://mail.google.com/mail/?view=cm&fs=1&to=jobs%40acme.test")
        args = applications_api.create.call_args.args
        assert args[:3] == ("j1", "gmail", "jobs@acme.test")
        assert args[3] == "Application for Backend Engineer position"
        assert "Ada Lovelace" in args[4]
        assert flow.state is ApplyState.CLOSED

    def test_already_applied_counts_as_recorded(self, auth, make_flow, job, member, applications_api):
        sign_in(auth, member)
        applications_api.create.side_effect = ApiError("You have already applied to this job", status=400)
        flow = make_flow(job)
        flow.click_apply()
        result = flow.choose_provider(Provider.OUTLOOK)
        assert result.recorded
        assert flow.state is ApplyState.CLOSED

    def test_record_failure_keeps_dialog_open(self, auth, make_flow, job, member, applications_api):
        sign_in(auth, member)
        applications_api.create.side_effect = ApiError("Server error", status=500)
        flow = make_flow(job)
        flow.click_apply()
        result = flow.choose_provider(Provider.GMAIL)
        assert result.error == "Server error"
        assert result.url is not None
        assert flow.state is ApplyState.COMPOSE_CHOICE
        assert flow.error == "Server error"

    def test_no_contact_disables_providers(self, auth, make_flow, job_no_contact, member, applications_api):
        sign_in(auth, member)
        flow = make_flow(job_no_contact)
        flow.click_apply()
        assert not flow.providers_enabled
        assert flow.notice == NO_CONTACT_NOTICE
        result = flow.choose_provider(Provider.GMAIL)
        assert result.url is None and result.notice == NO_CONTACT_NOTICE
        applications_api.create.assert_not_called()

    def test_copy_email_text(self, make_flow, job, job_no_contact):
        assert make_flow(job).copy_email_text() == "jobs@acme.test"
        assert make_flow(job_no_contact).copy_email_text() == NO_EMAIL_PLACEHOLDER

    def test_copy_details_text(self, make_flow, job):
        assert make_flow(job).copy_details_text() == (
            "Job Title: Backend Engineer\nCompany: Acme\nEmail: jobs@acme.test"
        )


class TestGuards:
    def test_provider_outside_choice_state(self, make_flow, job):
        result = make_flow(job).choose_provider(Provider.GMAIL)
        assert result.url is None and "idle" in result.error

    def test_submit_outside_form_is_ignored(self, make_flow, job, guest_api):
        assert make_flow(job).submit_guest(_guest_form()) is False
        guest_api.submit.assert_not_called()

    def test_apply_twice_keeps_state(self, make_flow, job):
        flow = make_flow(job)
        flow.click_apply()
        assert flow.click_apply() is ApplyState.GUEST_FORM
