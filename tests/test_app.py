"""Streamlit page runs for the sign-in banner."""
from __future__ import annotations

import time
from unittest.mock import MagicMock

import pytest
from streamlit.testing.v1 import AppTest

from jobquest.notices import SIGN_IN_FOR_PROFILE, SIGN_IN_TO_SAVE, Banner, sign_in_banner


def _profile_page():
    import app

    app._wrap(app.page_profile)()


def _contact_page():
    import app

    app._wrap(app.page_contact)()


@pytest.fixture
def run_page(auth, saved_jobs, users_api):
    """Build an AppTest for a page script with the session services already in place."""

    def build(script) -> AppTest:
        at = AppTest.from_function(script, default_timeout=30)
        at.session_state["backend"] = MagicMock(users=users_api)
        at.session_state["auth"] = auth
        at.session_state["saved_jobs"] = saved_jobs
        return at

    return build


class TestBanner:
    def test_profile_as_guest_with_banner_already_up(self, run_page):
        at = run_page(_profile_page)
        at.session_state["banner"] = sign_in_banner()
        at.run()
        assert not at.exception
        assert [w.value for w in at.warning] == [SIGN_IN_FOR_PROFILE]

    def test_profile_rerun_keeps_one_banner(self, run_page):
        at = run_page(_profile_page)
        at.run()
        at.run()
        assert not at.exception
        assert len(at.warning) == 1

    def test_live_banner_shown_on_any_page(self, run_page):
        at = run_page(_contact_page)
        at.session_state["banner"] = sign_in_banner(SIGN_IN_TO_SAVE)
        at.run()
        assert [w.value for w in at.warning] == [SIGN_IN_TO_SAVE]

    def test_banner_gone_after_duration(self, run_page):
        at = run_page(_contact_page)
        at.session_state["banner"] = Banner(SIGN_IN_TO_SAVE, kind="warning", duration=0.2)
        at.run()
        assert len(at.warning) == 1
        time.sleep(0.3)
        # what the fragment's timer does
        at.run()
        assert not at.warning
        assert "banner" not in at.session_state

    def test_dismiss(self, run_page):
        at = run_page(_contact_page)
        at.session_state["banner"] = sign_in_banner()
        at.run()
        at.button(key="banner_dismiss").click().run()
        assert not at.exception
        assert not at.warning
