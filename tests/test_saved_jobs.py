"""Tests for the shared bookmark set."""
from __future__ import annotations

from unittest.mock import MagicMock

from conftest import sign_in
from jobquest.errors import ApiError
from jobquest.notices import SIGN_IN_TO_SAVE
from jobquest.saved_jobs import BookmarkStatus, cache_key


class TestGuest:
    """Guests never reach the backend."""

    def test_toggle_requires_auth(self, saved_jobs, users_api):
        result = saved_jobs.toggle_bookmark("j1", now=100.0)
        assert result.status is BookmarkStatus.REQUIRES_AUTH
        assert not result.ok
        assert result.banner.message == SIGN_IN_TO_SAVE
        assert result.banner.actions == ("sign_in", "sign_up")
        assert result.banner.visible(now=101.0)
        assert not saved_jobs.is_job_saved("j1")
        users_api.save_job.assert_not_called()

    def test_empty_id_is_never_saved(self, saved_jobs):
        assert not saved_jobs.is_job_saved("")
        assert not saved_jobs.is_job_saved(None)


class TestHydrate:
    def test_sign_in_loads_backend_list(self, auth, saved_jobs, users_api, member, store):
        users_api.saved_jobs.return_value = ["a", "b"]
        sign_in(auth, member)
        assert list(saved_jobs.saved_ids) == ["a", "b"]
        assert store.get(cache_key("u1")) == ["a", "b"]

    def test_backend_failure_keeps_cache(self, auth, saved_jobs, users_api, member, store):
        store.set(cache_key("u1"), ["cached"])
        users_api.saved_jobs.side_effect = ApiError("Network error")
        sign_in(auth, member)
        assert list(saved_jobs.saved_ids) == ["cached"]

    def test_sign_out_clears(self, auth, saved_jobs, users_api, member):
        users_api.saved_jobs.return_value = ["a"]
        sign_in(auth, member)
        auth.logout()
        assert len(saved_jobs) == 0

    def test_subscribers_told_on_change(self, auth, saved_jobs, users_api, member):
        seen = []
        saved_jobs.subscribe(lambda ids: seen.append(sorted(ids)))
        users_api.saved_jobs.return_value = ["x"]
        sign_in(auth, member)
        assert seen[-1] == ["x"]

    def test_unsubscribe(self, saved_jobs):
        callback = MagicMock()
        unsubscribe = saved_jobs.subscribe(callback)
        unsubscribe()
        saved_jobs.hydrate()
        callback.assert_not_called()

    def test_failing_subscriber_does_not_break_others(self, auth, saved_jobs, member):
        good = MagicMock()
        saved_jobs.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        saved_jobs.subscribe(good)
        sign_in(auth, member)
        good.assert_called()


class TestToggle:
    def test_save_then_remove(self, auth, saved_jobs, users_api, member, store):
        sign_in(auth, member)
        assert saved_jobs.toggle_bookmark("j1").status is BookmarkStatus.SAVED
        users_api.save_job.assert_called_once_with("j1")
        assert saved_jobs.is_job_saved("j1")
        assert store.get(cache_key("u1")) == ["j1"]

        assert saved_jobs.toggle_bookmark("j1").status is BookmarkStatus.REMOVED
        users_api.unsave_job.assert_called_once_with("j1")
        assert not saved_jobs.is_job_saved("j1")

    def test_optimistic_update_visible_during_call(self, auth, saved_jobs, users_api, member):
        sign_in(auth, member)
        seen = []
        users_api.save_job.side_effect = lambda job_id: seen.append(saved_jobs.is_job_saved(job_id))
        saved_jobs.toggle_bookmark("j1")
        assert seen == [True]

    def test_failure_rolls_back(self, auth, saved_jobs, users_api, member, store):
        users_api.saved_jobs.return_value = ["keep"]
        sign_in(auth, member)
        users_api.save_job.side_effect = ApiError("Server error", status=500)
        result = saved_jobs.toggle_bookmark("j1")
        assert result.status is BookmarkStatus.FAILED
        assert result.error == "Server error"
        assert list(saved_jobs.saved_ids) == ["keep"]
        assert store.get(cache_key("u1")) == ["keep"]

    def test_already_saved_counts_as_success(self, auth, saved_jobs, users_api, member):
        sign_in(auth, member)
        users_api.save_job.side_effect = ApiError("Job already saved", status=400)
        assert saved_jobs.toggle_bookmark("j1").status is BookmarkStatus.SAVED
        assert saved_jobs.is_job_saved("j1")

    def test_not_in_saved_counts_as_success(self, auth, saved_jobs, users_api, member):
        users_api.saved_jobs.return_value = ["j1"]
        sign_in(auth, member)
        users_api.unsave_job.side_effect = ApiError("Job not in saved list", status=400)
        assert saved_jobs.toggle_bookmark("j1").status is BookmarkStatus.REMOVED
        assert not saved_jobs.is_job_saved("j1")

    def test_saved_ids_is_live_view(self, auth, saved_jobs, member):
        sign_in(auth, member)
        view = saved_jobs.saved_ids
        saved_jobs.toggle_bookmark("j9")
        assert "j9" in view

    def test_subscriber_may_toggle_again(self, auth, saved_jobs, users_api, member):
        sign_in(auth, member)
        calls = []

        def follow_up(ids):
            if not calls:
                calls.append(list(ids))
                saved_jobs.toggle_bookmark("j2")

        saved_jobs.subscribe(follow_up)
        saved_jobs.toggle_bookmark("j1")
        assert calls == [["j1"]]
        assert list(saved_jobs.saved_ids) == ["j1", "j2"]

    def test_rollback_keeps_changes_made_meanwhile(self, auth, saved_jobs, users_api, member):
        sign_in(auth, member)

        def save(job_id):
            if job_id == "j1":
                saved_jobs.toggle_bookmark("j2")
                raise ApiError("Server error", status=500)

        users_api.save_job.side_effect = save
        result = saved_jobs.toggle_bookmark("j1")
        assert result.status is BookmarkStatus.FAILED
        assert list(saved_jobs.saved_ids) == ["j2"]
