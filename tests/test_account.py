"""Tests for member account settings."""
from __future__ import annotations

import pytest

from conftest import sign_in
from jobquest.account import AccountSettings
from jobquest.config import TOKEN_KEY
from jobquest.errors import ApiError, PermissionDenied, ValidationError


@pytest.fixture
def settings(users_api, auth):
    return AccountSettings(users_api, auth)


class TestGuest:
    def test_everything_needs_sign_in(self, settings, users_api):
        with pytest.raises(PermissionDenied):
            settings.save_preferences(newsletter=False)
        with pytest.raises(PermissionDenied):
            settings.applied_job_ids()
        with pytest.raises(PermissionDenied):
            settings.delete_account("DELETE")
        users_api.delete_account.assert_not_called()

    def test_defaults(self, settings):
        assert settings.preferences() == {"jobAlerts": True, "newsletter": True, "darkMode": False}


class TestPreferences:
    def test_stored_values_override_defaults(self, settings, auth, member):
        member.preferences = {"newsletter": False, "other": True}
        sign_in(auth, member)
        assert settings.preferences() == {"jobAlerts": True, "newsletter": False, "darkMode": False}

    def test_save(self, settings, auth, users_api, member):
        sign_in(auth, member)
        assert settings.save_preferences(darkMode=True)
        users_api.update_preferences.assert_called_once_with(darkMode=True)
        assert auth.user.preferences["darkMode"] is True
        assert settings.preferences()["darkMode"] is True

    def test_unknown_key(self, settings, auth, users_api, member):
        sign_in(auth, member)
        with pytest.raises(ValidationError):
            settings.save_preferences(theme=True)
        users_api.update_preferences.assert_not_called()

    def test_failure_keeps_user(self, settings, auth, users_api, member):
        sign_in(auth, member)
        users_api.update_preferences.side_effect = ApiError("down", status=500)
        assert not settings.save_preferences(newsletter=False)
        assert settings.error == "Failed to save preferences. Please try again."
        assert auth.user.preferences == {}


class TestAppliedJobs:
    def test_accepts_ids_and_documents(self, settings, auth, users_api, member):
        sign_in(auth, member)
        users_api.applied_jobs.return_value = [{"job": {"_id": "j1"}, "appliedAt": "x"}, {"_id": "j2"}, "j3", {}]
        assert settings.applied_job_ids() == ["j1", "j2", "j3"]

    def test_wrapped_response(self, settings, auth, users_api, member):
        sign_in(auth, member)
        users_api.applied_jobs.return_value = {"appliedJobs": ["j9"]}
        assert settings.applied_job_ids() == ["j9"]

    def test_failure_is_empty(self, settings, auth, users_api, member):
        sign_in(auth, member)
        users_api.applied_jobs.side_effect = ApiError("Network error")
        assert settings.applied_job_ids() == []


class TestDeleteAccount:
    def test_requires_confirmation(self, settings, auth, users_api, member):
        sign_in(auth, member)
        with pytest.raises(ValidationError) as exc:
            settings.delete_account("delete")
        assert "confirmation" in exc.value.errors
        users_api.delete_account.assert_not_called()

    def test_deletes_and_signs_out(self, settings, auth, users_api, member, store):
        store.set(TOKEN_KEY, "tok")
        sign_in(auth, member)
        assert settings.delete_account(" DELETE ")
        users_api.delete_account.assert_called_once_with()
        assert auth.user is None
        assert store.get(TOKEN_KEY) is None

    def test_failure_stays_signed_in(self, settings, auth, users_api, member):
        sign_in(auth, member)
        users_api.delete_account.side_effect = ApiError("Server error", status=500)
        assert not settings.delete_account("DELETE")
        assert settings.error == "Server error"
        assert auth.user is member
