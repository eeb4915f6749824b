"""Tests for environment-driven settings."""

from pathlib import Path

import pytest

from easyapply.config import Settings
from easyapply.models import ConfigError

ENV_KEYS = [
    "JOB_TITLE", "JOB_LOCATION", "LINKEDIN_EMAIL", "LINKEDIN_PASSWORD", "LINKEDIN_COOKIE",
    "MAX_JOBS_TO_APPLY", "LOGIN_TIMEOUT_SECONDS", "RESULTS_TIMEOUT_SECONDS",
    "ACTION_TIMEOUT_SECONDS", "CONFIRMATION_TIMEOUT_SECONDS", "POLL_INTERVAL_SECONDS",
    "SCROLL_PAUSE_SECONDS", "ACTION_DELAY_SECONDS", "MAX_SCROLL_ITERATIONS",
    "MAX_APPLY_STEPS", "HEADLESS", "APPLICATIONS_CSV", "SMTP_EMAIL", "SMTP_PASSWORD",
    "NOTIFY_EMAIL",
]


@pytest.fixture
def env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults(env):
    s = Settings.from_env()
    assert s.max_jobs_to_apply == 50
    assert s.max_scroll_iterations == 50
    assert s.max_apply_steps == 10
    assert s.action_timeout == 10.0
    assert s.headless is True
    assert s.applications_csv.name == "applications.csv"


def test_reads_environment(env, tmp_path):
    env.setenv("JOB_TITLE", "Data Engineer")
    env.setenv("JOB_LOCATION", "Berlin")
    env.setenv("LINKEDIN_COOKIE", "AQEDAT")
    env.setenv("MAX_JOBS_TO_APPLY", "5")
    env.setenv("ACTION_TIMEOUT_SECONDS", "2.5")
    env.setenv("HEADLESS", "false")
    env.setenv("APPLICATIONS_CSV", str(tmp_path / "out.csv"))

    s = Settings.from_env()
    assert s.query.title == "Data Engineer"
    assert s.query.location == "Berlin"
    assert s.credentials.session_cookie == "AQEDAT"
    assert s.max_jobs_to_apply == 5
    assert s.action_timeout == 2.5
    assert s.headless is False
    assert s.applications_csv == Path(tmp_path / "out.csv")


@pytest.mark.parametrize("key, value", [
    ("MAX_JOBS_TO_APPLY", "lots"),
    ("ACTION_TIMEOUT_SECONDS", "soon"),
])
def test_bad_numbers_raise_config_error(env, key, value):
    env.setenv(key, value)
    with pytest.raises(ConfigError, match=key):
        Settings.from_env()


def test_overrides_ignore_none():
    s = Settings(job_title="A", job_location="X").with_overrides(job_title="B", job_location=None)
    assert s.job_title == "B"
    assert s.job_location == "X"


def test_credentials_are_not_in_repr():
    creds = Settings(email="me@example.com", password="hunter2", session_cookie="AQEDAT").credentials
    assert "hunter2" not in repr(creds)
    assert "AQEDAT" not in repr(creds)


class TestValidate:

    def test_password_login_is_enough(self):
        Settings(job_title="A", email="e", password="p").validate()

    def test_cookie_alone_is_enough(self):
        Settings(job_title="A", session_cookie="c").validate()

    def test_missing_credentials(self):
        with pytest.raises(ConfigError, match="credentials"):
            Settings(job_title="A", email="e").validate()

    def test_missing_title(self):
        with pytest.raises(ConfigError, match="job title"):
            Settings(session_cookie="c").validate()

    def test_negative_max(self):
        with pytest.raises(ConfigError, match="negative"):
            Settings(job_title="A", session_cookie="c", max_jobs_to_apply=-1).validate()


def test_email_configured_needs_all_three():
    assert not Settings(smtp_email="a", smtp_password="b").email_configured
    assert Settings(smtp_email="a", smtp_password="b", notify_email="c").email_configured
