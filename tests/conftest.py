"""Shared fixtures: offline, deterministic, no real browser or clock."""

import pytest

from easyapply import utils
from easyapply.config import Settings
from tests.fakes import FakeClock, FakePage


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    """Every wait and delay in easyapply.utils runs against a fake clock."""
    fake = FakeClock()
    monkeypatch.setattr(utils, "time", fake)
    return fake


@pytest.fixture
def settings(tmp_path):
    return Settings(
        job_title="Engineer",
        job_location="Remote",
        email="me@example.com",
        password="hunter2",
        max_jobs_to_apply=50,
        login_timeout=30.0,
        results_timeout=30.0,
        action_timeout=10.0,
        confirmation_timeout=5.0,
        poll_interval=0.5,
        scroll_pause_seconds=2.0,
        action_delay_seconds=0.0,
        max_scroll_iterations=50,
        max_apply_steps=10,
        applications_csv=tmp_path / "applications.csv",
    )


@pytest.fixture
def page():
    return FakePage()
