"""
Centralized configuration loaded from environment variables.
Works with both .env files (local) and CI secrets.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from dotenv import load_dotenv

from easyapply.models import ConfigError, Credentials, SearchQuery

# Load .env if it exists (local development)
load_dotenv()

# ── Paths ────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("EASYAPPLY_DATA_DIR", str(PROJECT_ROOT / "data")))
APPLICATIONS_CSV = DATA_DIR / "applications.csv"


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Everything one automation run needs, resolved once at start-up."""

    # ── Search / credentials ──
    job_title: str = ""
    job_location: str = ""
    email: str = ""
    password: str = ""
    session_cookie: str = ""          # li_at cookie (preferred when set)
    max_jobs_to_apply: int = 50

    # ── Waits (seconds) ──
    login_timeout: float = 60.0
    results_timeout: float = 30.0
    action_timeout: float = 10.0
    confirmation_timeout: float = 8.0
    poll_interval: float = 0.5
    scroll_pause_seconds: float = 2.0
    action_delay_seconds: float = 1.0

    # ── Bounds ──
    max_scroll_iterations: int = 50
    max_apply_steps: int = 10

    # ── Browser ──
    headless: bool = True

    # ── Storage / e-mail ──
    applications_csv: Path = APPLICATIONS_CSV
    smtp_email: str = ""
    smtp_password: str = ""
    notify_email: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            job_title=os.getenv("JOB_TITLE", ""),
            job_location=os.getenv("JOB_LOCATION", ""),
            email=os.getenv("LINKEDIN_EMAIL", ""),
            password=os.getenv("LINKEDIN_PASSWORD", ""),
            session_cookie=os.getenv("LINKEDIN_COOKIE", ""),
            max_jobs_to_apply=_env_int("MAX_JOBS_TO_APPLY", 50),
            login_timeout=_env_float("LOGIN_TIMEOUT_SECONDS", 60.0),
            results_timeout=_env_float("RESULTS_TIMEOUT_SECONDS", 30.0),
            action_timeout=_env_float("ACTION_TIMEOUT_SECONDS", 10.0),
            confirmation_timeout=_env_float("CONFIRMATION_TIMEOUT_SECONDS", 8.0),
            poll_interval=_env_float("POLL_INTERVAL_SECONDS", 0.5),
            scroll_pause_seconds=_env_float("SCROLL_PAUSE_SECONDS", 2.0),
            action_delay_seconds=_env_float("ACTION_DELAY_SECONDS", 1.0),
            max_scroll_iterations=_env_int("MAX_SCROLL_ITERATIONS", 50),
            max_apply_steps=_env_int("MAX_APPLY_STEPS", 10),
            headless=_env_bool("HEADLESS", True),
            applications_csv=Path(os.getenv("APPLICATIONS_CSV", str(APPLICATIONS_CSV))),
            smtp_email=os.getenv("SMTP_EMAIL", ""),
            smtp_password=os.getenv("SMTP_PASSWORD", ""),
            notify_email=os.getenv("NOTIFY_EMAIL", ""),
        )

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @property
    def query(self) -> SearchQuery:
        return SearchQuery(title=self.job_title, location=self.job_location)

    @property
    def credentials(self) -> Credentials:
        return Credentials(
            email=self.email,
            password=self.password,
            session_cookie=self.session_cookie,
        )

    @property
    def email_configured(self) -> bool:
        return all([self.smtp_email, self.smtp_password, self.notify_email])

    def validate(self) -> None:
        """Raise ConfigError if the run cannot possibly start."""
        if not self.session_cookie and not (self.email and self.password):
            raise ConfigError(
                "No LinkedIn credentials configured "
                "(need LINKEDIN_COOKIE or LINKEDIN_EMAIL + LINKEDIN_PASSWORD)."
            )
        if not self.job_title:
            raise ConfigError("No job title configured (JOB_TITLE or the first CLI argument).")
        if self.max_jobs_to_apply < 0:
            raise ConfigError("MAX_JOBS_TO_APPLY cannot be negative.")
