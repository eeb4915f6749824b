"""Data models shared by the collector, the apply flow and the history tracker."""

from dataclasses import dataclass, field
from enum import Enum


# ── Errors ───────────────────────────────────────────────────
class EasyApplyError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(EasyApplyError):
    """The run is missing configuration it cannot start without."""


class AuthenticationFailed(EasyApplyError):
    """No logged-in landing page was reached; the run cannot continue."""


class NoResultsFound(EasyApplyError):
    """The search rendered zero job cards within the timeout."""


class CardExtractionError(EasyApplyError):
    """A job card is missing a sub-element needed to build a JobRecord."""


# ── Search inputs ────────────────────────────────────────────
@dataclass(frozen=True)
class SearchQuery:
    title: str
    location: str = ""


@dataclass(frozen=True)
class Credentials:
    email: str = ""
    password: str = field(default="", repr=False)
    session_cookie: str = field(default="", repr=False)


# ── Listings ─────────────────────────────────────────────────
@dataclass(frozen=True)
class JobRecord:
    job_id: str
    title: str
    company: str
    url: str
    already_applied_hint: bool = False


# ── Outcomes ─────────────────────────────────────────────────
class OutcomeKind(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED_NO_EASY_APPLY = "failed_no_easy_apply"
    FAILED_INCOMPLETE = "failed_incomplete"
    FAILED_ERROR = "failed_error"
    SKIPPED_ALREADY_APPLIED = "skipped_already_applied"


@dataclass(frozen=True)
class ApplyOutcome:
    """Result of one apply attempt. `detail` holds the reason or cause."""

    kind: OutcomeKind
    detail: str = ""

    @classmethod
    def succeeded(cls) -> "ApplyOutcome":
        return cls(OutcomeKind.SUCCEEDED)

    @classmethod
    def no_easy_apply(cls) -> "ApplyOutcome":
        return cls(OutcomeKind.FAILED_NO_EASY_APPLY, "Easy Apply button not found")

    @classmethod
    def incomplete(cls, reason: str) -> "ApplyOutcome":
        return cls(OutcomeKind.FAILED_INCOMPLETE, reason)

    @classmethod
    def error(cls, cause: str) -> "ApplyOutcome":
        return cls(OutcomeKind.FAILED_ERROR, cause)

    @classmethod
    def skipped_already_applied(cls) -> "ApplyOutcome":
        return cls(OutcomeKind.SKIPPED_ALREADY_APPLIED, "previously applied")

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCEEDED

    @property
    def status(self) -> str:
        """Value written to the tracker's status column."""
        if self.kind is OutcomeKind.SUCCEEDED:
            return "applied"
        if self.kind is OutcomeKind.SKIPPED_ALREADY_APPLIED:
            return "skipped"
        return "failed"

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}" if self.detail else self.kind.value


# ── Apply modal ──────────────────────────────────────────────
class ActionKind(str, Enum):
    REVIEW = "review"
    NEXT = "next"
    SUBMIT = "submit"


class FlowState(str, Enum):
    NOT_STARTED = "not_started"
    OPENED = "opened"
    STEPPING = "stepping"
    AWAITING_REVIEW = "awaiting_review"
    SUBMITTED = "submitted"
    DONE = "done"
    NO_EASY_APPLY_AVAILABLE = "no_easy_apply_available"
    BLOCKED_ON_INPUT = "blocked_on_input"
    ERRORED = "errored"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = {
    FlowState.DONE,
    FlowState.NO_EASY_APPLY_AVAILABLE,
    FlowState.BLOCKED_ON_INPUT,
    FlowState.ERRORED,
}


@dataclass(frozen=True)
class ModalStep:
    """Snapshot of the controls visible in the apply modal on one tick."""

    next_available: bool = False
    review_available: bool = False
    submit_available: bool = False
    has_additional_questions: bool = False
    questions_pre_populated: bool = False
    has_empty_required_fields: bool = False

    @property
    def blocked_on_input(self) -> bool:
        return (
            self.has_additional_questions
            and not self.questions_pre_populated
            and self.has_empty_required_fields
        )


# ── Run statistics ───────────────────────────────────────────
@dataclass(frozen=True)
class ApplicationStats:
    total: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def success_rate(self) -> float:
        attempted = self.successful + self.failed
        return self.successful / attempted * 100 if attempted else 0.0
