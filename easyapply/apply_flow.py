"""
Easy Apply modal state machine.

One call to `ApplyFlow.apply()` drives a single job from the job page to
exactly one terminal state:

    NOT_STARTED -> OPENED -> STEPPING* -> AWAITING_REVIEW -> SUBMITTED -> DONE

or one of NO_EASY_APPLY_AVAILABLE, BLOCKED_ON_INPUT, ERRORED. The page is
re-queried on every tick; element handles are never kept between ticks.
"""

import logging
from typing import Optional

from playwright.sync_api import Page

from easyapply.collector import job_view_url
from easyapply.config import Settings
from easyapply.locator import ElementLocator
from easyapply.models import ActionKind, ApplyOutcome, FlowState, JobRecord
from easyapply.utils import human_delay, safe_click, truncate, wait_for

log = logging.getLogger(__name__)

UNANSWERED_QUESTIONS = "unanswered required questions"
NO_ACTIONABLE_CONTROL = "no actionable control found"
STEP_LIMIT_EXCEEDED = "step limit exceeded"


class _Terminal(Exception):
    """Internal signal carrying the terminal state out of the tick loop."""

    def __init__(self, state: FlowState, detail: str = ""):
        super().__init__(detail)
        self.state = state
        self.detail = detail


class ApplyFlow:
    """Drives the Easy Apply modal for one job at a time."""

    def __init__(
        self,
        page: Page,
        settings: Settings,
        locator: Optional[ElementLocator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.page = page
        self.settings = settings
        self.log = logger or log
        self.locator = locator or ElementLocator(page, self.log)
        self.state = FlowState.NOT_STARTED
        self.clicks = 0
        self.history: list[FlowState] = []

    # ── Public entry point ───────────────────────────────────
    def apply(self, job: JobRecord) -> ApplyOutcome:
        """Run the modal to a terminal state and return exactly one outcome."""
        self.state = FlowState.NOT_STARTED
        self.clicks = 0
        self.history = [self.state]
        self.log.info(f"Attempting Easy Apply: {job.company} — {job.title}")

        try:
            self._open(job)
            self._step_through()
            self._submit()
            self._dismiss_confirmation(job)
        except _Terminal as t:
            self._transition(t.state)
            outcome = self._outcome_for(t.state, t.detail)
        except Exception as e:
            cause = truncate(str(e).split("\n")[0] or type(e).__name__, 200)
            self.log.error(f"Error applying to {job.title} at {job.company}: {cause}")
            self._transition(FlowState.ERRORED)
            outcome = ApplyOutcome.error(cause)
        else:
            outcome = ApplyOutcome.succeeded()

        if not outcome.is_success:
            self.log.warning(f"Easy Apply did not complete for {job.company} — {job.title}: {outcome}")
            self._discard_application()
        else:
            self.log.info(f"Applied successfully: {job.company} — {job.title}")
        return outcome

    # ── States ───────────────────────────────────────────────
    def _open(self, job: JobRecord):
        url = job_view_url(job.job_id)
        self.log.info(f"Navigating to job details for {job.title}: {url}")
        self.page.goto(url, wait_until="domcontentloaded")
        human_delay(self.settings.action_delay_seconds)

        trigger = wait_for(
            lambda: self.locator.find_easy_apply_button(job.job_id),
            self.settings.action_timeout,
            self.settings.poll_interval,
        )
        if trigger is None:
            raise _Terminal(FlowState.NO_EASY_APPLY_AVAILABLE)
        trigger.click()
        self._transition(FlowState.OPENED)
        human_delay(self.settings.action_delay_seconds)

    def _step_through(self):
        """Click Review/Next until the primary action becomes Submit."""
        steps = 0
        while True:
            action = wait_for(
                self.locator.find_primary_action,
                self.settings.action_timeout,
                self.settings.poll_interval,
            )
            if action is None:
                raise _Terminal(FlowState.BLOCKED_ON_INPUT, NO_ACTIONABLE_CONTROL)

            step = self.locator.read_modal_step()
            if step.blocked_on_input:
                raise _Terminal(FlowState.BLOCKED_ON_INPUT, UNANSWERED_QUESTIONS)
            if step.has_additional_questions:
                self.log.info("Additional questions are answered or optional, proceeding")

            kind, _ = action
            if kind is ActionKind.SUBMIT:
                self._transition(FlowState.AWAITING_REVIEW)
                return

            if steps >= self.settings.max_apply_steps:
                raise _Terminal(FlowState.ERRORED, STEP_LIMIT_EXCEEDED)
            steps += 1

            # Re-acquire right before clicking: the modal may have re-rendered
            # while the step was being read.
            element = self._reacquire(kind)
            if element is None:
                continue
            element.click()
            self.clicks += 1
            self._transition(FlowState.STEPPING)
            self.log.debug(f"Clicked {kind.value} (step {steps})")
            human_delay(self.settings.action_delay_seconds, 0.5)

    def _submit(self):
        step = self.locator.read_modal_step()
        if step.blocked_on_input:
            raise _Terminal(FlowState.BLOCKED_ON_INPUT, UNANSWERED_QUESTIONS)
        submit = self.locator.find_submit_button()
        if submit is None:
            raise _Terminal(FlowState.BLOCKED_ON_INPUT, NO_ACTIONABLE_CONTROL)
        self.log.info("Found Submit Application button, clicking it")
        submit.click()
        self.clicks += 1
        self._transition(FlowState.SUBMITTED)
        human_delay(self.settings.action_delay_seconds, 1.5)

    def _dismiss_confirmation(self, job: JobRecord):
        done = wait_for(
            self.locator.find_done_button,
            self.settings.confirmation_timeout,
            self.settings.poll_interval,
        )
        if done is not None:
            safe_click(done)
        else:
            # Submission is the success signal; a missing Done button is cosmetic.
            self.log.warning(f"No Done button found after submission for job: {job.title} at {job.company}")
        self._transition(FlowState.DONE)

    # ── Helpers ──────────────────────────────────────────────
    def _reacquire(self, kind: ActionKind):
        if kind is ActionKind.REVIEW:
            return self.locator.find_review_button()
        if kind is ActionKind.NEXT:
            return self.locator.find_next_button()
        return self.locator.find_submit_button()

    def _transition(self, state: FlowState):
        if state is not self.state:
            self.log.debug(f"Apply flow: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _outcome_for(self, state: FlowState, detail: str) -> ApplyOutcome:
        if state is FlowState.NO_EASY_APPLY_AVAILABLE:
            return ApplyOutcome.no_easy_apply()
        if state is FlowState.BLOCKED_ON_INPUT:
            return ApplyOutcome.incomplete(detail)
        return ApplyOutcome.error(detail)

    def _discard_application(self):
        """Close any half-filled modal so the next job starts clean."""
        try:
            if safe_click(self.locator.find_modal_close_button()):
                human_delay(self.settings.action_delay_seconds, 0.5)
                safe_click(self.locator.find_discard_button())
                self.log.info("Closed open modal after job application failure")
        except Exception as e:
            self.log.warning(f"Failed to close open modal: {truncate(str(e))}")
