"""
Element locator for LinkedIn search results and the Easy Apply modal.

Every lookup walks an ordered list of selector strategies and returns the
first visible match, or None. Absence is a normal outcome here: nothing in
this module raises because an element is missing, stale or detached.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from playwright.sync_api import Locator, Page

from easyapply.models import ActionKind, ModalStep

log = logging.getLogger(__name__)

# Upper bound on how many matches of one selector a detector inspects.
MAX_MATCHES_PER_DETECTOR = 25

# ── Apply modal controls ─────────────────────────────────────
NEXT_BUTTON_SELECTORS = [
    'button[data-easy-apply-next-button]',
    'button[aria-label="Continue to next step"]',
    'button:has-text("Next")',
]
REVIEW_BUTTON_SELECTORS = [
    'button[data-live-test-easy-apply-review-button]',
    'button[aria-label="Review your application"]',
    'button:has-text("Review")',
]
SUBMIT_BUTTON_SELECTORS = [
    'button[data-live-test-easy-apply-submit-button]',
    'button[aria-label="Submit application"]',
    'button:has-text("Submit application")',
]
# The post-submit confirmation is the least consistent part of the modal,
# so several unrelated selector families are tried in turn.
DONE_BUTTON_SELECTORS = [
    'button:has-text("Done")',
    '.artdeco-modal button.artdeco-button--primary',
    'button[aria-label*="Done"]',
    'button[data-test-modal-close-btn]',
    'button[class*="done"]',
    'button[data-qa*="done"]',
    'button[aria-label="Dismiss"]',
]
MODAL_CLOSE_SELECTORS = [
    'button[aria-label*="Dismiss"]',
    'button[data-test-modal-close-btn]',
    'button[aria-label*="Close"]',
    'button[class*="modal-close"]',
    '.artdeco-modal-overlay button[aria-label*="Dismiss"]',
    'button[data-test-id="modal-close"]',
]
DISCARD_BUTTON_SELECTORS = [
    'button[data-control-name="discard_application_confirm_btn"]',
    'button[data-test-dialog-primary-btn]',
    'button:has-text("Discard")',
]
EASY_APPLY_BUTTON_SELECTORS = [
    'button.jobs-apply-button[data-job-id="{job_id}"]',
    'button.jobs-apply-button',
    'button[aria-label*="Easy Apply"]',
    'button:has-text("Easy Apply")',
]

# ── Search results ───────────────────────────────────────────
JOB_CARD_SELECTORS = [
    'div[data-job-id]',
    'li[data-occludable-job-id]',
    'li.scaffold-layout__list-item',
    'div.job-card-container',
    'main li:has(a[href*="/jobs/view/"])',
]
JOB_CARD_BY_ID_SELECTORS = [
    'div[data-job-id="{job_id}"]',
    'li[data-occludable-job-id="{job_id}"]',
]
CARD_TITLE_SELECTORS = [
    'strong',
    '.job-card-list__title',
    'a.job-card-container__link',
    'a[href*="/jobs/view/"] span',
]
CARD_COMPANY_SELECTORS = [
    '.artdeco-entity-lockup__subtitle',
    '.job-card-container__primary-description',
    '.job-card-container__company-name',
    'span[class*="company"]',
]
CARD_LINK_SELECTORS = [
    'a[href*="/jobs/view/"]',
    'a',
]
CARD_ID_ATTRIBUTES = ["data-job-id", "data-occludable-job-id"]
JOB_VIEW_ID_RE = re.compile(r"/jobs/view/(\d+)")

# ── Login ────────────────────────────────────────────────────
USERNAME_FIELD_SELECTORS = [
    'input#username',
    'input[name="session_key"]',
    'input[autocomplete="username"]',
]
PASSWORD_FIELD_SELECTORS = [
    'input#password',
    'input[name="session_password"]',
    'input[autocomplete="current-password"]',
]
SIGN_IN_BUTTON_SELECTORS = [
    'button[type="submit"]',
    'button:has-text("Sign in")',
]
LOGIN_ERROR_SELECTORS = [
    '#error-for-password',
    '#error-for-username',
    '.form__label--error',
]

# ── Screening questions ──────────────────────────────────────
QUESTION_MODULE_SELECTORS = [
    'div[class*="additional-questions"]',
    'div[class*="custom-questions"]',
    'div[class*="screening-questions"]',
    'div.jobs-easy-apply-form-section__grouping',
    'div[data-test-form-element="form"]',
    'form[class*="questions"]',
    'div[role="form"]',
]
FIELD_SELECTOR = 'input:not([type="hidden"]), textarea, select'


# ── Detector checks ──────────────────────────────────────────
def _is_visible(el: Locator) -> bool:
    return el.is_visible()


def _has_value(el: Locator) -> bool:
    field_type = (el.get_attribute("type") or "").lower()
    if field_type in ("radio", "checkbox"):
        return el.is_checked()
    return bool((el.input_value() or "").strip())


def _is_filled(el: Locator) -> bool:
    return el.is_visible() and _has_value(el)


def _is_empty(el: Locator) -> bool:
    return el.is_visible() and not _has_value(el)


def _no_option_checked(el: Locator) -> bool:
    if not el.is_visible():
        return False
    return el.locator("input:checked").count() == 0


@dataclass(frozen=True)
class Detector:
    """One independent predicate: a selector plus a per-element check."""

    selector: str
    check: Callable[[Locator], bool] = _is_visible


ADDITIONAL_QUESTION_DETECTORS = [
    Detector('div[class*="additional-questions"]'),
    Detector('div[class*="custom-questions"]'),
    Detector('div[class*="screening-questions"]'),
    Detector('div[data-test-form-element="input"]'),
    Detector('div[data-test-form-element="textarea"]'),
    Detector('div[data-test-form-element="select"]'),
    Detector('label[class*="question"]'),
    Detector('h3:has-text("Additional Questions")'),
    Detector('h3:has-text("Additional questions")'),
]
PRE_POPULATED_DETECTORS = [
    Detector('input[type="text"]', _is_filled),
    Detector('input[type="email"]', _is_filled),
    Detector('input[type="tel"]', _is_filled),
    Detector('input[type="number"]', _is_filled),
    Detector('textarea', _is_filled),
    Detector('select', _is_filled),
    Detector('input[type="radio"]', _is_filled),
    Detector('input[type="checkbox"]', _is_filled),
]
EMPTY_REQUIRED_DETECTORS = [
    Detector('input[required]:not([type="radio"]):not([type="checkbox"]):not([type="hidden"])', _is_empty),
    Detector('input[aria-required="true"]:not([type="radio"]):not([type="checkbox"])', _is_empty),
    Detector('textarea[required]', _is_empty),
    Detector('textarea[aria-required="true"]', _is_empty),
    Detector('select[required]', _is_empty),
    Detector('select[aria-required="true"]', _is_empty),
    Detector('fieldset:has(input[type="radio"][required])', _no_option_checked),
    Detector('fieldset[aria-required="true"]', _no_option_checked),
    Detector('.artdeco-inline-feedback--error'),
    Detector('[class*="validation-error"]'),
]


class ElementLocator:
    """Maps semantic intents ("the Next button", "card 123") to live elements."""

    def __init__(self, page: Page, logger: Optional[logging.Logger] = None):
        self.page = page
        self.log = logger or log

    # ── Core strategy walkers ────────────────────────────────
    def first_visible(self, selectors: list[str], scope=None) -> Optional[Locator]:
        """Return the first visible element matched by any selector, in order."""
        root = scope if scope is not None else self.page
        for selector in selectors:
            try:
                candidate = root.locator(selector).first
                if candidate.count() > 0 and candidate.is_visible():
                    return candidate
            except Exception as e:
                self.log.debug(f"Selector {selector!r} failed: {e}")
                continue
        return None

    def any_match(self, detectors: list[Detector], scope=None) -> bool:
        """True if any detector finds an element passing its check."""
        root = scope if scope is not None else self.page
        for detector in detectors:
            try:
                matches = root.locator(detector.selector)
                for i in range(min(matches.count(), MAX_MATCHES_PER_DETECTOR)):
                    if detector.check(matches.nth(i)):
                        self.log.debug(f"Detector matched: {detector.selector}")
                        return True
            except Exception as e:
                self.log.debug(f"Detector {detector.selector!r} failed: {e}")
                continue
        return False

    # ── Apply modal ──────────────────────────────────────────
    def find_next_button(self) -> Optional[Locator]:
        return self.first_visible(NEXT_BUTTON_SELECTORS)

    def find_review_button(self) -> Optional[Locator]:
        return self.first_visible(REVIEW_BUTTON_SELECTORS)

    def find_submit_button(self) -> Optional[Locator]:
        return self.first_visible(SUBMIT_BUTTON_SELECTORS)

    def find_done_button(self) -> Optional[Locator]:
        return self.first_visible(DONE_BUTTON_SELECTORS)

    def find_modal_close_button(self) -> Optional[Locator]:
        return self.first_visible(MODAL_CLOSE_SELECTORS)

    def find_discard_button(self) -> Optional[Locator]:
        return self.first_visible(DISCARD_BUTTON_SELECTORS)

    def find_review_next_button(self) -> Optional[Locator]:
        """Review wins over Next: it means the modal is close to the end."""
        return self.find_review_button() or self.find_next_button()

    def find_primary_action(self) -> Optional[tuple[ActionKind, Locator]]:
        """The control that advances the modal right now, by priority."""
        for kind, finder in (
            (ActionKind.REVIEW, self.find_review_button),
            (ActionKind.NEXT, self.find_next_button),
            (ActionKind.SUBMIT, self.find_submit_button),
        ):
            element = finder()
            if element is not None:
                return kind, element
        return None

    def find_easy_apply_button(self, job_id: str) -> Optional[Locator]:
        selectors = [s.format(job_id=job_id) for s in EASY_APPLY_BUTTON_SELECTORS]
        return self.first_visible(selectors)

    # ── Screening questions ──────────────────────────────────
    def find_questions_module(self) -> Optional[Locator]:
        return self.first_visible(QUESTION_MODULE_SELECTORS)

    def has_additional_questions(self) -> bool:
        return self.any_match(ADDITIONAL_QUESTION_DETECTORS)

    def are_questions_pre_populated(self) -> bool:
        module = self.find_questions_module()
        if module is None:
            return False
        return self.any_match(PRE_POPULATED_DETECTORS, scope=module)

    def has_empty_required_fields(self) -> bool:
        return self.any_match(EMPTY_REQUIRED_DETECTORS)

    def read_modal_step(self) -> ModalStep:
        has_questions = self.has_additional_questions()
        return ModalStep(
            next_available=self.find_next_button() is not None,
            review_available=self.find_review_button() is not None,
            submit_available=self.find_submit_button() is not None,
            has_additional_questions=has_questions,
            questions_pre_populated=has_questions and self.are_questions_pre_populated(),
            has_empty_required_fields=has_questions and self.has_empty_required_fields(),
        )

    # ── Search results ───────────────────────────────────────
    def find_job_cards(self) -> list[Locator]:
        """All rendered cards, via the first selector family that matches any."""
        for selector in JOB_CARD_SELECTORS:
            try:
                cards = self.page.locator(selector)
                if cards.count() > 0:
                    return cards.all()
            except Exception as e:
                self.log.debug(f"Card selector {selector!r} failed: {e}")
                continue
        return []

    def count_job_cards(self) -> int:
        return len(self.find_job_cards())

    def find_job_card(self, job_id: str) -> Optional[Locator]:
        selectors = [s.format(job_id=job_id) for s in JOB_CARD_BY_ID_SELECTORS]
        return self.first_visible(selectors)

    def card_text(self, card: Locator, selectors: list[str]) -> Optional[str]:
        """First non-empty text inside a card, or None."""
        for selector in selectors:
            try:
                el = card.locator(selector).first
                if el.count() > 0:
                    text = (el.inner_text() or "").strip()
                    if text:
                        return text
            except Exception:
                continue
        return None

    def card_title(self, card: Locator) -> Optional[str]:
        return self.card_text(card, CARD_TITLE_SELECTORS)

    def card_company(self, card: Locator) -> Optional[str]:
        return self.card_text(card, CARD_COMPANY_SELECTORS)

    def card_link(self, card: Locator) -> Optional[str]:
        for selector in CARD_LINK_SELECTORS:
            try:
                el = card.locator(selector).first
                if el.count() > 0:
                    href = el.get_attribute("href")
                    if href:
                        return href
            except Exception:
                continue
        return None

    def card_job_id(self, card: Locator, href: Optional[str] = None) -> Optional[str]:
        for attribute in CARD_ID_ATTRIBUTES:
            try:
                value = card.get_attribute(attribute)
                if value:
                    return value.strip()
            except Exception:
                continue
        if href:
            m = JOB_VIEW_ID_RE.search(href)
            if m:
                return m.group(1)
        return None

    def card_markup_text(self, card: Locator) -> str:
        try:
            return card.inner_text() or ""
        except Exception:
            return ""

    # ── Login ────────────────────────────────────────────────
    def find_username_field(self) -> Optional[Locator]:
        return self.first_visible(USERNAME_FIELD_SELECTORS)

    def find_password_field(self) -> Optional[Locator]:
        return self.first_visible(PASSWORD_FIELD_SELECTORS)

    def find_sign_in_button(self) -> Optional[Locator]:
        return self.first_visible(SIGN_IN_BUTTON_SELECTORS)

    def find_login_error(self) -> Optional[Locator]:
        return self.first_visible(LOGIN_ERROR_SELECTORS)
