"""Tests for the fallback-selector element locator."""

from easyapply.locator import (
    ADDITIONAL_QUESTION_DETECTORS,
    DONE_BUTTON_SELECTORS,
    EASY_APPLY_BUTTON_SELECTORS,
    EMPTY_REQUIRED_DETECTORS,
    NEXT_BUTTON_SELECTORS,
    QUESTION_MODULE_SELECTORS,
    REVIEW_BUTTON_SELECTORS,
    SUBMIT_BUTTON_SELECTORS,
    ElementLocator,
)
from easyapply.models import ActionKind
from tests.fakes import FakeElement, FakeLocator, button, job_card


class TestFirstVisible:

    def test_returns_none_when_nothing_matches(self, page):
        assert ElementLocator(page).find_next_button() is None

    def test_falls_back_to_later_selectors(self, page):
        page.set(NEXT_BUTTON_SELECTORS[-1], button(text="Next"))
        found = ElementLocator(page).find_next_button()
        assert found is not None
        assert found.inner_text() == "Next"

    def test_prefers_earlier_selectors(self, page):
        page.set(NEXT_BUTTON_SELECTORS[0], button(text="primary"))
        page.set(NEXT_BUTTON_SELECTORS[-1], button(text="fallback"))
        assert ElementLocator(page).find_next_button().inner_text() == "primary"

    def test_skips_hidden_elements(self, page):
        page.set(NEXT_BUTTON_SELECTORS[0], FakeElement(visible=False))
        assert ElementLocator(page).find_next_button() is None

    def test_stale_element_is_treated_as_absent(self, page):
        stale = button()
        stale.stale = True
        page.set(SUBMIT_BUTTON_SELECTORS[0], stale)
        assert ElementLocator(page).find_submit_button() is None

    def test_done_button_found_through_late_family(self, page):
        page.set(DONE_BUTTON_SELECTORS[-1], button(text="Dismiss"))
        assert ElementLocator(page).find_done_button() is not None


class TestPrimaryAction:

    def test_review_wins_over_next(self, page):
        page.set(NEXT_BUTTON_SELECTORS[0], button(text="Next"))
        page.set(REVIEW_BUTTON_SELECTORS[0], button(text="Review"))
        kind, element = ElementLocator(page).find_primary_action()
        assert kind is ActionKind.REVIEW
        assert element.inner_text() == "Review"

    def test_review_next_composite_prefers_review(self, page):
        page.set(NEXT_BUTTON_SELECTORS[1], button(text="Next"))
        page.set(REVIEW_BUTTON_SELECTORS[2], button(text="Review"))
        assert ElementLocator(page).find_review_next_button().inner_text() == "Review"

    def test_next_when_only_next(self, page):
        page.set(NEXT_BUTTON_SELECTORS[0], button())
        kind, _ = ElementLocator(page).find_primary_action()
        assert kind is ActionKind.NEXT

    def test_submit_only_when_nothing_else(self, page):
        page.set(SUBMIT_BUTTON_SELECTORS[0], button())
        kind, _ = ElementLocator(page).find_primary_action()
        assert kind is ActionKind.SUBMIT

    def test_none_without_controls(self, page):
        assert ElementLocator(page).find_primary_action() is None


class TestEasyApplyButton:

    def test_matches_button_for_job_id(self, page):
        page.set(EASY_APPLY_BUTTON_SELECTORS[0].format(job_id="42"), button())
        assert ElementLocator(page).find_easy_apply_button("42") is not None

    def test_other_job_id_does_not_match(self, page):
        page.set(EASY_APPLY_BUTTON_SELECTORS[0].format(job_id="42"), button())
        assert ElementLocator(page).find_easy_apply_button("43") is None


class TestQuestionDetection:

    def test_no_questions_on_empty_modal(self, page):
        step = ElementLocator(page).read_modal_step()
        assert not step.has_additional_questions
        assert not step.blocked_on_input

    def test_any_single_detector_is_enough(self, page):
        page.set(ADDITIONAL_QUESTION_DETECTORS[-1].selector, FakeElement(text="Additional Questions"))
        assert ElementLocator(page).has_additional_questions() is True

    def test_hidden_section_is_ignored(self, page):
        page.set(ADDITIONAL_QUESTION_DETECTORS[0].selector, FakeElement(visible=False))
        assert ElementLocator(page).has_additional_questions() is False

    def test_pre_populated_when_module_has_filled_input(self, page):
        module = FakeElement(children={'input[type="text"]': [FakeElement(value="Toronto")]})
        page.set(QUESTION_MODULE_SELECTORS[0], module)
        assert ElementLocator(page).are_questions_pre_populated() is True

    def test_not_pre_populated_when_inputs_empty(self, page):
        module = FakeElement(children={'input[type="text"]': [FakeElement(value="  ")]})
        page.set(QUESTION_MODULE_SELECTORS[0], module)
        assert ElementLocator(page).are_questions_pre_populated() is False

    def test_checked_radio_counts_as_pre_populated(self, page):
        radio = FakeElement(attrs={"type": "radio"}, checked=True)
        module = FakeElement(children={'input[type="radio"]': [radio]})
        page.set(QUESTION_MODULE_SELECTORS[0], module)
        assert ElementLocator(page).are_questions_pre_populated() is True

    def test_not_pre_populated_without_module(self, page):
        assert ElementLocator(page).are_questions_pre_populated() is False

    def test_empty_required_input(self, page):
        page.set(EMPTY_REQUIRED_DETECTORS[0].selector, FakeElement(value=""))
        assert ElementLocator(page).has_empty_required_fields() is True

    def test_filled_required_input(self, page):
        page.set(EMPTY_REQUIRED_DETECTORS[0].selector, FakeElement(value="5"))
        assert ElementLocator(page).has_empty_required_fields() is False

    def test_required_radio_group_without_choice(self, page):
        group = FakeElement(children={"input:checked": []})
        page.set(EMPTY_REQUIRED_DETECTORS[6].selector, group)
        assert ElementLocator(page).has_empty_required_fields() is True

    def test_detector_errors_do_not_escape(self, page):
        broken = FakeElement(value="")
        broken.stale = True
        page.set(EMPTY_REQUIRED_DETECTORS[0].selector, broken)
        assert ElementLocator(page).has_empty_required_fields() is False

    def test_modal_step_blocked_on_input(self, page):
        page.set(NEXT_BUTTON_SELECTORS[0], button())
        page.set(QUESTION_MODULE_SELECTORS[0], FakeElement(
            children={'input[type="text"]': [FakeElement(value="")]},
        ))
        page.set(EMPTY_REQUIRED_DETECTORS[0].selector, FakeElement(value=""))
        step = ElementLocator(page).read_modal_step()
        assert step.next_available
        assert step.has_additional_questions
        assert not step.questions_pre_populated
        assert step.has_empty_required_fields
        assert step.blocked_on_input


class TestCards:

    def test_card_fields(self, page):
        locator = ElementLocator(page)
        card = FakeLocator([job_card("987", title="Data Engineer", company="Initech")])
        assert locator.card_title(card) == "Data Engineer"
        assert locator.card_company(card) == "Initech"
        assert locator.card_link(card) == "/jobs/view/987/?refId=abc"
        assert locator.card_job_id(card) == "987"

    def test_job_id_from_link_when_attribute_missing(self, page):
        el = job_card("555")
        del el.attrs["data-job-id"]
        card = FakeLocator([el])
        locator = ElementLocator(page)
        assert locator.card_job_id(card) is None
        assert locator.card_job_id(card, locator.card_link(card)) == "555"

    def test_missing_sub_element_returns_none(self, page):
        card = FakeLocator([job_card("1", company=None)])
        assert ElementLocator(page).card_company(card) is None

    def test_find_job_cards_uses_first_matching_family(self, page):
        page.set('li[data-occludable-job-id]', job_card("1"), job_card("2"))
        assert ElementLocator(page).count_job_cards() == 2

    def test_find_job_card_by_id(self, page):
        page.set('div[data-job-id="7"]', job_card("7"))
        assert ElementLocator(page).find_job_card("7") is not None
        assert ElementLocator(page).find_job_card("8") is None
