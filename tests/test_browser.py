"""Tests for the scoped browser session."""

from unittest import mock

import pytest

from easyapply import browser


@pytest.fixture
def playwright(monkeypatch):
    p = mock.MagicMock()
    factory = mock.MagicMock()
    factory.return_value.__enter__.return_value = p
    monkeypatch.setattr(browser, "sync_playwright", factory)
    return p


def test_yields_page_with_default_timeout(playwright, settings):
    with browser.browser_session(settings) as page:
        pass

    chromium = playwright.chromium
    chromium.launch.assert_called_once()
    assert chromium.launch.call_args.kwargs["headless"] is True
    new_page = chromium.launch.return_value.new_context.return_value.new_page
    assert page is new_page.return_value
    page.set_default_timeout.assert_called_once_with(10000)
    chromium.launch.return_value.close.assert_called_once()


def test_browser_closed_when_run_fails(playwright, settings):
    with pytest.raises(RuntimeError):
        with browser.browser_session(settings):
            raise RuntimeError("boom")
    playwright.chromium.launch.return_value.close.assert_called_once()
