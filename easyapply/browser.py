"""Scoped Playwright browser session: one Chromium page per run."""

import logging
from contextlib import contextmanager
from typing import Iterator

from playwright.sync_api import Page, sync_playwright

from easyapply.config import Settings

log = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)


@contextmanager
def browser_session(settings: Settings) -> Iterator[Page]:
    """Launch Chromium and yield a page; the browser is always closed."""
    with sync_playwright() as p:
        browser = p.chromium.launch(
            headless=settings.headless,
            args=[
                "--no-sandbox",
                "--disable-dev-shm-usage",
                "--window-size=1280,900",
            ],
        )
        try:
            context = browser.new_context(
                viewport={"width": 1280, "height": 900},
                user_agent=USER_AGENT,
                locale="en-US",
            )
            page = context.new_page()
            page.set_default_timeout(int(settings.action_timeout * 1000))
            log.info(f"Browser session started (headless={settings.headless}).")
            yield page
        finally:
            browser.close()
            log.info("Browser session closed.")
