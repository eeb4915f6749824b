"""
LinkedIn listing collector
===========================
Uses Playwright to:
  1. Log in to LinkedIn (session cookie first, then username/password)
  2. Search for a title + location, filtered to "Easy Apply" only
  3. Harvest job cards from the infinite-scroll results feed,
     deduplicated by LinkedIn job id
"""

import logging
from typing import Iterator, Optional
from urllib.parse import quote_plus

from playwright.sync_api import Locator, Page

from easyapply.config import Settings
from easyapply.locator import ElementLocator
from easyapply.models import (
    AuthenticationFailed,
    CardExtractionError,
    Credentials,
    JobRecord,
    NoResultsFound,
    SearchQuery,
)
from easyapply.utils import human_delay, pause, truncate, wait_for

log = logging.getLogger(__name__)

LINKEDIN_BASE_URL = "https://www.linkedin.com"
LINKEDIN_LOGIN_URL = f"{LINKEDIN_BASE_URL}/login"
LINKEDIN_FEED_URL = f"{LINKEDIN_BASE_URL}/feed/"
LINKEDIN_JOBS_URL = f"{LINKEDIN_BASE_URL}/jobs/search/"

LOGGED_IN_PATHS = ["/feed", "/jobs", "/mynetwork", "/messaging", "/in/"]
CHALLENGE_PATHS = ["/checkpoint", "/challenge", "/authwall"]


# ── Helpers ──────────────────────────────────────────────────
def build_search_url(keywords: str, location: str, easy_apply: bool = True) -> str:
    """Build a LinkedIn job search URL with filters."""
    params = f"keywords={quote_plus(keywords)}&location={quote_plus(location)}"
    if easy_apply:
        params += "&f_AL=true"               # Easy Apply filter
    return f"{LINKEDIN_JOBS_URL}?{params}"


def job_view_url(job_id: str) -> str:
    return f"{LINKEDIN_BASE_URL}/jobs/view/{job_id}/"


def is_logged_in_url(url: str) -> bool:
    return any(path in url for path in LOGGED_IN_PATHS) and not is_challenge_url(url)


def is_challenge_url(url: str) -> bool:
    return any(path in url for path in CHALLENGE_PATHS)


class ListingCollector:
    """Turns one search query into a deduplicated stream of JobRecords."""

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
        self.scroll_count = 0
        self.iterations = 0

    # ── Authentication ───────────────────────────────────────
    def login(self, credentials: Credentials):
        """Log in using cookie (preferred) or username/password.

        Raises AuthenticationFailed if no logged-in page is reached, including
        when the page itself fails (navigation timeout, detached elements).
        """
        try:
            self._login(credentials)
        except AuthenticationFailed:
            raise
        except Exception as e:
            raise AuthenticationFailed(f"LinkedIn login failed: {truncate(str(e))}") from e

    @property
    def _login_timeout_ms(self) -> int:
        return int(self.settings.login_timeout * 1000)

    def _login(self, credentials: Credentials):
        if credentials.session_cookie:
            if self._login_with_cookie(credentials.session_cookie):
                return
            if not (credentials.email and credentials.password):
                raise AuthenticationFailed(
                    "LinkedIn cookie expired and no username/password configured."
                )
            self.log.info("Falling back to username/password login...")

        if not credentials.email or not credentials.password:
            raise AuthenticationFailed(
                "No LinkedIn credentials configured (need LINKEDIN_COOKIE or EMAIL+PASSWORD)."
            )
        self._login_with_password(credentials)

    def _login_with_cookie(self, cookie: str) -> bool:
        self.log.info("Logging in to LinkedIn via li_at cookie...")
        self.page.context.add_cookies([
            {
                "name": "li_at",
                "value": cookie,
                "domain": ".linkedin.com",
                "path": "/",
            },
        ])
        self.page.goto(LINKEDIN_FEED_URL, wait_until="domcontentloaded", timeout=self._login_timeout_ms)
        human_delay(self.settings.action_delay_seconds, 2.0)

        if is_logged_in_url(self.page.url):
            self.log.info("LinkedIn cookie login successful.")
            return True
        self.log.warning(f"Cookie login redirected to {self.page.url} — cookie may be expired.")
        return False

    def _login_with_password(self, credentials: Credentials):
        self.log.info("Logging in to LinkedIn via username/password...")
        self.page.goto(LINKEDIN_LOGIN_URL, wait_until="domcontentloaded", timeout=self._login_timeout_ms)
        human_delay(self.settings.action_delay_seconds)

        username = wait_for(
            self.locator.find_username_field,
            self.settings.action_timeout,
            self.settings.poll_interval,
        )
        password = self.locator.find_password_field()
        if username is None or password is None:
            raise AuthenticationFailed("LinkedIn login form not found.")

        username.fill(credentials.email)
        human_delay(self.settings.action_delay_seconds, 0.5)
        password.fill(credentials.password)
        human_delay(self.settings.action_delay_seconds, 0.5)

        sign_in = self.locator.find_sign_in_button()
        if sign_in is None:
            raise AuthenticationFailed("LinkedIn sign-in button not found.")
        sign_in.click()

        # LinkedIn may redirect to /feed/, /jobs/, /check/, etc.
        landed = wait_for(
            self._check_login_progress,
            self.settings.login_timeout,
            self.settings.poll_interval,
        )
        if not landed:
            raise AuthenticationFailed(
                f"LinkedIn login timed out — never reached a logged-in page (last URL: {self.page.url})."
            )
        self.log.info("LinkedIn login successful.")

    def _check_login_progress(self) -> bool:
        """Poll probe: True once logged in; raises on terminal login failures."""
        url = self.page.url
        if is_challenge_url(url):
            raise AuthenticationFailed(f"LinkedIn security challenge at: {url}")
        if is_logged_in_url(url):
            return True
        error = self.locator.find_login_error()
        if error is not None:
            raise AuthenticationFailed(
                f"LinkedIn login failed — bad credentials: {truncate(error.inner_text().strip())}"
            )
        return False

    # ── Search ───────────────────────────────────────────────
    def open_search(self, query: SearchQuery) -> int:
        """Navigate to the Easy Apply results and wait for the first cards.

        Returns the number of cards rendered; raises NoResultsFound on zero.
        """
        search_url = build_search_url(query.title, query.location)
        self.log.info(f"Searching: '{query.title}' in '{query.location}'")
        self.page.goto(
            search_url,
            wait_until="domcontentloaded",
            timeout=int(self.settings.results_timeout * 1000),
        )

        count = wait_for(
            self.locator.count_job_cards,
            self.settings.results_timeout,
            self.settings.poll_interval,
        )
        if not count:
            raise NoResultsFound(
                f"No job cards rendered for '{query.title}' in '{query.location}' "
                f"within {self.settings.results_timeout:.0f}s."
            )
        self.log.info(f"First batch rendered: {count} cards.")
        return count

    # ── Card extraction ──────────────────────────────────────
    def extract_record(self, card: Locator) -> JobRecord:
        """Build a JobRecord from one card; raises CardExtractionError."""
        href = self.locator.card_link(card)
        job_id = self.locator.card_job_id(card, href)
        if not job_id:
            raise CardExtractionError("card has no job id")

        title = self.locator.card_title(card)
        if not title:
            raise CardExtractionError(f"card {job_id} has no title")
        company = self.locator.card_company(card)
        if not company:
            raise CardExtractionError(f"card {job_id} has no company")

        if href and not href.startswith("http"):
            href = f"{LINKEDIN_BASE_URL}{href}"
        # Card links carry tracking params; the canonical view URL is stable.
        url = job_view_url(job_id) if not href else href.split("?")[0]

        markup = self.locator.card_markup_text(card)
        return JobRecord(
            job_id=job_id,
            title=title.splitlines()[0].strip(),
            company=company.splitlines()[0].strip(),
            url=url,
            already_applied_hint=_looks_applied(markup),
        )

    # ── Collection ───────────────────────────────────────────
    def collect(self, query: SearchQuery, credentials: Credentials) -> Iterator[JobRecord]:
        """Log in, search, and yield every unique listing in discovery order.

        A generator: records are produced as the feed is scrolled. Raises
        AuthenticationFailed (run-fatal) or NoResultsFound (empty search).
        """
        self.login(credentials)
        self.open_search(query)
        yield from self.harvest()

    def harvest(self) -> Iterator[JobRecord]:
        """Scroll the already-open results feed until it stops growing."""
        seen: set[str] = set()
        self.scroll_count = 0
        self.iterations = 0

        while self.iterations < self.settings.max_scroll_iterations:
            self.iterations += 1
            cards = self.locator.find_job_cards()
            self.log.info(f"Found {len(cards)} job cards on iteration {self.iterations}")

            new_records = 0
            for card in cards:
                job_id = self.locator.card_job_id(card)
                if job_id and job_id in seen:
                    continue
                try:
                    record = self.extract_record(card)
                except CardExtractionError as e:
                    self.log.warning(f"Skipping job card: {e}")
                    if job_id:
                        seen.add(job_id)
                    continue
                except Exception as e:
                    self.log.warning(f"Skipping job card due to page error: {truncate(str(e))}")
                    continue
                if record.job_id in seen:
                    continue
                seen.add(record.job_id)
                new_records += 1
                self.log.debug(f"New listing: {record.company} — {record.title} ({record.job_id})")
                yield record

            if new_records == 0:
                self.log.info(f"No new jobs found in iteration {self.iterations}, stopping search")
                return

            if not self._load_more(cards):
                return

        self.log.warning(
            f"Stopped after the maximum of {self.settings.max_scroll_iterations} scroll iterations."
        )

    def _load_more(self, cards: list[Locator]) -> bool:
        """Scroll the last card into view; True if more cards rendered."""
        if not cards:
            return False
        before = len(cards)
        try:
            cards[-1].scroll_into_view_if_needed()
        except Exception as e:
            self.log.warning(f"Error during scroll operation: {truncate(str(e))}")
            return False
        self.scroll_count += 1
        pause(self.settings.scroll_pause_seconds)

        after = self.locator.count_job_cards()
        if after <= before:
            self.log.info("No additional jobs loaded after scroll, stopping search")
            return False
        self.log.debug(f"Scroll loaded {after - before} more cards ({after} total).")
        return True


def _looks_applied(card_text: str) -> bool:
    """Cards for jobs already applied to carry an "Applied" footer."""
    return any(line.strip().lower().startswith("applied") for line in card_text.splitlines())
