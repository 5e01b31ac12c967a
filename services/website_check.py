from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

import requests
from bs4 import BeautifulSoup

from config.settings import get_settings


logger = logging.getLogger(__name__)

_EMAIL_SHAPED_RE = re.compile(r"\b\w+@\w+\.\w+\b")


@dataclass(frozen=True)
class WebsiteCheckResult:
    valid: bool
    score: int


def visible_word_count(html: str) -> int:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.extract()
    return len((soup.get_text(" ") or "").split())


def score_html(html: str) -> int:
    """Heuristic quality score for a homepage.

    Rewards signals of a real business site (title, contact/about pages,
    an email address, navigation) and penalizes error and placeholder pages.
    """
    lowered = html.lower()
    score = 0

    if "<title>" in html:
        score += 20
    if "contact" in lowered:
        score += 15
    if "about" in lowered:
        score += 15
    if _EMAIL_SHAPED_RE.search(html):
        score += 20
    if "linkedin" in lowered:
        score += 10
    if "privacy" in lowered:
        score += 10
    if "</nav>" in html:
        score += 10

    words = visible_word_count(html)
    if words > 500:
        score += 20
    if words > 1000:
        score += 10

    if "404" in html or "not found" in html:
        score -= 50
    if "under construction" in html:
        score -= 30
    if "coming soon" in html:
        score -= 30

    return score


class WebsiteQualityChecker:
    """Fetches a company website and decides whether it looks like a live business site."""

    def __init__(
        self,
        min_score: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        settings = get_settings()
        self.min_score = settings.website_min_score if min_score is None else min_score
        self.timeout_seconds = timeout_seconds or settings.http_timeout_seconds
        self.user_agent = user_agent or settings.website_user_agent
        self.session = session

    def _get(self, url: str) -> requests.Response:
        getter = self.session.get if self.session is not None else requests.get
        return getter(url, timeout=self.timeout_seconds, headers={"User-Agent": self.user_agent})

    def check(self, url: str) -> WebsiteCheckResult:
        try:
            resp = self._get(url)
        except requests.exceptions.RequestException as e:
            logger.info("Website unreachable: %s", url, extra={"step": "website_check", "error": str(e)})
            return WebsiteCheckResult(valid=False, score=0)

        if not resp.ok:
            logger.info(
                "Website returned HTTP %s: %s",
                resp.status_code,
                url,
                extra={"step": "website_check", "status": resp.status_code},
            )
            return WebsiteCheckResult(valid=False, score=0)

        score = score_html(resp.text or "")
        return WebsiteCheckResult(valid=score > self.min_score, score=score)

    def is_reachable(self, url: str) -> bool:
        return self.check(url).valid


class AlwaysReachable:
    """Reachability checker that accepts every website (local fixtures, SKIP_WEBSITE_CHECK)."""

    def is_reachable(self, url: str) -> bool:
        return True
