from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import requests

from app.errors import UpstreamError
from .common import FetchedProblem
from .rate_limiter import limiter_for


class BaseFetcher(ABC):
    """One upstream problem API.

    Requests are made once with a bounded timeout; failures are translated
    into :class:`UpstreamError` with a reason and never retried here.
    """

    PLATFORM_NAME: str = ""
    PLATFORM_DISPLAY: str = ""
    BASE_URL: str = ""
    PROBLEM_BASE_URL: str = ""
    USER_AGENT = (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/124.0 Safari/537.36'
    )

    def __init__(self, timeout: float = 8.0, min_interval: float = 0.5):
        self.timeout = timeout
        self.rate_limiter = limiter_for(self.PLATFORM_NAME, min_interval)
        self.logger = logging.getLogger(f'fetcher.{self.PLATFORM_NAME}')
        self.session = self._create_session()

    @abstractmethod
    def fetch_problem(self, title_slug: str) -> FetchedProblem:
        ...

    @abstractmethod
    def get_problem_url(self, title_slug: str) -> str:
        ...

    def clean_content(self, content: str) -> str:
        return (content or '').strip()

    def normalize_tags(self, tags) -> list[dict]:
        """Return tags as an ordered list of {name, slug} dicts."""
        return [
            {'name': t['name'], 'slug': t['slug']}
            for t in tags or []
            if isinstance(t, dict) and t.get('name') and t.get('slug')
        ]

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            'User-Agent': self.USER_AGENT,
            'Accept': 'application/json',
        })
        return session

    def _request(self, url, method='GET', title_slug='', **kwargs):
        self.rate_limiter.wait()
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            self.logger.warning(f"Timeout fetching {title_slug!r}: {e}")
            raise UpstreamError(
                UpstreamError.TIMEOUT,
                f"Request timeout: {self.PLATFORM_DISPLAY} took too long to respond",
                platform=self.PLATFORM_NAME,
            ) from e
        except requests.RequestException as e:
            self.logger.warning(f"Request to {url} failed: {e}")
            raise UpstreamError(
                UpstreamError.SERVER_ERROR,
                f"Failed to reach {self.PLATFORM_DISPLAY}: {e}",
                platform=self.PLATFORM_NAME,
            ) from e

        if resp.status_code == 404:
            raise self._not_found(title_slug)
        if resp.status_code == 429:
            self.logger.warning(f"{self.PLATFORM_DISPLAY} rate limited (429) for {title_slug!r}")
            raise UpstreamError(
                UpstreamError.RATE_LIMITED,
                f"Rate limited: too many requests to {self.PLATFORM_DISPLAY}",
                platform=self.PLATFORM_NAME,
            )
        if resp.status_code >= 500:
            self.logger.warning(f"{self.PLATFORM_DISPLAY} server error {resp.status_code} for {title_slug!r}")
            raise UpstreamError(
                UpstreamError.SERVER_ERROR,
                f"{self.PLATFORM_DISPLAY} server error",
                platform=self.PLATFORM_NAME,
            )
        if resp.status_code >= 400:
            raise UpstreamError(
                UpstreamError.BAD_RESPONSE,
                f"{self.PLATFORM_DISPLAY} rejected the request (HTTP {resp.status_code})",
                platform=self.PLATFORM_NAME,
            )
        return resp

    def _json(self, resp):
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(
                UpstreamError.BAD_RESPONSE,
                f"Invalid response from {self.PLATFORM_DISPLAY}",
                platform=self.PLATFORM_NAME,
            ) from e

    def _not_found(self, title_slug: str) -> UpstreamError:
        return UpstreamError(
            UpstreamError.NOT_FOUND,
            f'Problem with slug "{title_slug}" not found on {self.PLATFORM_DISPLAY}',
            platform=self.PLATFORM_NAME,
        )
