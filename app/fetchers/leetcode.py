from __future__ import annotations

import re

from app.errors import UpstreamError
from .base import BaseFetcher
from .common import FetchedProblem

_QUESTION_QUERY = """
query getQuestionDetail($titleSlug: String!) {
  question(titleSlug: $titleSlug) {
    questionId
    title
    titleSlug
    content
    difficulty
    topicTags {
      name
      slug
    }
  }
}
"""


class LeetCodeFetcher(BaseFetcher):
    PLATFORM_NAME = "leetcode"
    PLATFORM_DISPLAY = "LeetCode"
    BASE_URL = "https://leetcode.com"
    GRAPHQL_URL = "https://leetcode.com/graphql"
    PROBLEM_BASE_URL = "https://leetcode.com/problems"

    def __init__(self, timeout: float = 8.0, min_interval: float = 0.5):
        super().__init__(timeout=timeout, min_interval=min_interval)
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Referer': 'https://leetcode.com/',
            'Origin': 'https://leetcode.com',
        })

    def fetch_problem(self, title_slug: str) -> FetchedProblem:
        """Fetch one question through the public GraphQL endpoint."""
        resp = self._request(
            self.GRAPHQL_URL,
            method='POST',
            title_slug=title_slug,
            json={'query': _QUESTION_QUERY, 'variables': {'titleSlug': title_slug}},
        )
        data = self._json(resp)

        errors = data.get('errors') if isinstance(data, dict) else None
        if errors:
            messages = ', '.join(str(e.get('message', e)) for e in errors)
            raise UpstreamError(
                UpstreamError.BAD_RESPONSE,
                f"LeetCode API Error: {messages}",
                platform=self.PLATFORM_NAME,
            )

        question = ((data or {}).get('data') or {}).get('question')
        if not question:
            raise self._not_found(title_slug)

        return FetchedProblem(
            question_id=str(question.get('questionId', '')),
            title=question.get('title') or title_slug,
            title_slug=question.get('titleSlug') or title_slug,
            content=question.get('content') or '',
            difficulty_raw=question.get('difficulty'),
            tags=question.get('topicTags') or [],
        )

    def clean_content(self, content: str) -> str:
        """Collapse whitespace, including between tags."""
        if not content:
            return ''
        return re.sub(r'>\s+<', '><', re.sub(r'\s+', ' ', content)).strip()

    def get_problem_url(self, title_slug: str) -> str:
        return f"{self.PROBLEM_BASE_URL}/{title_slug}/"
