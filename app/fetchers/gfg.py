from __future__ import annotations

import re

from app.errors import UpstreamError
from .base import BaseFetcher
from .common import FetchedProblem, slugify_tag

# Inline styles that break the client's typography when rendered verbatim
_FONT_FAMILY_STYLE_RE = re.compile(r'\s+style="[^"]*font-family:[^"]*"', re.IGNORECASE)
_BACKGROUND_STYLE_RE = re.compile(r'\s+style="[^"]*background-color:[^"]*"', re.IGNORECASE)

_ENTITIES = (
    ('&nbsp;', ' '),
    ('&amp;', '&'),
    ('&quot;', '"'),
    ('&#39;', "'"),
)


class GFGFetcher(BaseFetcher):
    PLATFORM_NAME = "gfg"
    PLATFORM_DISPLAY = "GeeksforGeeks"
    BASE_URL = "https://practiceapi.geeksforgeeks.org/api/latest/problems"
    PROBLEM_BASE_URL = "https://www.geeksforgeeks.org/problems"

    def fetch_problem(self, title_slug: str) -> FetchedProblem:
        resp = self._request(f"{self.BASE_URL}/{title_slug}", title_slug=title_slug)
        data = self._json(resp)

        if not isinstance(data, dict) or not data.get('status') or not data.get('results'):
            raise UpstreamError(
                UpstreamError.BAD_RESPONSE,
                "Invalid response from GeeksforGeeks API",
                platform=self.PLATFORM_NAME,
            )

        problem = data['results']
        tags = (problem.get('tags') or {}).get('topic_tags') or []
        return FetchedProblem(
            question_id=str(problem.get('id', '')),
            title=problem.get('problem_name') or title_slug,
            title_slug=problem.get('slug') or title_slug,
            content=problem.get('problem_question') or '',
            difficulty_raw=problem.get('difficulty'),
            tags=tags,
        )

    def clean_content(self, content: str) -> str:
        """Decode a few entities and drop layout-breaking inline styles; keep HTML."""
        if not content:
            return ''
        for entity, char in _ENTITIES:
            content = content.replace(entity, char)
        content = _FONT_FAMILY_STYLE_RE.sub('', content)
        content = _BACKGROUND_STYLE_RE.sub('', content)
        return content.strip()

    def normalize_tags(self, tags) -> list[dict]:
        """GFG sends bare tag names; derive the slug from the name."""
        result = []
        for tag in tags or []:
            name = tag.get('name') if isinstance(tag, dict) else tag
            if not name:
                continue
            result.append({'name': str(name), 'slug': slugify_tag(str(name))})
        return result

    def get_problem_url(self, title_slug: str) -> str:
        return f"{self.PROBLEM_BASE_URL}/{title_slug}/1"
