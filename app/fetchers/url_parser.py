"""Parse and validate LeetCode / GeeksforGeeks problem URLs."""
from __future__ import annotations

import re


_LEETCODE_RE = re.compile(r'^https://leetcode\.com/problems/([a-z0-9-]+)/?$')
_GFG_RE = re.compile(r'^https://www\.geeksforgeeks\.org/problems/([a-z0-9-]+)(?:/\d+)?$')

_PATTERNS = [
    (_LEETCODE_RE, 'leetcode'),
    (_GFG_RE, 'gfg'),
]


def parse_problem_url(url: str) -> tuple[str, str] | None:
    """Parse a problem URL, returning (platform_name, title_slug) or None."""
    if not isinstance(url, str) or not url:
        return None

    url = url.strip()
    for pattern, platform in _PATTERNS:
        m = pattern.match(url)
        if m:
            return (platform, m.group(1))

    return None


def is_valid_problem_url(url: str) -> bool:
    """True for a LeetCode problems path or a GFG problems path with optional numeric tail."""
    return parse_problem_url(url) is not None
