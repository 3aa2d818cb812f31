from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    EASY = 'Easy'
    MEDIUM = 'Medium'
    HARD = 'Hard'


@dataclass
class FetchedProblem:
    """Problem data as returned by an upstream API, before normalization."""

    question_id: str
    title: str
    title_slug: str
    content: str = ''
    difficulty_raw: str | None = None
    tags: list = field(default_factory=list)


def normalize_difficulty(raw, platform: str = '') -> str:
    """Map an upstream difficulty label onto Easy/Medium/Hard.

    Unknown labels fall back to Medium and are logged so the data-quality
    compromise stays visible.
    """
    normalized = str(raw or '').strip().lower()
    for level in Difficulty:
        if normalized == level.value.lower():
            return level.value
    logger.warning(
        f"Unknown difficulty {raw!r} from {platform or 'upstream'}, defaulting to Medium"
    )
    return Difficulty.MEDIUM.value


def slugify_tag(name: str) -> str:
    slug = re.sub(r'\s+', '-', name.strip().lower())
    return re.sub(r'[^a-z0-9-]', '', slug)
