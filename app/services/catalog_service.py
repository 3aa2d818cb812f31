from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from app.errors import ValidationError
from app.extensions import db
from app.fetchers import get_fetcher
from app.fetchers.common import normalize_difficulty
from app.fetchers.url_parser import parse_problem_url
from app.models import Problem
from app.models.problem import PLATFORMS

logger = logging.getLogger(__name__)


class CatalogService:
    """Lazily populated, deduplicated problem catalog."""

    @staticmethod
    def parse_reference(title_slug, platform) -> tuple[str, str]:
        """Validate a (slug, platform) pair from a request body.

        A full problem URL is accepted in place of the slug; its platform
        then wins over the ``platform`` field.
        """
        title_slug = (title_slug or '').strip() if isinstance(title_slug, str) else ''
        if not title_slug:
            raise ValidationError('titleSlug is required')

        parsed = parse_problem_url(title_slug)
        if parsed:
            platform, title_slug = parsed

        platform = platform or 'leetcode'
        if platform not in PLATFORMS:
            raise ValidationError("platform must be either 'leetcode' or 'gfg'")
        return title_slug, platform

    @staticmethod
    def find_problem(title_slug: str, platform: str) -> Problem | None:
        return Problem.query.filter_by(title_slug=title_slug, platform=platform).first()

    @classmethod
    def resolve_problem(cls, title_slug: str, platform: str) -> Problem:
        """Return the catalog problem, fetching and storing it on first use.

        A hit never touches the upstream API. Upstream failures propagate as
        ``UpstreamError`` and nothing is written.
        """
        if platform not in PLATFORMS:
            raise ValidationError("platform must be either 'leetcode' or 'gfg'")

        problem = cls.find_problem(title_slug, platform)
        if problem is not None:
            return problem

        logger.info(f"Catalog miss for {platform}:{title_slug}, fetching upstream")
        fetcher = get_fetcher(
            platform,
            timeout=current_app.config.get('FETCH_TIMEOUT', 8.0),
            min_interval=current_app.config.get('FETCH_MIN_INTERVAL', 0.5),
        )
        fetched = fetcher.fetch_problem(title_slug)

        # Upstream may canonicalize the slug (e.g. case); dedup on the result too
        if fetched.title_slug != title_slug:
            problem = cls.find_problem(fetched.title_slug, platform)
            if problem is not None:
                return problem

        problem = Problem(
            platform=platform,
            question_id=fetched.question_id or fetched.title_slug,
            title_slug=fetched.title_slug,
            title=fetched.title,
            content=fetcher.clean_content(fetched.content),
            difficulty=normalize_difficulty(fetched.difficulty_raw, platform),
            problem_url=fetcher.get_problem_url(fetched.title_slug),
        )
        problem.topic_tags = fetcher.normalize_tags(fetched.tags)
        db.session.add(problem)
        try:
            db.session.commit()
        except IntegrityError:
            # Another request stored the same problem first
            db.session.rollback()
            existing = cls.find_problem(fetched.title_slug, platform)
            if existing is None:
                raise
            return existing

        logger.info(f"Cached {problem!r}")
        return problem
