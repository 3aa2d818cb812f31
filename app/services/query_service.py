"""Filtered, paginated views over a user's tracking records.

Two query plans exist on purpose:

* ``_tracking_plan`` handles filters that live on the tracking row itself
  (status, solve-date range). The total comes from a plain count.
* ``_catalog_plan`` handles filters on the joined catalog problem
  (difficulty, platform, title search). The filter is applied to the join
  before paging, and the total is counted over that filtered join, so
  ``total_items`` reflects only matching records whatever the page size.

``needs_catalog_plan`` picks between them.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import time

from flask import current_app
from sqlalchemy import case, func

from app.errors import ValidationError
from app.extensions import db
from app.models import Problem, UserProblem
from app.models.problem import DIFFICULTIES, PLATFORMS
from app.models.user_problem import (
    STATUSES, STATUS_COMPLETED, STATUS_TODO, load_revision_history,
)
from app.services.tracking_service import parse_date

logger = logging.getLogger(__name__)


@dataclass
class ProblemFilters:
    status: str | None = None
    difficulty: str | None = None
    platform: str | None = None
    search: str | None = None
    date_from: str | None = None
    date_to: str | None = None

    @classmethod
    def from_args(cls, args) -> ProblemFilters:
        """Build filters from request query args (camelCase or snake_case)."""
        def pick(*names):
            for name in names:
                value = args.get(name)
                if value not in (None, ''):
                    return value.strip() if isinstance(value, str) else value
            return None

        return cls(
            status=pick('status'),
            difficulty=pick('difficulty'),
            platform=pick('platform'),
            search=pick('search', 'q'),
            date_from=pick('dateFrom', 'date_from'),
            date_to=pick('dateTo', 'date_to'),
        )

    def validate(self) -> None:
        if self.status and self.status not in STATUSES:
            raise ValidationError(f"status must be one of {', '.join(STATUSES)}")
        if self.difficulty and self.difficulty not in DIFFICULTIES:
            raise ValidationError(f"difficulty must be one of {', '.join(DIFFICULTIES)}")
        if self.platform and self.platform not in PLATFORMS:
            raise ValidationError("platform must be either 'leetcode' or 'gfg'")


def needs_catalog_plan(filters: ProblemFilters) -> bool:
    """True when any filter needs the catalog join."""
    return bool(filters.difficulty or filters.platform or filters.search)


def _escape_like(text: str) -> str:
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class QueryService:

    @staticmethod
    def _base_query(user_id: int, filters: ProblemFilters):
        """Tracking-level filters: owner, status and inclusive UTC day range."""
        query = UserProblem.query.filter(UserProblem.user_id == user_id)
        if filters.status:
            query = query.filter(UserProblem.status == filters.status)
        if filters.date_from:
            start = parse_date(filters.date_from, 'dateFrom')
            query = query.filter(
                UserProblem.date_solved >= start.replace(hour=0, minute=0, second=0, microsecond=0)
            )
        if filters.date_to:
            end = parse_date(filters.date_to, 'dateTo')
            query = query.filter(
                UserProblem.date_solved <= end.replace(
                    hour=time.max.hour, minute=time.max.minute,
                    second=time.max.second, microsecond=time.max.microsecond,
                )
            )
        return query

    @staticmethod
    def _page(query, page: int, limit: int):
        total = query.order_by(None).count()
        items = (
            query.order_by(UserProblem.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @classmethod
    def _tracking_plan(cls, query, page: int, limit: int):
        return cls._page(query, page, limit)

    @classmethod
    def _catalog_plan(cls, query, filters: ProblemFilters, page: int, limit: int):
        # Inner join also drops records whose catalog row is missing
        query = query.join(Problem, UserProblem.problem_id == Problem.id)
        if filters.difficulty:
            query = query.filter(Problem.difficulty == filters.difficulty)
        if filters.platform:
            query = query.filter(Problem.platform == filters.platform)
        if filters.search:
            pattern = f'%{_escape_like(filters.search.lower())}%'
            query = query.filter(func.lower(Problem.title).like(pattern, escape="\\"))
        return cls._page(query, page, limit)

    @classmethod
    def list_user_problems(cls, user_id: int, filters: ProblemFilters, page=1, limit=None) -> dict:
        filters.validate()
        page, limit = cls._normalize_paging(page, limit)

        query = cls._base_query(user_id, filters)
        if needs_catalog_plan(filters):
            items, total = cls._catalog_plan(query, filters, page, limit)
        else:
            items, total = cls._tracking_plan(query, page, limit)

        return {
            'user_problems': [up.to_dict() for up in items],
            'pagination': {
                'current_page': page,
                'total_pages': math.ceil(total / limit),
                'total_items': total,
                'items_per_page': limit,
            },
        }

    @staticmethod
    def _normalize_paging(page, limit) -> tuple[int, int]:
        max_limit = current_app.config.get('PAGE_SIZE_MAX', 100)
        default_limit = current_app.config.get('PAGE_SIZE_DEFAULT', 10)
        try:
            page = int(page) if page not in (None, '') else 1
            limit = int(limit) if limit not in (None, '') else default_limit
        except (TypeError, ValueError):
            raise ValidationError('page and limit must be integers')
        if page < 1:
            raise ValidationError('page must be at least 1')
        if limit < 1:
            raise ValidationError('limit must be at least 1')
        return page, min(limit, max_limit)

    @staticmethod
    def get_user_stats(user_id: int) -> dict:
        """Totals by status and difficulty plus the number of revisions."""
        row = (
            db.session.query(
                func.count(UserProblem.id),
                func.sum(case((UserProblem.status == STATUS_COMPLETED, 1), else_=0)),
                func.sum(case((UserProblem.status == STATUS_TODO, 1), else_=0)),
                func.sum(case((Problem.difficulty == 'Easy', 1), else_=0)),
                func.sum(case((Problem.difficulty == 'Medium', 1), else_=0)),
                func.sum(case((Problem.difficulty == 'Hard', 1), else_=0)),
            )
            .select_from(UserProblem)
            .join(Problem, UserProblem.problem_id == Problem.id)
            .filter(UserProblem.user_id == user_id)
            .one()
        )

        histories = (
            db.session.query(UserProblem.revision_history_json)
            .filter(UserProblem.user_id == user_id)
            .all()
        )
        total_revisions = sum(len(load_revision_history(h)) for (h,) in histories)

        total, completed, todo, easy, medium, hard = (int(v or 0) for v in row)
        return {
            'total_problems': total,
            'completed_problems': completed,
            'todo_problems': todo,
            'easy_problems': easy,
            'medium_problems': medium,
            'hard_problems': hard,
            'total_revisions': total_revisions,
        }
