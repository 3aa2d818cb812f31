from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from app.errors import AlreadyTracked, NotFound, Unauthenticated, ValidationError
from app.extensions import db
from app.models import UserProblem
from app.models.user_problem import STATUSES, STATUS_COMPLETED, STATUS_TODO
from app.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


def parse_date(value, field: str = 'date') -> datetime:
    """Parse an ISO date or datetime string into a naive UTC datetime."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} must be an ISO date')
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f'{field} must be an ISO date, got {value!r}')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class TrackingService:
    """Per-user tracking records and their revision ledgers.

    Every lookup is scoped to the caller: a record owned by someone else is
    reported exactly like a missing one.
    """

    @staticmethod
    def get_user_problem(user_id: int, user_problem_id: int) -> UserProblem:
        user_problem = UserProblem.query.filter_by(
            id=user_problem_id, user_id=user_id
        ).first()
        if user_problem is None:
            raise NotFound('User problem not found')
        return user_problem

    @classmethod
    def add_user_problem(
        cls,
        user_id,
        title_slug,
        platform='leetcode',
        status=STATUS_TODO,
        notes='',
        date_solved=None,
    ) -> UserProblem:
        if not user_id:
            raise Unauthenticated('User not authenticated')

        title_slug, platform = CatalogService.parse_reference(title_slug, platform)
        status = status or STATUS_TODO
        if status not in STATUSES:
            raise ValidationError(f"status must be one of {', '.join(STATUSES)}")
        if notes is not None and not isinstance(notes, str):
            raise ValidationError('notes must be a string')

        # Checked before resolving so a bad request never costs an upstream fetch
        if status == STATUS_COMPLETED and not date_solved:
            raise ValidationError('Date solved is required when status is Completed')
        solved_at = parse_date(date_solved, 'date_solved') if date_solved else None

        problem = CatalogService.resolve_problem(title_slug, platform)

        existing = UserProblem.query.filter_by(
            user_id=user_id, problem_id=problem.id
        ).first()
        if existing is not None:
            raise AlreadyTracked(existing)

        user_problem = UserProblem(
            user_id=user_id,
            problem_id=problem.id,
            problem_link=problem.problem_url,
            status=status,
            notes=notes or '',
            date_solved=solved_at if status == STATUS_COMPLETED else None,
        )
        user_problem.revision_history = []
        db.session.add(user_problem)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            existing = UserProblem.query.filter_by(
                user_id=user_id, problem_id=problem.id
            ).first()
            if existing is None:
                raise
            raise AlreadyTracked(existing)

        logger.info(f"User {user_id} started tracking {problem.platform}:{problem.title_slug}")
        return user_problem

    @classmethod
    def update_user_problem(cls, user_id, user_problem_id, changes: dict) -> UserProblem:
        """Partial update of status, notes, problem_link and date_solved.

        Only keys present (and not null) in ``changes`` are touched. The
        solve date follows the status on flush: stamped when a record turns
        Completed without one, cleared when it goes back to Todo.
        """
        user_problem = cls.get_user_problem(user_id, user_problem_id)

        if changes.get('status') is not None:
            user_problem.status = changes['status']
            if changes['status'] == STATUS_TODO:
                user_problem.date_solved = None
        if changes.get('date_solved') is not None:
            user_problem.date_solved = parse_date(changes['date_solved'], 'date_solved')
        if changes.get('notes') is not None:
            user_problem.notes = changes['notes']
        if changes.get('problem_link') is not None:
            user_problem.problem_link = changes['problem_link']

        db.session.commit()
        return user_problem

    @classmethod
    def delete_user_problem(cls, user_id, user_problem_id) -> None:
        """Remove the tracking record; the catalog problem stays."""
        deleted = UserProblem.query.filter_by(
            id=user_problem_id, user_id=user_id
        ).delete(synchronize_session=False)
        if not deleted:
            db.session.rollback()
            raise NotFound('User problem not found')
        db.session.commit()
        logger.info(f"User {user_id} deleted tracking record {user_problem_id}")

    # ------------------------------------------------------------------
    # Revisions
    # ------------------------------------------------------------------

    @classmethod
    def add_revision(cls, user_id, user_problem_id, notes) -> UserProblem:
        user_problem = cls.get_user_problem(user_id, user_problem_id)
        user_problem.add_revision(notes)
        db.session.commit()
        return user_problem

    @classmethod
    def update_revision(cls, user_id, user_problem_id, revision_no: int, notes) -> UserProblem:
        user_problem = cls.get_user_problem(user_id, user_problem_id)
        user_problem.update_revision(revision_no, notes)
        db.session.commit()
        return user_problem

    @classmethod
    def delete_revision(cls, user_id, user_problem_id, revision_no: int) -> UserProblem:
        """Idempotent: deleting an absent revision number is not an error."""
        user_problem = cls.get_user_problem(user_id, user_problem_id)
        if user_problem.delete_revision(revision_no):
            db.session.commit()
        return user_problem
