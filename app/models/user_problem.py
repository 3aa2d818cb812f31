from __future__ import annotations

import json
from datetime import datetime

from sqlalchemy import event
from sqlalchemy.orm import validates

from app.errors import NotFound, ValidationError
from app.extensions import db
from app.fetchers.url_parser import is_valid_problem_url

STATUS_TODO = 'Todo'
STATUS_COMPLETED = 'Completed'
STATUSES = (STATUS_TODO, STATUS_COMPLETED)

NOTES_MAX_LENGTH = 2000
REVISION_NOTES_MAX_LENGTH = 1000

_DATE_FMT = '%Y-%m-%dT%H:%M:%S.%fZ'


class UserProblem(db.Model):
    """A user's tracking record for one catalog problem.

    Revisions live inside the row as an ordered JSON list; they have no
    lifecycle of their own. Revision numbers are never reused.
    """

    __tablename__ = 'user_problem'
    __table_args__ = (
        db.UniqueConstraint(
            'user_id', 'problem_id',
            name='uq_user_problem_user_problem',
        ),
        db.Index('ix_user_problem_user_status', 'user_id', 'status'),
        db.Index('ix_user_problem_user_date_solved', 'user_id', 'date_solved'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey('user.id'), nullable=False, index=True
    )
    problem_id = db.Column(
        db.Integer, db.ForeignKey('problem.id'), nullable=False, index=True
    )
    problem_link = db.Column(db.String(500), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_TODO)
    notes = db.Column(db.Text, nullable=False, default='')
    date_solved = db.Column(db.DateTime, nullable=True)
    revision_history_json = db.Column(db.Text, nullable=False, default='[]')
    # Highest revision number ever issued, so deleting the newest never frees its number
    last_revision_no = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    user = db.relationship('User', back_populates='user_problems')
    problem = db.relationship('Problem', back_populates='user_problems', lazy='joined')

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @validates('status')
    def _validate_status(self, key, value):
        if value not in STATUSES:
            raise ValidationError(f"status must be one of {', '.join(STATUSES)}")
        return value

    @validates('notes')
    def _validate_notes(self, key, value):
        value = value or ''
        if not isinstance(value, str):
            raise ValidationError('notes must be a string')
        if len(value) > NOTES_MAX_LENGTH:
            raise ValidationError(f'notes must be at most {NOTES_MAX_LENGTH} characters')
        return value

    @validates('problem_link')
    def _validate_problem_link(self, key, value):
        value = value.strip() if isinstance(value, str) else ''
        if not is_valid_problem_url(value):
            raise ValidationError(
                'Invalid problem URL format. Must be a valid LeetCode or GeeksforGeeks URL'
            )
        return value

    def apply_status_invariant(self) -> None:
        """Completed always carries a solve date; Todo never does."""
        if self.status == STATUS_COMPLETED and self.date_solved is None:
            self.date_solved = datetime.utcnow()
        elif self.status == STATUS_TODO:
            self.date_solved = None

    # ------------------------------------------------------------------
    # Revision ledger
    # ------------------------------------------------------------------

    @property
    def revision_history(self) -> list[dict]:
        return load_revision_history(self.revision_history_json)

    @revision_history.setter
    def revision_history(self, value):
        self.revision_history_json = json.dumps(list(value or []), ensure_ascii=False)

    @property
    def next_revision_no(self) -> int:
        highest = max((r['revision_no'] for r in self.revision_history), default=0)
        return max(highest, self.last_revision_no or 0) + 1

    def add_revision(self, notes: str) -> dict:
        notes = _check_revision_notes(notes)
        revision = {
            'revision_no': self.next_revision_no,
            'revision_date': datetime.utcnow().strftime(_DATE_FMT),
            'revision_notes': notes,
        }
        self.revision_history = self.revision_history + [revision]
        self.last_revision_no = revision['revision_no']
        return revision

    def update_revision(self, revision_no: int, notes: str) -> dict:
        notes = _check_revision_notes(notes)
        history = self.revision_history
        for revision in history:
            if revision['revision_no'] == revision_no:
                revision['revision_notes'] = notes
                revision['revision_date'] = datetime.utcnow().strftime(_DATE_FMT)
                self.revision_history = history
                return revision
        raise NotFound(f'Revision {revision_no} not found')

    def delete_revision(self, revision_no: int) -> bool:
        """Remove a revision by number. Returns False when it was already absent."""
        history = self.revision_history
        remaining = [r for r in history if r['revision_no'] != revision_no]
        if len(remaining) == len(history):
            return False
        self.revision_history = remaining
        return True

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self, include_content: bool = False) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'problem': (
                self.problem.to_dict(include_content=include_content)
                if self.problem else None
            ),
            'problem_link': self.problem_link,
            'status': self.status,
            'notes': self.notes,
            'date_solved': (
                self.date_solved.strftime(_DATE_FMT) if self.date_solved else None
            ),
            'revision_history': self.revision_history,
            'created_at': self.created_at.strftime(_DATE_FMT) if self.created_at else None,
            'updated_at': self.updated_at.strftime(_DATE_FMT) if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return (
            f'<UserProblem {self.id} user={self.user_id} '
            f'problem={self.problem_id} status={self.status!r}>'
        )


def load_revision_history(text) -> list[dict]:
    """Decode a stored revision list, ordered by revision number."""
    try:
        history = json.loads(text or '[]')
    except (json.JSONDecodeError, TypeError):
        return []
    return sorted(history, key=lambda r: r['revision_no'])


def _check_revision_notes(notes) -> str:
    notes = (notes or '').strip() if isinstance(notes, str) else ''
    if not notes:
        raise ValidationError('revision_notes is required')
    if len(notes) > REVISION_NOTES_MAX_LENGTH:
        raise ValidationError(
            f'revision_notes must be at most {REVISION_NOTES_MAX_LENGTH} characters'
        )
    return notes


@event.listens_for(UserProblem, 'before_insert')
@event.listens_for(UserProblem, 'before_update')
def _status_invariant_on_flush(mapper, connection, target):
    target.apply_status_invariant()
