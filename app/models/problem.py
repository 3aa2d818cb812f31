import json
from datetime import datetime

from app.extensions import db

PLATFORMS = ('leetcode', 'gfg')
DIFFICULTIES = ('Easy', 'Medium', 'Hard')


class Problem(db.Model):
    """A catalog problem shared by every user that tracks it."""

    __tablename__ = 'problem'
    __table_args__ = (
        db.UniqueConstraint(
            'platform', 'title_slug',
            name='uq_problem_platform_title_slug',
        ),
        db.UniqueConstraint(
            'platform', 'question_id',
            name='uq_problem_platform_question_id',
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    platform = db.Column(db.String(20), nullable=False, index=True)
    question_id = db.Column(db.String(50), nullable=False)
    title_slug = db.Column(db.String(200), nullable=False, index=True)
    title = db.Column(db.String(300), nullable=False)
    content = db.Column(db.Text, nullable=False, default='')
    difficulty = db.Column(db.String(10), nullable=False, index=True)
    topic_tags_json = db.Column(db.Text, nullable=True)  # JSON: [{name, slug}]
    problem_url = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    user_problems = db.relationship(
        'UserProblem', back_populates='problem', lazy='dynamic'
    )

    @property
    def topic_tags(self):
        if self.topic_tags_json:
            try:
                return json.loads(self.topic_tags_json)
            except (json.JSONDecodeError, TypeError):
                return []
        return []

    @topic_tags.setter
    def topic_tags(self, value):
        self.topic_tags_json = json.dumps(value, ensure_ascii=False) if value else None

    def to_dict(self, include_content: bool = True) -> dict:
        data = {
            'id': self.id,
            'question_id': self.question_id,
            'title': self.title,
            'title_slug': self.title_slug,
            'platform': self.platform,
            'difficulty': self.difficulty,
            'topic_tags': self.topic_tags,
            'problem_url': self.problem_url,
        }
        if include_content:
            data['content'] = self.content
        return data

    def __repr__(self) -> str:
        return f'<Problem {self.platform}:{self.title_slug} {self.title!r}>'
