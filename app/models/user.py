from __future__ import annotations

from datetime import datetime

from flask_login import UserMixin

from app.extensions import db


class User(UserMixin, db.Model):
    """An account created on first Google sign-in."""

    __tablename__ = 'user'

    id = db.Column(db.Integer, primary_key=True)
    google_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), nullable=True, index=True)
    profile_picture = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    user_problems = db.relationship(
        'UserProblem',
        back_populates='user',
        cascade='all, delete-orphan',
        lazy='dynamic',
    )

    @classmethod
    def upsert_from_google(cls, profile: dict) -> User:
        """Find or create the user for a Google userinfo payload.

        Existing users only get their profile picture refreshed; the name
        they may have edited locally is kept.
        """
        google_id = str(profile['sub'])
        picture = profile.get('picture')
        user = cls.query.filter_by(google_id=google_id).first()
        if user is None:
            user = cls(
                google_id=google_id,
                name=profile.get('name') or profile.get('email') or google_id,
                email=profile.get('email'),
                profile_picture=picture,
            )
            db.session.add(user)
        elif picture and user.profile_picture != picture:
            user.profile_picture = picture
        db.session.commit()
        return user

    def to_dict(self) -> dict:
        """Identity snapshot shared by session and token authentication."""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'google_id': self.google_id,
            'profile_picture': self.profile_picture,
        }

    def __repr__(self) -> str:
        return f'<User {self.email!r}>'
