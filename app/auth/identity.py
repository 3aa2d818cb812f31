"""Resolve "who is calling" from the session cookie or a fallback token.

Strategies are tried in order and the first one that yields an identity
wins: the Flask-Login session, then ``Authorization: Bearer <token>``, then
a ``?token=`` query parameter. Whichever wins, the request sees the same
:class:`Identity` on ``g.identity``.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from functools import wraps

from flask import current_app, g, request
from flask_login import current_user

from app.errors import Unauthenticated
from app.extensions import csrf

logger = logging.getLogger(__name__)

SOURCE_SESSION = 'session'
SOURCE_BEARER = 'bearer'
SOURCE_QUERY = 'query'


@dataclass(frozen=True)
class Identity:
    user_id: int
    name: str
    email: str | None
    google_id: str
    profile_picture: str | None
    source: str

    @classmethod
    def from_snapshot(cls, user: dict, source: str) -> Identity:
        return cls(
            user_id=int(user['id']),
            name=user.get('name') or '',
            email=user.get('email'),
            google_id=user.get('google_id') or '',
            profile_picture=user.get('profile_picture'),
            source=source,
        )

    def to_user_dict(self) -> dict:
        data = asdict(self)
        data['id'] = data.pop('user_id')
        data.pop('source')
        return data


def bearer_token_from_request() -> str | None:
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip() or None
    return None


class SessionStrategy:
    source = SOURCE_SESSION

    def resolve(self) -> Identity | None:
        if current_user and current_user.is_authenticated:
            return Identity.from_snapshot(current_user.to_dict(), self.source)
        return None


class _TokenStrategy:
    source = ''

    def __init__(self, token_store):
        self.token_store = token_store

    def extract(self) -> str | None:
        raise NotImplementedError

    def resolve(self) -> Identity | None:
        token = self.extract()
        if not token:
            return None
        user = self.token_store.resolve(token)
        if user is None:
            return None
        return Identity.from_snapshot(user, self.source)


class BearerHeaderStrategy(_TokenStrategy):
    source = SOURCE_BEARER

    def extract(self) -> str | None:
        return bearer_token_from_request()


class QueryTokenStrategy(_TokenStrategy):
    source = SOURCE_QUERY

    def extract(self) -> str | None:
        return request.args.get('token') or None


class IdentityResolver:
    """First-match composition of identity strategies."""

    def __init__(self, strategies):
        self.strategies = list(strategies)

    @classmethod
    def default(cls, token_store) -> IdentityResolver:
        return cls([
            SessionStrategy(),
            BearerHeaderStrategy(token_store),
            QueryTokenStrategy(token_store),
        ])

    def resolve(self) -> Identity | None:
        for strategy in self.strategies:
            identity = strategy.resolve()
            if identity is not None:
                logger.debug(f"User {identity.user_id} authenticated via {identity.source}")
                return identity
        return None


def get_resolver() -> IdentityResolver:
    return current_app.extensions['identity_resolver']


def current_identity() -> Identity | None:
    """Resolve (once per request) and return the caller's identity."""
    if 'identity' not in g:
        g.identity = get_resolver().resolve()
    return g.identity


def auth_required(view):
    """Reject the request with 401 unless some strategy identifies the caller.

    Cookie-authenticated writes must also carry a CSRF token; token-based
    requests are not cookie-borne and skip that check.
    """
    @wraps(view)
    def wrapper(*args, **kwargs):
        identity = current_identity()
        if identity is None:
            logger.debug(f"No valid authentication for {request.method} {request.path}")
            raise Unauthenticated()
        if identity.source == SOURCE_SESSION and current_app.config.get('WTF_CSRF_ENABLED', True):
            csrf.protect()
        return view(*args, **kwargs)

    return wrapper
