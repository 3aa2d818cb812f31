from datetime import timedelta

from flask import g

from .google import GoogleOAuthClient, OAuthError
from .identity import (
    Identity,
    IdentityResolver,
    auth_required,
    bearer_token_from_request,
    current_identity,
)
from .token_store import TokenStore


def init_auth(app):
    """Attach the token store, identity resolver and OAuth client to the app."""
    scheduler = None
    if app.config.get('SCHEDULER_ENABLED'):
        from app.tasks import scheduler

    token_store = TokenStore(
        ttl=timedelta(hours=app.config.get('AUTH_TOKEN_TTL_HOURS', 24)),
        scheduler=scheduler,
    )
    app.extensions['token_store'] = token_store
    app.extensions['identity_resolver'] = IdentityResolver.default(token_store)
    app.extensions['google_oauth'] = GoogleOAuthClient(
        app.config.get('GOOGLE_CLIENT_ID', ''),
        app.config.get('GOOGLE_CLIENT_SECRET', ''),
        timeout=app.config.get('FETCH_TIMEOUT', 8.0),
    )
    app.before_request(_reset_identity)
    return token_store


def _reset_identity():
    # Identity is resolved at most once per request
    g.pop('identity', None)


__all__ = [
    'GoogleOAuthClient',
    'Identity',
    'IdentityResolver',
    'OAuthError',
    'TokenStore',
    'auth_required',
    'bearer_token_from_request',
    'current_identity',
    'init_auth',
]
