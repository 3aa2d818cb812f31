import logging

from flask import Blueprint, current_app, jsonify, redirect, request, session, url_for
from flask_login import login_user, logout_user
from flask_wtf.csrf import generate_csrf

from app.auth import OAuthError, bearer_token_from_request, current_identity
from app.models import User

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

_STATE_KEY = 'oauth_state'


def _redirect_uri():
    return current_app.config.get('GOOGLE_REDIRECT_URI') or url_for(
        'auth.google_callback', _external=True
    )


def _client_url(path):
    return f"{current_app.config['CLIENT_URL'].rstrip('/')}{path}"


@auth_bp.route('/google')
def google_login():
    oauth = current_app.extensions['google_oauth']
    state = oauth.new_state()
    session[_STATE_KEY] = state
    return redirect(oauth.authorization_url(_redirect_uri(), state))


@auth_bp.route('/google/callback')
def google_callback():
    """Finish OAuth: log in with a session and also hand out a fallback token.

    Browsers that block the third-party session cookie still get identity
    through the ``token`` query parameter on the redirect.
    """
    expected_state = session.pop(_STATE_KEY, None)
    state_ok = bool(expected_state) and request.args.get('state') == expected_state
    if request.args.get('error') or not state_ok:
        logger.warning(
            f"OAuth callback rejected (error={request.args.get('error')!r}, state_ok={state_ok})"
        )
        return redirect(_client_url('/login?error=auth_failed'))

    oauth = current_app.extensions['google_oauth']
    try:
        profile = oauth.fetch_profile(request.args.get('code'), _redirect_uri())
    except OAuthError as e:
        logger.warning(f"OAuth callback failed: {e}")
        return redirect(_client_url('/login?error=auth_failed'))

    user = User.upsert_from_google(profile)
    login_user(user, remember=True)
    token = current_app.extensions['token_store'].issue(user.to_dict())
    logger.info(f"User {user.id} signed in via Google")
    return redirect(_client_url(f'/dsa?token={token}'))


@auth_bp.route('/check')
def check():
    identity = current_identity()
    if identity is None:
        return jsonify({'authenticated': False, 'user': None})
    return jsonify({
        'authenticated': True,
        'user': identity.to_user_dict(),
        'source': identity.source,
    })


@auth_bp.route('/token/<token>')
def resolve_token(token):
    user = current_app.extensions['token_store'].resolve(token)
    if user is None:
        return jsonify({'authenticated': False, 'user': None}), 401
    return jsonify({'authenticated': True, 'user': user})


@auth_bp.route('/csrf-token')
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    """Invalidate both credentials: the fallback token and the session."""
    token_store = current_app.extensions['token_store']
    for token in (bearer_token_from_request(), request.args.get('token')):
        if token:
            token_store.revoke(token)
    # session.clear() here would drop the marker that expires the remember cookie
    logout_user()
    session.pop(_STATE_KEY, None)
    session.pop('csrf_token', None)
    return jsonify({'message': 'Logged out successfully'})
