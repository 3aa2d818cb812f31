"""Minimal Google OAuth 2.0 authorization-code client."""
from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

import requests

logger = logging.getLogger(__name__)

AUTHORIZE_URL = 'https://accounts.google.com/o/oauth2/v2/auth'
TOKEN_URL = 'https://oauth2.googleapis.com/token'
USERINFO_URL = 'https://openidconnect.googleapis.com/v1/userinfo'
SCOPES = ('openid', 'profile', 'email')


class OAuthError(Exception):
    pass


class GoogleOAuthClient:

    def __init__(self, client_id: str, client_secret: str, timeout: float = 8.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.session = requests.Session()

    @staticmethod
    def new_state() -> str:
        return secrets.token_urlsafe(24)

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        params = {
            'client_id': self.client_id,
            'redirect_uri': redirect_uri,
            'response_type': 'code',
            'scope': ' '.join(SCOPES),
            'state': state,
            'prompt': 'select_account',
        }
        return f'{AUTHORIZE_URL}?{urlencode(params)}'

    def fetch_profile(self, code: str, redirect_uri: str) -> dict:
        """Exchange an authorization code and return the userinfo payload.

        The payload carries ``sub``, ``name``, ``email`` and ``picture``.
        """
        if not code:
            raise OAuthError('Missing authorization code')
        try:
            token_resp = self.session.post(TOKEN_URL, data={
                'code': code,
                'client_id': self.client_id,
                'client_secret': self.client_secret,
                'redirect_uri': redirect_uri,
                'grant_type': 'authorization_code',
            }, timeout=self.timeout)
            token_resp.raise_for_status()
            access_token = token_resp.json().get('access_token')
            if not access_token:
                raise OAuthError('Token response carried no access_token')

            info_resp = self.session.get(
                USERINFO_URL,
                headers={'Authorization': f'Bearer {access_token}'},
                timeout=self.timeout,
            )
            info_resp.raise_for_status()
            profile = info_resp.json()
        except requests.RequestException as e:
            logger.warning(f"Google OAuth exchange failed: {e}")
            raise OAuthError(str(e)) from e
        except ValueError as e:
            raise OAuthError('Invalid JSON from Google') from e

        if not profile.get('sub'):
            raise OAuthError('Userinfo response carried no subject')
        return profile
