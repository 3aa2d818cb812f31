"""In-process TTL map of fallback bearer tokens.

Tokens exist only so the OAuth redirect can carry identity to a browser
that refuses the session cookie. Each entry maps an opaque token to a user
snapshot and is evicted by a one-shot scheduler job when it expires; lookup
also ignores entries past their expiry in case the job has not fired.
There is no renewal: an expired token sends the client back through OAuth.
"""
from __future__ import annotations

import hashlib
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


@dataclass
class _Entry:
    user: dict
    expires_at: datetime


class TokenStore:

    def __init__(self, ttl: timedelta = DEFAULT_TTL, scheduler=None, clock=None):
        self.ttl = ttl
        self._scheduler = scheduler
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, token) -> bool:
        return self.resolve(token) is not None

    def issue(self, user: dict) -> str:
        """Mint a token for a user snapshot and schedule its eviction."""
        token = secrets.token_urlsafe(32)
        expires_at = self._clock() + self.ttl
        with self._lock:
            self._entries[token] = _Entry(user=dict(user), expires_at=expires_at)
        if self._scheduler is not None:
            self._scheduler.schedule_once(
                self.evict, expires_at, self._job_id(token), args=[token]
            )
        logger.info(f"Issued fallback token for user {user.get('id')} (expires {expires_at:%Y-%m-%d %H:%M}Z)")
        return token

    def resolve(self, token) -> dict | None:
        """Return the user snapshot for a live token, else None."""
        if not token:
            return None
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[token]
                return None
            return dict(entry.user)

    def revoke(self, token) -> bool:
        """Delete a token before it expires. Returns False if it was unknown."""
        if not token:
            return False
        with self._lock:
            removed = self._entries.pop(token, None) is not None
        if removed:
            if self._scheduler is not None:
                self._scheduler.cancel(self._job_id(token))
            logger.info("Revoked fallback token")
        return removed

    def evict(self, token) -> None:
        """Scheduler callback: drop the token when its lifetime ends."""
        with self._lock:
            removed = self._entries.pop(token, None) is not None
        if removed:
            logger.debug("Evicted expired fallback token")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @staticmethod
    def _job_id(token: str) -> str:
        # Job ids show up in scheduler logs, so never the raw credential
        return f"token-evict:{hashlib.sha256(token.encode()).hexdigest()[:32]}"
