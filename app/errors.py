"""Error taxonomy shared by services and views.

Services raise these; ``register_error_handlers`` turns them (and anything
unexpected) into a JSON ``{"error": ..., "details": ...}`` body so a single
failing request never takes the process down.
"""
from __future__ import annotations

import logging

from flask import jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class TrackerError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {'error': self.message}
        if self.details is not None:
            body['details'] = self.details
        return body


class ValidationError(TrackerError):
    status_code = 400


class Unauthenticated(TrackerError):
    status_code = 401

    def __init__(self, message: str = 'Unauthorized', details=None):
        super().__init__(message, details)


class NotFound(TrackerError):
    status_code = 404


class AlreadyTracked(TrackerError):
    """The (user, problem) pair is already on the user's list."""

    status_code = 409

    def __init__(self, user_problem, message: str = 'Problem already added to your tracking list'):
        super().__init__(message)
        self.user_problem = user_problem

    def to_dict(self) -> dict:
        body = super().to_dict()
        body['user_problem'] = self.user_problem.to_dict()
        return body


class UpstreamError(TrackerError):
    """An external problem fetcher failed. Never retried."""

    NOT_FOUND = 'not_found'
    RATE_LIMITED = 'rate_limited'
    TIMEOUT = 'timeout'
    SERVER_ERROR = 'server_error'
    BAD_RESPONSE = 'bad_response'

    _STATUS_BY_REASON = {
        NOT_FOUND: 404,
        RATE_LIMITED: 429,
        TIMEOUT: 504,
        SERVER_ERROR: 502,
        BAD_RESPONSE: 502,
    }

    def __init__(self, reason: str, message: str, platform: str | None = None):
        super().__init__(message, details={'reason': reason, 'platform': platform})
        self.reason = reason
        self.platform = platform

    @property
    def status_code(self) -> int:
        return self._STATUS_BY_REASON.get(self.reason, 502)


def register_error_handlers(app):
    """Render every error raised during a request as JSON."""
    from app.extensions import db

    @app.errorhandler(TrackerError)
    def handle_tracker_error(exc):
        if exc.status_code >= 500:
            logger.warning(f'{type(exc).__name__}: {exc.message} ({exc.details})')
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc):
        return jsonify({'error': exc.description or exc.name}), exc.code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(exc):
        db.session.rollback()
        logger.warning(f'IntegrityError: {exc.orig}')
        return jsonify({'error': 'Data integrity error. This may be a duplicate entry.'}), 409

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        db.session.rollback()
        logger.exception(f'Unhandled exception: {exc}')
        return jsonify({'error': 'Internal server error'}), 500
