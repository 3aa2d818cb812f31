"""Shared test fixtures for the TrackMe test suite."""

from datetime import datetime, timedelta

import pytest

from app import create_app
from app.extensions import db as _db
from app.fetchers.common import FetchedProblem
from app.models import User, Problem, UserProblem


@pytest.fixture()
def app():
    """Create a Flask application configured for testing."""
    application = create_app('testing')
    yield application


@pytest.fixture()
def db(app):
    """Provide a clean database for each test."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def client(app, db):
    """Provide a Flask test client."""
    return app.test_client()


@pytest.fixture()
def isolated_client(app):
    """Test client whose requests each push their own app context.

    The ``db`` fixture keeps one context open, so ``g`` (and Flask-Login's
    cached user in it) would otherwise carry over between requests.
    Do not combine with ``db``; use ``app.app_context()`` for setup.
    """
    with app.app_context():
        _db.create_all()
    yield app.test_client()
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


def make_user(db, google_id='g-1', name='Ada', email='ada@example.com'):
    user = User(google_id=google_id, name=name, email=email)
    db.session.add(user)
    db.session.commit()
    return user


def make_problem(db, slug, difficulty='Easy', platform='leetcode', title=None, question_id=None):
    if platform == 'leetcode':
        url = f'https://leetcode.com/problems/{slug}/'
    else:
        url = f'https://www.geeksforgeeks.org/problems/{slug}/1'
    problem = Problem(
        platform=platform,
        question_id=question_id or slug,
        title_slug=slug,
        title=title or slug.replace('-', ' ').title(),
        content='<p>content</p>',
        difficulty=difficulty,
        problem_url=url,
    )
    problem.topic_tags = [{'name': 'Array', 'slug': 'array'}]
    db.session.add(problem)
    db.session.commit()
    return problem


def login_session(client, user_id):
    """Log a test client in through the Flask-Login session cookie."""
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user_id)
        sess['_fresh'] = True


@pytest.fixture()
def user(app, db):
    return make_user(db)


@pytest.fixture()
def token(app, user):
    """A live fallback bearer token for ``user``."""
    return app.extensions['token_store'].issue(user.to_dict())


@pytest.fixture()
def auth_headers(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture()
def sample_data(app, db, user):
    """Ten tracked problems for ``user``, three of them Hard.

    Returns a dict of plain IDs (not model objects) so they survive
    across Flask request context boundaries without DetachedInstanceError.
    """
    difficulties = ['Easy', 'Medium', 'Hard', 'Easy', 'Hard',
                    'Medium', 'Easy', 'Hard', 'Medium', 'Easy']
    problem_ids = []
    user_problem_ids = []
    now = datetime.utcnow()
    for i, difficulty in enumerate(difficulties):
        platform = 'gfg' if i % 5 == 4 else 'leetcode'
        problem = make_problem(db, f'problem-{i}', difficulty=difficulty, platform=platform)
        completed = i % 2 == 0
        up = UserProblem(
            user_id=user.id,
            problem_id=problem.id,
            problem_link=problem.problem_url,
            status='Completed' if completed else 'Todo',
            date_solved=now - timedelta(days=i) if completed else None,
        )
        up.revision_history = []
        db.session.add(up)
        db.session.commit()
        problem_ids.append(problem.id)
        user_problem_ids.append(up.id)

    return {
        'user_id': user.id,
        'problem_ids': problem_ids,
        'user_problem_ids': user_problem_ids,
    }


def leetcode_payload(slug='two-sum', difficulty='Easy', question_id='1'):
    return FetchedProblem(
        question_id=question_id,
        title=slug.replace('-', ' ').title(),
        title_slug=slug,
        content='<p>Given   an array</p>\n  <p>of integers</p>',
        difficulty_raw=difficulty,
        tags=[{'name': 'Array', 'slug': 'array'}, {'name': 'Hash Table', 'slug': 'hash-table'}],
    )


def gfg_payload(slug='count-subarray-with-given-xor', difficulty='medium'):
    return FetchedProblem(
        question_id='700',
        title='Count Subarray With Given XOR',
        title_slug=slug,
        content='<p style="font-family: Arial">x&nbsp;y</p>',
        difficulty_raw=difficulty,
        tags=['Bit Magic', 'Hash & Map'],
    )
