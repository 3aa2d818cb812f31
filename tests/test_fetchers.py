"""Tests for the fetcher registry, URL parsing and upstream response mapping."""

import logging
from unittest.mock import MagicMock

import pytest
import requests

from app.errors import UpstreamError
from app.fetchers import FETCHERS, get_fetcher
from app.fetchers.common import normalize_difficulty, slugify_tag
from app.fetchers.gfg import GFGFetcher
from app.fetchers.leetcode import LeetCodeFetcher
from app.fetchers.rate_limiter import RateLimiter, limiter_for
from app.fetchers.url_parser import is_valid_problem_url, parse_problem_url


def _response(status_code=200, payload=None, json_error=False):
    resp = MagicMock()
    resp.status_code = status_code
    if json_error:
        resp.json.side_effect = ValueError('No JSON object could be decoded')
    else:
        resp.json.return_value = payload
    return resp


def _fetcher(cls, resp=None, side_effect=None):
    fetcher = cls(timeout=1.0, min_interval=0.0)
    fetcher.session = MagicMock()
    if side_effect is not None:
        fetcher.session.request.side_effect = side_effect
    else:
        fetcher.session.request.return_value = resp
    return fetcher


class TestFetcherRegistry:
    def test_platforms(self):
        assert FETCHERS == {'leetcode': LeetCodeFetcher, 'gfg': GFGFetcher}

    def test_get_fetcher_passes_options(self):
        fetcher = get_fetcher('gfg', timeout=3.0, min_interval=0.0)
        assert isinstance(fetcher, GFGFetcher)
        assert fetcher.timeout == 3.0
        assert fetcher.rate_limiter.min_interval == 0.0

    def test_get_fetcher_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown platform"):
            get_fetcher('codeforces')


class TestUrlParser:
    @pytest.mark.parametrize('url,expected', [
        ('https://leetcode.com/problems/two-sum/', ('leetcode', 'two-sum')),
        ('https://leetcode.com/problems/two-sum', ('leetcode', 'two-sum')),
        ('  https://leetcode.com/problems/lru-cache/  ', ('leetcode', 'lru-cache')),
        ('https://www.geeksforgeeks.org/problems/count-subarray-with-given-xor/1',
         ('gfg', 'count-subarray-with-given-xor')),
        ('https://www.geeksforgeeks.org/problems/reverse-a-string',
         ('gfg', 'reverse-a-string')),
    ])
    def test_parse_valid(self, url, expected):
        assert parse_problem_url(url) == expected

    @pytest.mark.parametrize('url', [
        None,
        123,
        '',
        'two-sum',
        'http://leetcode.com/problems/two-sum/',
        'https://leetcode.com/problems/two-sum/description/',
        'https://www.geeksforgeeks.org/problems/reverse-a-string/abc',
        'https://geeksforgeeks.org/problems/reverse-a-string/1',
    ])
    def test_parse_invalid(self, url):
        assert parse_problem_url(url) is None
        assert is_valid_problem_url(url) is False


class TestNormalization:
    @pytest.mark.parametrize('raw,expected', [
        ('Easy', 'Easy'),
        ('easy', 'Easy'),
        ('MEDIUM', 'Medium'),
        (' Hard ', 'Hard'),
    ])
    def test_known_difficulties(self, raw, expected):
        assert normalize_difficulty(raw, 'gfg') == expected

    @pytest.mark.parametrize('raw', ['Basic', 'School', None, ''])
    def test_unknown_difficulty_defaults_to_medium_with_warning(self, raw, caplog):
        with caplog.at_level(logging.WARNING, logger='app.fetchers.common'):
            assert normalize_difficulty(raw, 'gfg') == 'Medium'
        assert 'defaulting to Medium' in caplog.text

    def test_slugify_tag(self):
        assert slugify_tag('Bit Magic') == 'bit-magic'
        assert slugify_tag('Hash & Map') == 'hash--map'
        assert slugify_tag('  Dynamic   Programming ') == 'dynamic-programming'


class TestLeetCodeFetcher:
    QUESTION = {
        'questionId': '1',
        'title': 'Two Sum',
        'titleSlug': 'two-sum',
        'content': '<p>Given an array</p>',
        'difficulty': 'Easy',
        'topicTags': [{'name': 'Array', 'slug': 'array'}],
    }

    def test_fetch_problem(self):
        fetcher = _fetcher(
            LeetCodeFetcher, _response(payload={'data': {'question': self.QUESTION}})
        )
        fetched = fetcher.fetch_problem('two-sum')

        assert fetched.question_id == '1'
        assert fetched.title == 'Two Sum'
        assert fetched.difficulty_raw == 'Easy'
        assert fetched.tags == [{'name': 'Array', 'slug': 'array'}]

        args, kwargs = fetcher.session.request.call_args
        assert args == ('POST', LeetCodeFetcher.GRAPHQL_URL)
        assert kwargs['json']['variables'] == {'titleSlug': 'two-sum'}
        assert kwargs['timeout'] == 1.0

    def test_missing_question_is_not_found(self):
        fetcher = _fetcher(LeetCodeFetcher, _response(payload={'data': {'question': None}}))
        with pytest.raises(UpstreamError) as exc_info:
            fetcher.fetch_problem('no-such-problem')
        assert exc_info.value.reason == UpstreamError.NOT_FOUND
        assert exc_info.value.status_code == 404
        assert 'no-such-problem' in exc_info.value.message

    def test_graphql_errors_are_bad_response(self):
        fetcher = _fetcher(
            LeetCodeFetcher, _response(payload={'errors': [{'message': 'bad query'}]})
        )
        with pytest.raises(UpstreamError) as exc_info:
            fetcher.fetch_problem('two-sum')
        assert exc_info.value.reason == UpstreamError.BAD_RESPONSE
        assert 'bad query' in exc_info.value.message

    def test_clean_content_collapses_whitespace(self):
        fetcher = LeetCodeFetcher(min_interval=0.0)
        assert fetcher.clean_content('<p>a   b</p>\n  <p>c</p>') == '<p>a b</p><p>c</p>'
        assert fetcher.clean_content(None) == ''

    def test_problem_url(self):
        fetcher = LeetCodeFetcher(min_interval=0.0)
        assert fetcher.get_problem_url('two-sum') == 'https://leetcode.com/problems/two-sum/'


class TestGFGFetcher:
    def test_fetch_problem(self):
        payload = {
            'status': 'success',
            'results': {
                'id': 700,
                'problem_name': 'Count Subarray With Given XOR',
                'slug': 'count-subarray-with-given-xor',
                'problem_question': '<p>x</p>',
                'difficulty': 'Medium',
                'tags': {'topic_tags': ['Bit Magic', 'Hash']},
            },
        }
        fetcher = _fetcher(GFGFetcher, _response(payload=payload))
        fetched = fetcher.fetch_problem('count-subarray-with-given-xor')

        assert fetched.question_id == '700'
        assert fetched.title == 'Count Subarray With Given XOR'
        assert fetched.tags == ['Bit Magic', 'Hash']
        args, _ = fetcher.session.request.call_args
        assert args == ('GET', f'{GFGFetcher.BASE_URL}/count-subarray-with-given-xor')

    @pytest.mark.parametrize('payload', [
        {'status': False, 'results': {'id': 1}},
        {'status': 'success', 'results': None},
        ['not', 'a', 'dict'],
    ])
    def test_invalid_body_is_bad_response(self, payload):
        fetcher = _fetcher(GFGFetcher, _response(payload=payload))
        with pytest.raises(UpstreamError) as exc_info:
            fetcher.fetch_problem('whatever')
        assert exc_info.value.reason == UpstreamError.BAD_RESPONSE
        assert exc_info.value.status_code == 502

    def test_normalize_tags_derives_slugs(self):
        fetcher = GFGFetcher(min_interval=0.0)
        assert fetcher.normalize_tags(['Bit Magic', '', {'name': 'Arrays'}]) == [
            {'name': 'Bit Magic', 'slug': 'bit-magic'},
            {'name': 'Arrays', 'slug': 'arrays'},
        ]

    def test_clean_content_strips_styles_and_entities(self):
        fetcher = GFGFetcher(min_interval=0.0)
        html = (
            '<p style="font-family: Arial">a&nbsp;b &amp; c</p>'
            '<span style="background-color: #fff">d</span>'
        )
        assert fetcher.clean_content(html) == '<p>a b & c</p><span>d</span>'

    def test_problem_url(self):
        fetcher = GFGFetcher(min_interval=0.0)
        assert fetcher.get_problem_url('reverse-a-string') == (
            'https://www.geeksforgeeks.org/problems/reverse-a-string/1'
        )


class TestUpstreamErrorMapping:
    @pytest.mark.parametrize('status_code,reason,http_status', [
        (404, UpstreamError.NOT_FOUND, 404),
        (429, UpstreamError.RATE_LIMITED, 429),
        (500, UpstreamError.SERVER_ERROR, 502),
        (503, UpstreamError.SERVER_ERROR, 502),
        (403, UpstreamError.BAD_RESPONSE, 502),
    ])
    def test_http_status(self, status_code, reason, http_status):
        fetcher = _fetcher(GFGFetcher, _response(status_code=status_code))
        with pytest.raises(UpstreamError) as exc_info:
            fetcher.fetch_problem('reverse-a-string')
        assert exc_info.value.reason == reason
        assert exc_info.value.status_code == http_status
        assert exc_info.value.platform == 'gfg'

    def test_timeout(self):
        fetcher = _fetcher(LeetCodeFetcher, side_effect=requests.Timeout('read timed out'))
        with pytest.raises(UpstreamError) as exc_info:
            fetcher.fetch_problem('two-sum')
        assert exc_info.value.reason == UpstreamError.TIMEOUT
        assert exc_info.value.status_code == 504

    def test_connection_error(self):
        fetcher = _fetcher(LeetCodeFetcher, side_effect=requests.ConnectionError('refused'))
        with pytest.raises(UpstreamError) as exc_info:
            fetcher.fetch_problem('two-sum')
        assert exc_info.value.reason == UpstreamError.SERVER_ERROR

    def test_invalid_json(self):
        fetcher = _fetcher(LeetCodeFetcher, _response(json_error=True))
        with pytest.raises(UpstreamError) as exc_info:
            fetcher.fetch_problem('two-sum')
        assert exc_info.value.reason == UpstreamError.BAD_RESPONSE

    def test_single_attempt(self):
        fetcher = _fetcher(GFGFetcher, _response(status_code=500))
        with pytest.raises(UpstreamError):
            fetcher.fetch_problem('reverse-a-string')
        assert fetcher.session.request.call_count == 1


class TestRateLimiter:
    def test_first_call_does_not_wait(self):
        sleep = MagicMock()
        limiter = RateLimiter(min_interval=1.0, clock=lambda: 100.0, sleep=sleep)
        assert limiter.wait() == 0
        sleep.assert_not_called()

    def test_waits_for_min_interval(self):
        sleep = MagicMock()
        clock = MagicMock(side_effect=[100.0, 100.2])
        limiter = RateLimiter(min_interval=1.0, clock=clock, sleep=sleep)
        limiter.wait()
        assert limiter.wait() == pytest.approx(0.8)
        sleep.assert_called_once()
        assert sleep.call_args[0][0] == pytest.approx(0.8)

    def test_concurrent_callers_queue_up(self):
        sleep = MagicMock()
        limiter = RateLimiter(min_interval=0.5, clock=lambda: 10.0, sleep=sleep)
        delays = [limiter.wait() for _ in range(3)]
        assert delays == [0, 0.5, 1.0]

    def test_no_wait_when_interval_elapsed(self):
        sleep = MagicMock()
        clock = MagicMock(side_effect=[100.0, 200.0])
        limiter = RateLimiter(min_interval=0.5, clock=clock, sleep=sleep)
        limiter.wait()
        limiter.wait()
        sleep.assert_not_called()

    def test_platform_limiter_is_shared(self):
        first = limiter_for('test-platform', 0.5)
        second = limiter_for('test-platform', 0.0)
        assert first is second
        assert second.min_interval == 0.0
