"""Upstream problem APIs, one fetcher class per supported platform."""
from .gfg import GFGFetcher
from .leetcode import LeetCodeFetcher

FETCHERS = {cls.PLATFORM_NAME: cls for cls in (LeetCodeFetcher, GFGFetcher)}


def get_fetcher(platform: str, **kwargs):
    """Build the fetcher for ``platform``; kwargs go to its constructor."""
    cls = FETCHERS.get(platform)
    if cls is None:
        raise ValueError(f"Unknown platform: {platform}")
    return cls(**kwargs)
