"""Hacker News API access: client, story model and fetchers."""

from src.integrations.hackernews.client import HackerNewsClient
from src.integrations.hackernews.models import Story
from src.integrations.hackernews.stories import fetch_story, load_top_ids, with_fallback_url

__all__ = [
    "HackerNewsClient",
    "Story",
    "fetch_story",
    "load_top_ids",
    "with_fallback_url",
]
