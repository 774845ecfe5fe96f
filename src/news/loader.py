"""Concurrent fan-out of story fetches."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Sequence

from src.integrations.hackernews import HackerNewsClient, Story, fetch_story
from src.utils.config import get_settings
from src.utils.logging_config import get_logger


def _get_logger():
    """Get logger instance lazily to avoid import-time config loading."""
    return get_logger(__name__)


def load_stories(client: HackerNewsClient, ids: Sequence[int]) -> dict[int, Story]:
    """Fetch every story in ``ids`` in parallel and key them by story ID.

    One task per ID runs on its own worker thread, so a slow request only
    blocks its own thread. Returns once every task has finished.

    Args:
        client: Shared API client
        ids: Story IDs to fetch, typically a prefix of the ranked list

    Returns:
        Mapping of story ID to story

    Raises:
        TransportError: If any fetch fails; remaining fetches are cancelled
        DecodeError: If any item is missing or malformed
    """
    if not ids:
        return {}

    max_workers = min(len(ids), get_settings().MAX_FETCH_WORKERS)
    stories: dict[int, Story] = {}

    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="story-fetch")
    try:
        futures = [executor.submit(fetch_story, client, story_id) for story_id in ids]
        for future in as_completed(futures):
            # The first failure propagates; the caller's ErrorContext reports it
            story = future.result()
            stories[story.id] = story
    finally:
        # Queued fetches are dropped on failure; running ones finish before we return
        executor.shutdown(wait=True, cancel_futures=True)

    _get_logger().info(f"Loaded {len(stories)} stories")
    return stories
