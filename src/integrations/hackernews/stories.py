"""Top story and item fetchers built on HackerNewsClient."""

from src.integrations.hackernews.client import HackerNewsClient
from src.integrations.hackernews.models import Story
from src.utils.config import get_settings
from src.utils.logging_config import get_logger


def _get_logger():
    """Get logger instance lazily to avoid import-time config loading."""
    return get_logger(__name__)


def with_fallback_url(story: Story, item_view_url: str) -> Story:
    """Point stories without an external link at their Hacker News item page.

    Args:
        story: Decoded story
        item_view_url: Item page prefix, e.g. "https://news.ycombinator.com/item?id="

    Returns:
        The same story when it has a URL, otherwise a copy whose
        ``display_url`` is the prefix followed by the decimal ID
    """
    if story.display_url:
        return story
    return story.model_copy(update={"display_url": f"{item_view_url}{story.id}"})


def load_top_ids(client: HackerNewsClient) -> list[int]:
    """Fetch the full ranked list of top story IDs.

    Raises:
        TransportError: If the request fails
        DecodeError: If the body is not a JSON array of integers
    """
    ids = client.get_json(get_settings().top_stories_url, list[int])
    _get_logger().info(f"Loaded {len(ids)} top story ids")
    return ids


def fetch_story(client: HackerNewsClient, story_id: int) -> Story:
    """Fetch one story and apply the fallback display URL.

    Args:
        client: Shared API client
        story_id: Item to fetch

    Returns:
        Decoded story with a non-empty ``display_url``

    Raises:
        TransportError: If the request fails
        DecodeError: If the item is missing (``null``) or malformed
    """
    settings = get_settings()
    story = client.get_json(settings.item_url(story_id), Story)
    _get_logger().debug(f"Fetched story #{story_id}: {story.title!r}")
    return with_fallback_url(story, settings.ITEM_VIEW_URL)
