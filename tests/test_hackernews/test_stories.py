"""Tests for the top story and item fetchers."""

from unittest.mock import MagicMock

import pytest

from src.integrations.hackernews import Story, fetch_story, load_top_ids, with_fallback_url
from src.utils.errors import DecodeError

ITEM_VIEW_URL = "https://news.ycombinator.com/item?id="


class TestFallbackUrl:
    """Tests for the display URL fallback rule."""

    def test_empty_url_uses_item_page(self):
        story = Story(id=42, title="Ask HN: Anyone else?", url="")

        result = with_fallback_url(story, ITEM_VIEW_URL)

        assert result.display_url == "https://news.ycombinator.com/item?id=42"

    def test_existing_url_left_unchanged(self):
        story = Story(id=42, title="Show HN", url="https://example.com/post")

        result = with_fallback_url(story, ITEM_VIEW_URL)

        assert result is story
        assert result.display_url == "https://example.com/post"

    def test_missing_url_field_uses_item_page(self):
        story = Story.model_validate({"id": 7, "title": "Ask HN", "type": "story"})

        assert with_fallback_url(story, ITEM_VIEW_URL).display_url == f"{ITEM_VIEW_URL}7"


class TestStoryModel:
    """Tests for Story decoding defaults."""

    def test_absent_fields_default_to_empty(self):
        story = Story.model_validate({"id": 1})

        assert story.author == ""
        assert story.title == ""
        assert story.kind == ""
        assert story.score == 0
        assert story.submitted_at == 0

    def test_null_fields_default_to_empty(self):
        story = Story.model_validate({"id": 1, "by": None, "url": None, "score": None})

        assert story.author == ""
        assert story.display_url == ""
        assert story.score == 0

    def test_story_is_immutable(self):
        story = Story(id=1)

        with pytest.raises(Exception):
            story.title = "changed"


def test_load_top_ids_requests_top_stories_url():
    """Test the ranked list comes from the top stories endpoint."""
    client = MagicMock()
    client.get_json.return_value = [5, 3, 9, 1]

    assert load_top_ids(client) == [5, 3, 9, 1]
    client.get_json.assert_called_once_with(
        "https://hacker-news.firebaseio.com/v0/topstories.json", list[int]
    )


def test_fetch_story_requests_item_url_and_applies_fallback():
    """Test the item endpoint is requested with the ID embedded in the path."""
    client = MagicMock()
    client.get_json.return_value = Story(id=42, title="Ask HN: Tips?", by="alice", type="story")

    story = fetch_story(client, 42)

    client.get_json.assert_called_once_with(
        "https://hacker-news.firebaseio.com/v0/item/42.json", Story
    )
    assert story.display_url == "https://news.ycombinator.com/item?id=42"
    assert story.author == "alice"


def test_fetch_story_uses_configured_item_view_url(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ITEM_VIEW_URL", "http://hn.local/item?id=")
    client = MagicMock()
    client.get_json.return_value = Story(id=9)

    assert fetch_story(client, 9).display_url == "http://hn.local/item?id=9"


def test_fetch_story_propagates_decode_error():
    client = MagicMock()
    client.get_json.side_effect = DecodeError("null item")

    with pytest.raises(DecodeError):
        fetch_story(client, 1)
