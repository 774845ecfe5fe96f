"""Shared fixtures for the top stories tests."""

import shutil
import threading
from pathlib import Path
from typing import Callable

import pytest

from src.integrations.hackernews import Story
from src.news import reset_news_cache
from src.utils.config import reset_settings
from src.utils.errors import TransportError


@pytest.fixture(scope="session", autouse=True)
def backup_env_file():
    """Backup .env file during test session to prevent pollution."""
    env_file = Path(".env")
    backup_file = Path(".env.test_backup")

    if env_file.exists():
        shutil.copy(env_file, backup_file)
        env_file.unlink()

    yield

    if backup_file.exists():
        shutil.move(backup_file, env_file)


@pytest.fixture(autouse=True)
def fresh_singletons():
    """Each test starts with default settings and no shared cache."""
    reset_settings()
    reset_news_cache()
    yield
    reset_news_cache()
    reset_settings()


class FakeTimer:
    """Stand-in for ``threading.Timer`` that only fires when told to."""

    def __init__(self, interval: float, function: Callable[[], None]):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function()


class TimerRecorder:
    """Timer factory that keeps every timer it builds."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, interval: float, function: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


class FakeHackerNewsAPI:
    """In-memory API keyed by URL, counting requests.

    Implements the ``get_json`` surface of HackerNewsClient. Each item is
    served as a decoded Story, as the real client would after validation.
    """

    def __init__(self, top_ids: list[int], items: dict[int, dict] | None = None):
        self.top_ids = list(top_ids)
        self.items = items if items is not None else {
            story_id: {"id": story_id, "title": f"Story {story_id}", "by": "pg", "type": "story",
                       "url": f"https://example.com/{story_id}"}
            for story_id in top_ids
        }
        self.failing: dict[str, Exception] = {}
        self.top_requests = 0
        self.item_requests: list[int] = []
        self.gate: threading.Event | None = None
        self._count_lock = threading.Lock()

    def get_json(self, url: str, shape=None):
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if url.endswith("/topstories.json"):
            with self._count_lock:
                self.top_requests += 1
            if url in self.failing:
                raise self.failing[url]
            return list(self.top_ids)
        story_id = int(url.rsplit("/", 1)[1].removesuffix(".json"))
        with self._count_lock:
            self.item_requests.append(story_id)
        if url in self.failing:
            raise self.failing[url]
        if story_id not in self.items:
            raise TransportError(f"Request to {url} failed", url=url, status_code=404)
        return Story.model_validate(self.items[story_id])

    def close(self) -> None:
        pass


@pytest.fixture
def timers() -> TimerRecorder:
    return TimerRecorder()


@pytest.fixture
def fake_api() -> FakeHackerNewsAPI:
    return FakeHackerNewsAPI(top_ids=[5, 3, 9, 1])
