"""Process-wide cache of the top stories.

The cache holds one snapshot: the ranked top story IDs plus the stories
for the first ``wanted`` of them. ``fetch()`` reloads the snapshot when it
is not fresh; a timer marks it stale again after the refresh interval and
reloads it in the background.

A single lock guards the snapshot. It is held for the whole reload, so
callers that arrive mid-reload wait for it and never see a half-built
table. Readers take the same lock.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from src.integrations.hackernews import HackerNewsClient, Story, load_top_ids
from src.news.loader import load_stories
from src.news.ordering import project_stories
from src.utils.config import get_settings
from src.utils.errors import (
    CacheNotLoadedError,
    DataIntegrityError,
    ErrorContext,
    NewsError,
    backoff_delay,
)
from src.utils.logging_config import get_logger

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


def _get_logger():
    """Get logger instance lazily to avoid import-time config loading."""
    return get_logger(__name__)


def _check_snapshot(ranked_ids: list[int], stories: dict[int, Story], wanted: int) -> None:
    """Reject a snapshot whose table does not match its ranked list."""
    ranked = set(ranked_ids)
    for story_id in stories:
        if story_id not in ranked:
            raise DataIntegrityError(
                f"Loaded story #{story_id} is not in the ranked list", story_id=story_id
            )
    # Raises for any ranked id in the prefix that has no story
    project_stories(ranked_ids, stories, wanted)


class NewsCache:
    """Shared, self-refreshing snapshot of the top stories.

    Args:
        client: API client used for every reload
        wanted: Number of stories to materialize (NUM_WANTED_STORIES)
        refresh_interval: Seconds a snapshot stays fresh; 0 disables the
            periodic refresh (REFRESH_INTERVAL_SECONDS)
        retry_delay: Delay before retrying a failed reload (REFRESH_RETRY_DELAY)
        backoff_factor: Retry delay multiplier per consecutive failure
            (REFRESH_BACKOFF_FACTOR)
        timer_factory: Builds the one-shot timers; ``threading.Timer`` by default
    """

    def __init__(
        self,
        client: HackerNewsClient,
        wanted: Optional[int] = None,
        refresh_interval: Optional[float] = None,
        retry_delay: Optional[float] = None,
        backoff_factor: Optional[float] = None,
        timer_factory: TimerFactory = threading.Timer,
    ):
        settings = get_settings()
        self._client = client
        self._wanted = wanted if wanted is not None else settings.NUM_WANTED_STORIES
        self._refresh_interval = (
            refresh_interval if refresh_interval is not None else settings.REFRESH_INTERVAL_SECONDS
        )
        self._retry_delay = retry_delay if retry_delay is not None else settings.REFRESH_RETRY_DELAY
        self._backoff_factor = (
            backoff_factor if backoff_factor is not None else settings.REFRESH_BACKOFF_FACTOR
        )
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        self._ranked_ids: list[int] = []
        self._stories: dict[int, Story] = {}
        self._fresh = False
        self._loaded_at: Optional[datetime] = None

        # Finished reloads; lets waiters tell whether one completed while they queued
        self._completed_reloads = 0
        self._last_error: Optional[NewsError] = None
        self._consecutive_failures = 0

        self._timer: Optional[threading.Timer] = None
        # Bumped whenever a timer is armed or cancelled; stale callbacks see a mismatch
        self._timer_generation = 0
        self._closed = False

    @property
    def client(self) -> HackerNewsClient:
        return self._client

    @property
    def wanted(self) -> int:
        return self._wanted

    @property
    def is_fresh(self) -> bool:
        """False before the first load, after invalidation and during a reload."""
        return self._fresh

    @property
    def has_snapshot(self) -> bool:
        """True once any load has succeeded."""
        return self._loaded_at is not None

    def fetch(self) -> None:
        """Make sure the snapshot is fresh, reloading it if needed.

        Returns immediately when the snapshot is fresh. Otherwise exactly one
        caller reloads while the others wait on the lock; when the reload
        succeeds the waiters return without any network traffic, and when it
        fails they raise the same error. While a retry is pending after a
        failed refresh of an existing snapshot, callers raise the last error
        without reloading and the retry timer does the next attempt.

        Raises:
            TransportError: If the remote API could not be reached
            DecodeError: If a response could not be decoded
            DataIntegrityError: If the loaded snapshot is inconsistent
        """
        reloads_seen = self._completed_reloads
        with self._lock:
            if self._fresh:
                return
            if self._completed_reloads != reloads_seen and self._last_error is not None:
                raise self._last_error
            if self._retry_pending():
                raise self._last_error
            self._reload()

    def invalidate(self) -> None:
        """Mark the snapshot stale so the next ``fetch()`` reloads it.

        A pending retry after a failed refresh still takes precedence.
        """
        with self._lock:
            self._fresh = False

    def project(self) -> list[Story]:
        """Return the cached stories in ranked order.

        Raises:
            CacheNotLoadedError: If no load has succeeded yet
            DataIntegrityError: If a ranked story is missing from the table
        """
        with self._lock:
            if self._loaded_at is None:
                raise CacheNotLoadedError("Top stories have not been loaded yet")
            return project_stories(self._ranked_ids, self._stories, self._wanted)

    def snapshot_info(self) -> dict[str, Any]:
        """Summary of the cache state, safe to expose on a health endpoint."""
        with self._lock:
            return {
                "fresh": self._fresh,
                "loaded_at": self._loaded_at.isoformat() if self._loaded_at else None,
                "story_count": len(self._stories),
                "consecutive_failures": self._consecutive_failures,
                "last_error": str(self._last_error) if self._last_error else None,
            }

    def close(self) -> None:
        """Cancel the pending timer and stop scheduling new ones."""
        with self._lock:
            self._closed = True
            self._cancel_timer()

    def _reload(self) -> None:
        """Load a new snapshot and swap it in. Caller holds the lock."""
        self._cancel_timer()
        _get_logger().info("loading stories...")

        try:
            with ErrorContext("reload top stories") as ctx:
                ctx.add_info("wanted", self._wanted)
                ranked_ids = load_top_ids(self._client)
                ctx.add_info("ranked", len(ranked_ids))
                if len(ranked_ids) < self._wanted:
                    raise DataIntegrityError(
                        f"Top stories list has {len(ranked_ids)} ids, "
                        f"fewer than the {self._wanted} wanted",
                        available=len(ranked_ids),
                        wanted=self._wanted,
                    )
                stories = load_stories(self._client, ranked_ids[: self._wanted])
                _check_snapshot(ranked_ids, stories, self._wanted)
        except NewsError as exc:
            self._completed_reloads += 1
            self._last_error = exc
            self._consecutive_failures += 1
            delay = backoff_delay(
                self._consecutive_failures,
                self._retry_delay,
                self._backoff_factor,
                self._refresh_interval or None,
            )
            _get_logger().warning(
                f"Reload failed ({self._consecutive_failures} in a row), "
                f"keeping previous snapshot; retrying in {delay:.1f}s"
            )
            self._schedule(delay)
            raise

        self._completed_reloads += 1
        self._ranked_ids = ranked_ids
        self._stories = stories
        self._fresh = True
        self._loaded_at = datetime.now(timezone.utc)
        self._last_error = None
        self._consecutive_failures = 0
        self._schedule(self._refresh_interval)

    def _schedule(self, delay: float) -> None:
        """Arm the one-shot refresh timer. Caller holds the lock."""
        if self._closed or delay <= 0:
            return
        self._timer_generation += 1
        generation = self._timer_generation
        timer = self._timer_factory(delay, lambda: self._on_timer(generation))
        timer.daemon = True
        timer.start()
        self._timer = timer
        _get_logger().debug(f"Next reload scheduled in {delay:.1f}s")

    def _cancel_timer(self) -> None:
        # A callback already waiting on the lock outlives cancel(); the bump marks it stale
        self._timer_generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _retry_pending(self) -> bool:
        """True while a failed refresh of a loaded snapshot awaits its retry timer."""
        return (
            self._timer is not None
            and self._consecutive_failures > 0
            and self._loaded_at is not None
        )

    def _on_timer(self, generation: int) -> None:
        """Timer callback: mark stale and reload, unless the timer was superseded."""
        with self._lock:
            if self._closed or generation != self._timer_generation:
                _get_logger().debug("Ignoring superseded reload timer")
                return
            self._timer = None
            self._fresh = False
            try:
                self._reload()
            except NewsError as exc:
                _get_logger().debug(f"Background reload failed: {exc}")


_news_cache: Optional[NewsCache] = None
_news_cache_lock = threading.Lock()


def get_news_cache() -> NewsCache:
    """
    Get the process-wide cache, creating it on first use.

    Creation is guarded by a lock so concurrent first callers share one
    instance.

    Returns:
        NewsCache: The shared cache
    """
    global _news_cache
    if _news_cache is None:
        with _news_cache_lock:
            if _news_cache is None:
                settings = get_settings()
                _news_cache = NewsCache(HackerNewsClient(timeout=settings.API_TIMEOUT))
    return _news_cache


def reset_news_cache() -> None:
    """Close and forget the shared cache. Useful for testing."""
    global _news_cache
    with _news_cache_lock:
        if _news_cache is not None:
            _news_cache.close()
            _news_cache.client.close()
        _news_cache = None
