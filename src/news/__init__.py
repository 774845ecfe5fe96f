"""Top stories cache: concurrent loading, ordering and scheduled refresh."""

from src.news.cache import NewsCache, get_news_cache, reset_news_cache
from src.news.loader import load_stories
from src.news.ordering import project_stories

__all__ = [
    "NewsCache",
    "get_news_cache",
    "load_stories",
    "project_stories",
    "reset_news_cache",
]
