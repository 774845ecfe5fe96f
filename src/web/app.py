"""FastAPI front end for the top stories cache.

Handlers are plain ``def`` functions so FastAPI runs them in its thread
pool; ``NewsCache.fetch()`` blocks on network I/O during a reload.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from src.integrations.hackernews import Story
from src.news import NewsCache, get_news_cache
from src.utils.config import get_settings
from src.utils.errors import NewsError
from src.utils.logging_config import get_logger

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _get_logger():
    """Get logger instance lazily to avoid import-time config loading."""
    return get_logger(__name__)


def hostname(raw_url: str) -> str:
    """Format a story link as "(host)" for display next to its title."""
    return f"({urlparse(raw_url).hostname or ''})"


def _stories_or_stale(cache: NewsCache) -> list[Story]:
    """Refresh the cache and return its stories, falling back to the last snapshot.

    Raises:
        NewsError: If the refresh failed and there is no earlier snapshot
    """
    try:
        cache.fetch()
    except NewsError as exc:
        if not cache.has_snapshot:
            raise
        _get_logger().warning(f"Serving stale stories after failed refresh: {exc}")
    return cache.project()


def create_app(cache: Optional[NewsCache] = None) -> FastAPI:
    """Build the web app around ``cache`` (the shared cache by default)."""
    news_cache = cache or get_news_cache()
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _get_logger().info(f"{settings.APP_NAME} serving {news_cache.wanted} top stories")
        yield
        news_cache.close()
        news_cache.client.close()

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
    app.state.news_cache = news_cache

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["hostname"] = hostname

    @app.get("/", response_class=HTMLResponse)
    def news_page(request: Request):
        try:
            stories = _stories_or_stale(news_cache)
        except NewsError as exc:
            _get_logger().error(f"No stories to serve: {exc}")
            return templates.TemplateResponse(
                request,
                "error.html",
                {"message": "Top stories are unavailable right now."},
                status_code=503,
            )
        return templates.TemplateResponse(request, "news.html", {"stories": stories})

    @app.get("/api/stories", response_model=list[Story], response_model_by_alias=False)
    def list_stories():
        try:
            return _stories_or_stale(news_cache)
        except NewsError as exc:
            _get_logger().error(f"No stories to serve: {exc}")
            return JSONResponse(
                status_code=503,
                content={"error": type(exc).__name__, "detail": str(exc)},
            )

    @app.get("/health")
    def health():
        return {"status": "ok", **news_cache.snapshot_info()}

    return app
