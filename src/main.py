"""Entry point: configure logging and serve the top stories app."""

import uvicorn

from src.integrations.hackernews import HackerNewsClient
from src.news import NewsCache
from src.utils.config import get_settings
from src.utils.logging_config import get_logger, setup_logging
from src.web.app import create_app


def main() -> None:
    settings = get_settings()
    setup_logging()
    logger = get_logger(__name__)

    cache = NewsCache(HackerNewsClient(timeout=settings.API_TIMEOUT))
    app = create_app(cache)

    logger.info(f"Starting {settings.APP_NAME} on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
