"""Hacker News API client.

Blocking JSON-over-HTTP access to the Hacker News Firebase API. One
``httpx.Client`` is shared by every caller, including worker threads.
"""

from functools import lru_cache
from typing import Any, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from src.utils.errors import DecodeError, TransportError
from src.utils.logging_config import get_logger


def _get_logger():
    """Get logger instance lazily to avoid import-time config loading."""
    return get_logger(__name__)


@lru_cache(maxsize=None)
def _adapter_for(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


class HackerNewsClient:
    """Thin wrapper around ``httpx.Client`` that maps failures to NewsError types.

    Args:
        timeout: Per-request timeout in seconds
        http_client: Pre-built client to use instead of creating one. A
            supplied client is not closed by ``close()``.

    Example:
        >>> with HackerNewsClient(timeout=10.0) as client:
        ...     ids = client.get_json(
        ...         "https://hacker-news.firebaseio.com/v0/topstories.json", list[int]
        ...     )
    """

    def __init__(
        self,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    def get_json(self, url: str, shape: Any = Any) -> Any:
        """GET ``url`` and decode the JSON body into ``shape``.

        Args:
            url: Absolute URL to request
            shape: Type the decoded body must validate against, e.g.
                ``list[int]`` or a pydantic model

        Returns:
            The validated value

        Raises:
            TransportError: On connection failure, timeout or non-2xx status
            DecodeError: If the body is not JSON or does not match ``shape``
        """
        try:
            response = self._http.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Unexpected response from {url}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {url} failed: {exc}", url=url) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(f"Response from {url} is not valid JSON", url=url) from exc

        try:
            return _adapter_for(shape).validate_python(payload)
        except ValidationError as exc:
            raise DecodeError(
                f"Response from {url} has unexpected shape: {exc.error_count()} error(s)",
                url=url,
            ) from exc

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._http.close()
            _get_logger().debug("Hacker News HTTP client closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
