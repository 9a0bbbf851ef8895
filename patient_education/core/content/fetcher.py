"""
Content fragment fetchers.

A fetcher retrieves single JSON or text fragments from a content origin and
knows nothing about how they fit together.  Two origins are supported:

- ``HttpContentFetcher``: an http(s) base URL, fetched with ``requests``
- ``LocalContentFetcher``: a directory on disk

Both expose coroutine methods so the assembler can fan out over them with
``asyncio.gather``.  Blocking I/O runs in a worker thread via
``asyncio.to_thread``; no fetcher touches shared state.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urljoin

import requests

from patient_education.core.exceptions import ContentFetchError

__all__ = [
    "ContentFetcher",
    "HttpContentFetcher",
    "LocalContentFetcher",
    "create_fetcher",
]

logger = logging.getLogger(__name__)


class ContentFetcher:
    """Interface shared by all content origins."""

    async def fetch_json(self, path: str) -> Any:
        raise NotImplementedError

    async def fetch_text(self, path: str) -> str:
        raise NotImplementedError

    def resolve(self, path: str) -> str:
        """Return the locator clients use to download *path*."""
        raise NotImplementedError

    def close(self) -> None:
        """Release connections held by the origin."""


class HttpContentFetcher(ContentFetcher):
    """Fetches fragments from an http(s) content root."""

    def __init__(self, base_url: str, timeout: float = 10,
                 user_agent: str = "PatientEducation-Catalog/1.0",
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", user_agent)

    def resolve(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    async def fetch_json(self, path: str) -> Any:
        response = await asyncio.to_thread(self._get, path)
        try:
            return response.json()
        except ValueError as e:
            raise ContentFetchError(f"Invalid JSON: {e}", path=path, cause=e) from e

    async def fetch_text(self, path: str) -> str:
        response = await asyncio.to_thread(self._get, path)
        # Origins often omit the charset for .txt files
        response.encoding = response.encoding or "utf-8"
        return response.text

    def _get(self, path: str) -> requests.Response:
        url = self.resolve(path)
        logger.debug("GET %s", url)
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise ContentFetchError("Request timeout", path=path, cause=e) from e
        except requests.exceptions.ConnectionError as e:
            raise ContentFetchError("Connection error", path=path, cause=e) from e
        except requests.exceptions.RequestException as e:
            raise ContentFetchError(f"Request failed: {e}", path=path, cause=e) from e

        if response.status_code != 200:
            raise ContentFetchError(f"HTTP {response.status_code}", path=path)
        return response

    def close(self) -> None:
        self._session.close()


class LocalContentFetcher(ContentFetcher):
    """Fetches fragments from a directory laid out like the content origin."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def resolve(self, path: str) -> str:
        return str(self.root / path)

    async def fetch_json(self, path: str) -> Any:
        text = await self.fetch_text(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ContentFetchError(f"Invalid JSON: {e}", path=path, cause=e) from e

    async def fetch_text(self, path: str) -> str:
        return await asyncio.to_thread(self._read, path)

    def _read(self, path: str) -> str:
        file_path = self.root / path
        logger.debug("READ %s", file_path)
        try:
            return file_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ContentFetchError("Not found", path=path, cause=e) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ContentFetchError(f"Read failed: {e}", path=path, cause=e) from e


def create_fetcher(content_root: str, timeout: float = 10,
                   user_agent: str = "PatientEducation-Catalog/1.0") -> ContentFetcher:
    """Pick the fetcher matching *content_root* (URL or directory)."""
    if content_root.startswith(("http://", "https://")):
        return HttpContentFetcher(content_root, timeout=timeout, user_agent=user_agent)
    return LocalContentFetcher(content_root)
