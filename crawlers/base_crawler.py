#crawlers/base_crawler.py
import asyncio
import json
import logging
from abc import ABC, abstractmethod

import aiohttp
from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed

import config
from crawlers.errors import FetchError
from models.manga import Manga

LOGGER = logging.getLogger(__name__)


def _is_blank(body):
    return not body or not body.strip()


class MangaCrawler(ABC):
    """
    Abstract base for every source adapter.

    Each subclass declares the sources it can serve in ``SUPPORTED_SOURCES``
    and implements :meth:`fetch_manga` for one series page. Callers go through
    :meth:`fetch`, which maps transport exceptions to :class:`FetchError` and
    applies the source's title cleanup to successful results.
    """

    SUPPORTED_SOURCES = frozenset()

    def __init__(self, source, *, session, browser=None):
        if source not in self.SUPPORTED_SOURCES:
            raise ValueError(f"{type(self).__name__} does not support source {source!r}")
        self.source = source
        self.profile = source.profile
        self.session = session
        self.browser = browser

    def build_url(self, manga_id):
        return self.profile.build_url(manga_id)

    @abstractmethod
    async def fetch_manga(self, manga_id):
        """
        Fetch the latest chapter for ``manga_id``.

        Returns a :class:`Manga` or a :class:`FetchError`.
        """
        raise NotImplementedError

    async def fetch(self, manga_id):
        try:
            result = await self.fetch_manga(manga_id)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            result = FetchError.transport(str(exc) or type(exc).__name__)

        if isinstance(result, FetchError):
            LOGGER.warning(
                "fetch failed source=%s manga_id=%s error=%s",
                self.source.value,
                manga_id,
                result.describe(),
            )
            return result

        if isinstance(result, Manga):
            return result.with_title(self.profile.cleanup_title(result.title))

        raise TypeError(f"{type(self).__name__}.fetch_manga returned {type(result).__name__}")

    async def _request_text(self, url, headers=None, params=None):
        merged_headers = {**config.CRAWLER_HEADERS, **(headers or {})}
        async with self.session.get(url, headers=merged_headers, params=params) as response:
            response.raise_for_status()
            return await response.text()

    async def _get_text(self, url, headers=None, params=None):
        """GET ``url`` and return the body; blank bodies are retried for flaky sources."""
        if not self.profile.retry_on_empty:
            return await self._request_text(url, headers=headers, params=params)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(config.CRAWLER_EMPTY_BODY_RETRY_ATTEMPTS),
            wait=wait_fixed(config.CRAWLER_EMPTY_BODY_RETRY_DELAY_SECONDS),
            retry=retry_if_result(_is_blank),
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
        )
        return await retrying(self._request_text, url, headers=headers, params=params)

    async def _get_json(self, url, headers=None, params=None):
        body = await self._get_text(url, headers=headers, params=params)
        try:
            return json.loads(body)
        except ValueError as exc:
            return FetchError.json_decode(str(exc))
