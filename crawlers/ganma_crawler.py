from bs4 import BeautifulSoup

from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.text import node_text
from utils.time import current_time_in_publisher_zone

from .base_crawler import MangaCrawler

TITLE_SELECTOR = 'h2[class="text-lg font-semibold leading-tight"]'
AUTHOR_SELECTOR = 'div[class="font-semibold"]'
COVER_SELECTOR = 'img[class="pointer-events-none"]'
CHAPTER_COUNT_SELECTOR = 'span[class="text-g-black font-semibold"]'
CHAPTER_LINK_SELECTOR = 'a[class="flex items-center justify-center gap-1 p-4"]'


def parse_ganma_html(html):
    """GANMA exposes only the chapter count, which stands in for the chapter title."""
    soup = BeautifulSoup(html or "", "lxml")

    title_node = soup.select_one(TITLE_SELECTOR)
    if title_node is None:
        return FetchError.page_not_found("title not found")
    author_node = soup.select_one(AUTHOR_SELECTOR)
    if author_node is None:
        return FetchError.page_not_found("author not found")

    cover = soup.select_one(COVER_SELECTOR)
    if cover is None or not cover.get("src"):
        return FetchError.chapter_not_found("cover not found")

    chapter_count = soup.select_one(CHAPTER_COUNT_SELECTOR)
    if chapter_count is None:
        return FetchError.chapter_not_found("chapter count not found")

    # Links out to the app stores.
    link = soup.select_one(CHAPTER_LINK_SELECTOR)
    if link is None or not link.get("href"):
        return FetchError.chapter_not_found("url not found")

    return Manga(
        title=node_text(title_node),
        cover_url=cover["src"],
        author=node_text(author_node),
        latest_chapter_title=node_text(chapter_count),
        latest_chapter_url=link["href"],
        latest_chapter_release_date=current_time_in_publisher_zone(),
    )


class GanmaCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.GANMA})

    async def fetch_manga(self, manga_id):
        html = await self._get_text(self.build_url(manga_id))
        return parse_ganma_html(html)
