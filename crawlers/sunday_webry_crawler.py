from bs4 import BeautifulSoup

from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.text import node_text
from utils.time import current_time_in_publisher_zone, parse_publisher_date

from .base_crawler import MangaCrawler

SITE_ROOT = "https://www.sunday-webry.com"


def _absolute(url):
    if not url or url.startswith("http"):
        return url or ""
    return f"{SITE_ROOT}{url}"


def parse_sunday_webry_html(html):
    """Parse the rendered series page.

    The title comes from ``og:title`` and still carries the site banner; the
    caller's title cleanup removes it.
    """
    soup = BeautifulSoup(html or "", "lxml")

    og_title = soup.select_one('meta[property="og:title"]')
    if og_title is None or not og_title.get("content"):
        return FetchError.page_not_found("title not found")

    author_node = soup.select_one(".series-header-author")

    episode = soup.select_one("li.episode")
    if episode is None:
        return FetchError.chapter_not_found("episode list is empty")

    title_node = episode.select_one(".series-episode-list-title")
    link = episode.select_one("a")
    if title_node is None or link is None or not link.get("href"):
        return FetchError.chapter_not_found("episode title or link not found")

    thumbnail = episode.select_one("img")
    cover_url = ""
    if thumbnail is not None:
        cover_url = thumbnail.get("src") or thumbnail.get("data-src") or ""

    date_node = episode.select_one(".series-episode-list-date")
    release_date = None
    if date_node is not None:
        release_date = parse_publisher_date(node_text(date_node), "%Y/%m/%d")
    if release_date is None:
        release_date = current_time_in_publisher_zone()

    return Manga(
        title=og_title["content"].strip(),
        cover_url=_absolute(cover_url),
        author=node_text(author_node),
        latest_chapter_title=node_text(title_node),
        latest_chapter_url=_absolute(link["href"]),
        latest_chapter_release_date=release_date,
    )


class SundayWebryCrawler(MangaCrawler):
    """Client-rendered site; the DOM is read through the remote browser."""

    SUPPORTED_SOURCES = frozenset({MangaSource.SUNDAY_WEBRY})

    async def fetch_manga(self, manga_id):
        if self.browser is None:
            return FetchError.session("no remote browser available")

        html = await self.browser.page_source(self.build_url(manga_id))
        if isinstance(html, FetchError):
            return html
        return parse_sunday_webry_html(html)
