from bs4 import BeautifulSoup

from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.text import node_text
from utils.time import current_time_in_publisher_zone, parse_publisher_date

from .base_crawler import MangaCrawler

SITE_ROOT = "https://gammaplus.takeshobo.co.jp/"


def _resolve(path, prefix):
    return path.replace(prefix, SITE_ROOT)


def parse_gamma_plus_html(html):
    soup = BeautifulSoup(html or "", "lxml")

    header = soup.select_one("ul.manga__title")
    if header is None:
        return FetchError.page_not_found("header section not found")
    header_items = header.find_all(recursive=False)
    if not header_items:
        return FetchError.page_not_found("title not found")
    if len(header_items) < 2:
        return FetchError.page_not_found("author not found")

    # "#comics" anchors jump to the bound-volume section, not a chapter.
    chapter = next(
        (
            anchor
            for anchor in soup.select("div.read__outer > a")
            if anchor.get("href") and anchor["href"] != "#comics"
        ),
        None,
    )
    if chapter is None:
        return FetchError.chapter_not_found("chapter element not found")

    title_node = chapter.select_one("li.episode")
    if title_node is None:
        return FetchError.chapter_not_found("title not found")

    thumbnail = chapter.select_one("img")
    if thumbnail is None or not thumbnail.get("src"):
        return FetchError.chapter_not_found("thumbnail element not found")

    date_node = chapter.select_one("li.episode__text")
    if date_node is not None:
        release_date = parse_publisher_date(node_text(date_node), "%Y年%m月%d日")
        if release_date is None:
            return FetchError.chapter_not_found(f"Error parsing date {node_text(date_node)}")
    else:
        release_date = current_time_in_publisher_zone()

    return Manga(
        title=node_text(header_items[0]),
        cover_url=_resolve(thumbnail["src"], "../../"),
        author=node_text(header_items[1]),
        latest_chapter_title=node_text(title_node),
        latest_chapter_url=_resolve(chapter["href"], "../../../"),
        latest_chapter_release_date=release_date,
    )


class GammaPlusCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.GAMMA_PLUS})

    async def fetch_manga(self, manga_id):
        html = await self._get_text(self.build_url(manga_id))
        return parse_gamma_plus_html(html)
