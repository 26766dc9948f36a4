from bs4 import BeautifulSoup

from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.text import node_text
from utils.time import parse_publisher_date

from .base_crawler import MangaCrawler

SITE_ROOT = "https://urasunday.com"


def parse_urasunday_html(html):
    soup = BeautifulSoup(html or "", "lxml")

    title_node = soup.select_one("div.info > h1")
    author_node = soup.select_one("div.author")
    if title_node is None or author_node is None:
        return FetchError.page_not_found("title or author not found")

    # The newest chapter is listed first.
    anchor = soup.select_one("div.chapter > ul > li > a")
    if anchor is None or not anchor.get("href"):
        return FetchError.chapter_not_found("chapter link not found")

    children = anchor.find_all(recursive=False)
    if len(children) < 2 or not children[0].get("src"):
        return FetchError.chapter_not_found("chapter thumbnail or details not found")
    cover_url = children[0]["src"]

    details = children[1].find_all(recursive=False)
    if len(details) < 3:
        return FetchError.chapter_not_found("chapter details incomplete")

    release_date = parse_publisher_date(node_text(details[2]), "%Y/%m/%d")
    if release_date is None:
        return FetchError.chapter_not_found(f"error parsing date : {node_text(details[2])}")

    return Manga(
        title=node_text(title_node),
        cover_url=cover_url,
        author=node_text(author_node),
        latest_chapter_title=f"{node_text(details[0])} {node_text(details[1])}",
        latest_chapter_url=f"{SITE_ROOT}{anchor['href']}",
        latest_chapter_release_date=release_date,
    )


class UrasundayCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.URASUNDAY})

    async def fetch_manga(self, manga_id):
        html = await self._get_text(self.build_url(manga_id))
        return parse_urasunday_html(html)
