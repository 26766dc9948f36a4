from bs4 import BeautifulSoup

from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.text import node_text
from utils.time import parse_publisher_date

from .base_crawler import MangaCrawler

SITE_ROOT = "https://yanmaga.jp"


def _cover_url(chapter):
    img = chapter.select_one("div.mod-episode-thumbnail-image > img")
    if img is None or not img.get("src"):
        return FetchError.chapter_not_found("cover not found")
    return img["src"]


def _parse_unpublished(chapter, notice):
    """Chapters announced ahead of release show title and date but no link."""
    children = notice.find_all(recursive=False)
    if not children:
        return FetchError.chapter_not_found("title not found")
    if len(children) < 2:
        return FetchError.chapter_not_found("release date not found")

    raw_date = node_text(children[1])
    release_date = parse_publisher_date(raw_date.split("(")[0], "%Y/%m/%d")
    if release_date is None:
        return FetchError.chapter_not_found(f"error parsing date : {raw_date}")

    return node_text(children[0]), "", release_date


def _parse_published(chapter):
    title_node = chapter.select_one("p.mod-episode-title")
    if title_node is None:
        return FetchError.chapter_not_found("title not found")

    date_node = chapter.select_one("time.mod-episode-date")
    if date_node is None:
        return FetchError.chapter_not_found("release date not found")
    release_date = parse_publisher_date(node_text(date_node), "%Y/%m/%d")
    if release_date is None:
        return FetchError.chapter_not_found(f"error parsing date : {node_text(date_node)}")

    link = chapter.select_one("a.mod-episode-link")
    if link is None or not link.get("href"):
        return FetchError.chapter_not_found("url not found")

    return node_text(title_node), f"{SITE_ROOT}{link['href']}", release_date


def parse_yanmaga_html(html):
    soup = BeautifulSoup(html or "", "lxml")

    title_node = soup.select_one("h1.detailv2-outline-title")
    if title_node is None:
        return FetchError.page_not_found("Title not found")
    author_node = soup.select_one("li.detailv2-outline-author-item > a > h2")
    if author_node is None:
        return FetchError.page_not_found("Author not found")

    chapter = soup.select_one("li.mod-episode-item")
    if chapter is None:
        return FetchError.chapter_not_found("zero result from chapter selector")

    notice = chapter.select_one('p[class*="mod-episode-date-before-publication"]')
    parsed = _parse_unpublished(chapter, notice) if notice is not None else _parse_published(chapter)
    if isinstance(parsed, FetchError):
        return parsed
    chapter_title, chapter_url, release_date = parsed

    cover_url = _cover_url(chapter)
    if isinstance(cover_url, FetchError):
        return cover_url

    return Manga(
        title=node_text(title_node),
        cover_url=cover_url,
        author=node_text(author_node),
        latest_chapter_title=chapter_title,
        latest_chapter_url=chapter_url,
        latest_chapter_release_date=release_date,
    )


class YanmagaCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.YANMAGA})

    async def fetch_manga(self, manga_id):
        html = await self._get_text(self.build_url(manga_id))
        return parse_yanmaga_html(html)
