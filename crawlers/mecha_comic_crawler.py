from bs4 import BeautifulSoup, NavigableString

from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.text import clean_text, node_text
from utils.time import current_time_in_publisher_zone

from .base_crawler import MangaCrawler

SITE_ROOT = "https://mechacomic.jp"

CHAPTER_SECTION_SELECTOR = 'div[class="p-chapterInfo p-chapterInfo-comic u-clearfix"]'
CHAPTER_LINK_SELECTOR = 'a[class="p-btn-chapter c-btn c-btn-boder-buy prevent"]'


def find_latest_chapter_number(html):
    """Read the chapter count from the "／N話へ" pager label."""
    soup = BeautifulSoup(html or "", "lxml")
    label = soup.select_one('div[class="u-inlineBlock"] > span')
    if label is None:
        return FetchError.page_not_found("no match for chapter number selector")

    raw = node_text(label).replace("／", "").replace("話へ", "")
    try:
        return int(raw)
    except ValueError:
        return FetchError.page_not_found(f"Page number parse error: {raw!r}")


def _chapter_number(section):
    node = section.select_one("dt.p-chapterList_no")
    if node is None or not node.contents:
        return FetchError.chapter_not_found("chapter num element not found")
    first = node.contents[0]
    if not isinstance(first, NavigableString):
        return FetchError.chapter_not_found("chapter num child is not text")
    return clean_text(str(first))


def parse_mecha_comic_html(html):
    soup = BeautifulSoup(html or "", "lxml")

    title_node = soup.select_one("div.p-bookInfo_title > h1")
    if title_node is None:
        return FetchError.page_not_found("title not found")

    cover = soup.select_one("div.p-bookInfo_jacket > img.jacket_image_l")
    if cover is None or not cover.get("src"):
        return FetchError.page_not_found("cover element not found")

    author_node = soup.select_one('span[class="p-sepList_item p-sepList_item-thrash"] > a')
    if author_node is None:
        return FetchError.page_not_found("author not found")

    sections = soup.select(CHAPTER_SECTION_SELECTOR)
    if not sections:
        return FetchError.chapter_not_found("chapter section element not found")
    latest = sections[-1]

    number = _chapter_number(latest)
    if isinstance(number, FetchError):
        return number

    name_node = latest.select_one("dd.p-chapterList_name")
    if name_node is None:
        return FetchError.chapter_not_found("chapter title not found")

    link = latest.select_one(CHAPTER_LINK_SELECTOR)
    if link is None or not link.get("href"):
        return FetchError.chapter_not_found("chapter url not found")

    return Manga(
        title=node_text(title_node),
        cover_url=cover["src"],
        author=node_text(author_node),
        latest_chapter_title=f"{number} {node_text(name_node)}",
        latest_chapter_url=f"{SITE_ROOT}{link['href']}",
        latest_chapter_release_date=current_time_in_publisher_zone(),
    )


class MechaComicCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.MECHA_COMIC})

    async def fetch_manga(self, manga_id):
        url = self.build_url(manga_id)

        chapter_number = find_latest_chapter_number(await self._get_text(url))
        if isinstance(chapter_number, FetchError):
            return chapter_number

        html = await self._get_text(url, params={"chapter_number": str(chapter_number)})
        return parse_mecha_comic_html(html)
