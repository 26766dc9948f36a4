import json
import re

from bs4 import BeautifulSoup

from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.text import node_text
from utils.time import current_time_in_publisher_zone

from .base_crawler import MangaCrawler

TITLE_SELECTOR = 'h2[class*="pc:text-title-lg-pc"]'
AUTHOR_SELECTOR = 'div[class="text-on_background_medium sp:text-body-md-sp pc:text-body-md-pc"]'

# Title data is embedded as an escaped JSON string inside the React Server
# Component flight payload, terminated by the next ``["$","$L..`` element.
CHAPTER_DATA_RE = re.compile(
    r'(\{\\"titleName\\".*?currentChapter.*?)\],\[\\"\$\\",\\"\$L\w+'
)

CHAPTER_URL = "https://www.manga-up.com/titles/{title_id}/chapters/{chapter_id}"


def _decode_chapter_data(html):
    match = CHAPTER_DATA_RE.search(html or "")
    if match is None:
        return FetchError.chapter_not_found("chapter data not found")

    try:
        unescaped = json.loads(f'"{match.group(1)}"')
        return json.loads(unescaped)
    except ValueError as exc:
        return FetchError.json_decode(str(exc))


def parse_manga_up_html(html):
    soup = BeautifulSoup(html or "", "lxml")

    title_node = soup.select_one(TITLE_SELECTOR)
    if title_node is None:
        return FetchError.page_not_found("title not found")
    author_node = soup.select_one(AUTHOR_SELECTOR)
    if author_node is None:
        return FetchError.page_not_found("author not found")

    data = _decode_chapter_data(html)
    if isinstance(data, FetchError):
        return data

    chapters = data.get("chapters") if isinstance(data, dict) else None
    if not chapters:
        return FetchError.chapter_not_found("chapters is empty")
    latest = chapters[-1]

    chapter_title = f"{latest.get('subName', '')} {latest.get('name', '')}".strip()

    return Manga(
        title=node_text(title_node),
        cover_url=latest.get("urlThumbnail", ""),
        author=node_text(author_node),
        latest_chapter_title=chapter_title,
        latest_chapter_url=CHAPTER_URL.format(title_id=data.get("titleId"), chapter_id=latest.get("id")),
        latest_chapter_release_date=current_time_in_publisher_zone(),
    )


class MangaUpCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.MANGA_UP})

    async def fetch_manga(self, manga_id):
        html = await self._get_text(self.build_url(manga_id))
        return parse_manga_up_html(html)
