from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from services.next_data_parser import dig, extract_next_data
from utils.time import current_time_in_publisher_zone, parse_publisher_date

from .base_crawler import MangaCrawler

IMAGE_HOST = "https://img.comic-fuz.com"
VIEWER_URL = "https://comic-fuz.com/manga/viewer/{chapter_id}"


def parse_comic_fuz_html(html):
    next_data = extract_next_data(html)
    if isinstance(next_data, FetchError):
        return next_data

    try:
        page_props = dig(next_data, "props", "pageProps")
        groups = page_props["chapters"]
        manga_name = page_props["manga"]["mangaName"]
        authorships = page_props.get("authorships") or []
    except (KeyError, TypeError) as exc:
        return FetchError.json_decode(f"unexpected pageProps shape: {exc}")

    if not groups:
        return FetchError.chapter_not_found("chapters is empty")
    chapters = groups[0].get("chapters") or []
    if not chapters:
        return FetchError.chapter_not_found("nested chapters is empty")
    latest = chapters[0]

    raw_date = latest.get("updatedDate")
    if raw_date:
        release_date = parse_publisher_date(raw_date, "%Y/%m/%d")
        if release_date is None:
            return FetchError.chapter_not_found(f"error on date parse {raw_date}")
    else:
        release_date = current_time_in_publisher_zone()

    try:
        author = ",".join(
            entry["author"]["authorName"] for entry in authorships if entry.get("author")
        )
        chapter_url = VIEWER_URL.format(chapter_id=latest["chapterId"])
    except (KeyError, TypeError) as exc:
        return FetchError.json_decode(f"unexpected chapter shape: {exc}")

    return Manga(
        title=manga_name,
        cover_url=f"{IMAGE_HOST}{latest.get('thumbnailUrl', '')}",
        author=author,
        latest_chapter_title=latest.get("chapterMainName", ""),
        latest_chapter_url=chapter_url,
        latest_chapter_release_date=release_date,
    )


class ComicFuzCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.COMIC_FUZ})

    async def fetch_manga(self, manga_id):
        html = await self._get_text(self.build_url(manga_id))
        return parse_comic_fuz_html(html)
