from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from services.next_data_parser import dig, extract_next_data
from utils.time import current_time_in_publisher_zone

from .base_crawler import MangaCrawler

SITE_ROOT = "https://www.ganganonline.com"


def parse_gangan_online_html(html):
    next_data = extract_next_data(html)
    if isinstance(next_data, FetchError):
        return next_data

    try:
        data = dig(next_data, "props", "pageProps", "data", "default")
        chapters = data["chapters"]
        title_id = data["titleId"]
    except (KeyError, TypeError) as exc:
        return FetchError.json_decode(f"unexpected pageProps shape: {exc}")

    if not chapters:
        return FetchError.chapter_not_found("chapters are empty")
    latest = chapters[0]
    if not isinstance(latest, dict) or "id" not in latest:
        return FetchError.json_decode("latest chapter has no id")

    # The page carries no per-chapter date.
    return Manga(
        title=data.get("titleName", ""),
        cover_url=f"{SITE_ROOT}{latest.get('thumbnailUrl', '')}",
        author=data.get("author", ""),
        latest_chapter_title=latest.get("subText") or latest.get("mainText", ""),
        latest_chapter_url=f"{SITE_ROOT}/title/{title_id}/chapter/{latest['id']}",
        latest_chapter_release_date=current_time_in_publisher_zone(),
    )


class GanganOnlineCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.GANGAN_ONLINE})

    async def fetch_manga(self, manga_id):
        html = await self._get_text(self.build_url(manga_id))
        return parse_gangan_online_html(html)
