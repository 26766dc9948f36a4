import config
from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.time import parse_iso_datetime

from .base_crawler import MangaCrawler

EPISODE_URL = "https://ichijin-plus.com/episodes/{episode_id}"


def parse_ichijin_plus_data(data):
    try:
        latest = data["latest_episode"]
        authors = data.get("authors") or []
    except (KeyError, TypeError) as exc:
        return FetchError.json_decode(f"unexpected comic payload shape: {exc}")

    if not latest:
        return FetchError.chapter_not_found("latest_episode is empty")

    release_date = parse_iso_datetime(latest.get("published_at"))
    if release_date is None:
        return FetchError.json_decode(f"invalid published_at {latest.get('published_at')!r}")

    try:
        author = ",".join(author["name"] for author in authors)
    except (KeyError, TypeError) as exc:
        return FetchError.json_decode(f"unexpected authors shape: {exc}")
    return Manga(
        title=data.get("title", ""),
        cover_url=latest.get("thumbnail_image_url", ""),
        author=author,
        latest_chapter_title=latest.get("title", ""),
        latest_chapter_url=EPISODE_URL.format(episode_id=latest.get("id")),
        latest_chapter_release_date=release_date,
    )


class IchijinPlusCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.ICHIJIN_PLUS})

    async def fetch_manga(self, manga_id):
        headers = {"x-api-environment-key": config.ICHIJIN_PLUS_API_KEY}
        data = await self._get_json(self.build_url(manga_id), headers=headers)
        if isinstance(data, FetchError):
            return data
        return parse_ichijin_plus_data(data)
