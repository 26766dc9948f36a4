from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.time import parse_iso_datetime

from .base_crawler import MangaCrawler

EPISODE_URL = "https://comic-walker.com/detail/{work_code}/episodes/{episode_code}"


def parse_comic_walker_data(work_code, data):
    """Map the work-details API response to a :class:`Manga`."""
    try:
        work = data["work"]
        episodes = data["latestEpisodes"]["result"]
    except (KeyError, TypeError) as exc:
        return FetchError.json_decode(f"unexpected work details shape: {exc}")

    if not episodes:
        return FetchError.chapter_not_found("episodes is empty")
    latest = episodes[0]
    if not isinstance(latest, dict) or not latest.get("code"):
        return FetchError.json_decode("latest episode has no code")

    release_date = parse_iso_datetime(latest.get("updateDate"))
    if release_date is None:
        return FetchError.json_decode(f"invalid updateDate {latest.get('updateDate')!r}")

    try:
        author = ",".join(author["name"] for author in work.get("authors") or [])
    except (KeyError, TypeError) as exc:
        return FetchError.json_decode(f"unexpected authors shape: {exc}")

    return Manga(
        title=work.get("title", ""),
        cover_url=latest.get("originalThumbnail") or work.get("originalThumbnail", ""),
        author=author,
        latest_chapter_title=latest.get("title", ""),
        latest_chapter_url=EPISODE_URL.format(work_code=work_code, episode_code=latest.get("code")),
        latest_chapter_release_date=release_date,
    )


class ComicWalkerCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.COMIC_WALKER})

    async def fetch_manga(self, manga_id):
        data = await self._get_json(self.build_url(manga_id))
        if isinstance(data, FetchError):
            return data
        return parse_comic_walker_data(manga_id, data)
