from crawlers.errors import FetchError
from models.manga import Manga
from models.source import MangaSource
from utils.time import from_epoch_millis

from .base_crawler import MangaCrawler

EPISODES_URL = "https://comic.pixiv.net/api/app/works/{manga_id}/episodes/v2?order=desc"
SITE_ROOT = "https://comic.pixiv.net"
PIXIV_HEADERS = {"x-requested-with": "pixivcomic"}


def parse_comic_pixiv_data(metadata, details):
    """Combine the work metadata and the (newest first) episode list."""
    try:
        work = metadata["data"]["official_work"]
        episodes = details["data"]["episodes"]
    except (KeyError, TypeError) as exc:
        return FetchError.json_decode(f"unexpected pixiv payload shape: {exc}")

    if not episodes:
        return FetchError.chapter_not_found("episodes is empty")

    latest = next(
        (episode for episode in episodes if episode.get("state") != "not_publishing"),
        None,
    )
    if latest is None or not latest.get("episode"):
        return FetchError.chapter_not_found("latest episode not found")
    detail = latest["episode"]

    try:
        release_date = from_epoch_millis(int(detail["read_start_at"]))
    except (KeyError, TypeError, ValueError) as exc:
        return FetchError.json_decode(f"invalid read_start_at: {exc}")

    return Manga(
        title=work.get("name", ""),
        cover_url=detail.get("thumbnail_image_url", ""),
        author=work.get("author", ""),
        latest_chapter_title=detail.get("numbering_title", ""),
        latest_chapter_url=f"{SITE_ROOT}{detail.get('viewer_path', '')}",
        latest_chapter_release_date=release_date,
    )


class ComicPixivCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset({MangaSource.COMIC_PIXIV})

    async def fetch_manga(self, manga_id):
        metadata = await self._get_json(self.build_url(manga_id), headers=PIXIV_HEADERS)
        if isinstance(metadata, FetchError):
            return metadata

        details = await self._get_json(EPISODES_URL.format(manga_id=manga_id), headers=PIXIV_HEADERS)
        if isinstance(details, FetchError):
            return details

        return parse_comic_pixiv_data(metadata, details)
