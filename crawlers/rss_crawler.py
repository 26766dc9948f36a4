from models.source import MangaSource
from services.feed_parser import parse_rss_feed

from .base_crawler import MangaCrawler


class RssCrawler(MangaCrawler):
    """Sources built on the shared "series RSS" platform."""

    SUPPORTED_SOURCES = frozenset(
        {
            MangaSource.SHOUNEN_JUMP_PLUS,
            MangaSource.COMIC_EARTH_STAR,
            MangaSource.KURAGE_BUNCH,
            MangaSource.COMIC_GROWL,
            MangaSource.COMIC_DAYS,
            MangaSource.MAGAZINE_POCKET,
            MangaSource.TONARI_YOUNG_JUMP,
            MangaSource.COMIC_ACTION,
        }
    )

    async def fetch_manga(self, manga_id):
        xml = await self._get_text(self.build_url(manga_id))
        return parse_rss_feed(xml)
