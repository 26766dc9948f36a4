from models.source import MangaSource
from services.feed_parser import parse_cdata_rss_feed

from .base_crawler import MangaCrawler


class CdataRssCrawler(MangaCrawler):
    SUPPORTED_SOURCES = frozenset(
        {
            MangaSource.CHAMPION_CROSS,
            MangaSource.YOUNG_ANIMAL,
            MangaSource.YOUNG_CHAMPION,
        }
    )

    async def fetch_manga(self, manga_id):
        xml = await self._get_text(self.build_url(manga_id))
        return parse_cdata_rss_feed(xml)
