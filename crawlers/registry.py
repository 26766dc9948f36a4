"""Source-to-crawler dispatch."""

from models.source import MangaSource

from .cdata_rss_crawler import CdataRssCrawler
from .comic_fuz_crawler import ComicFuzCrawler
from .comic_pixiv_crawler import ComicPixivCrawler
from .comic_walker_crawler import ComicWalkerCrawler
from .gamma_plus_crawler import GammaPlusCrawler
from .gangan_online_crawler import GanganOnlineCrawler
from .ganma_crawler import GanmaCrawler
from .ichijin_plus_crawler import IchijinPlusCrawler
from .manga_up_crawler import MangaUpCrawler
from .mecha_comic_crawler import MechaComicCrawler
from .rss_crawler import RssCrawler
from .sunday_webry_crawler import SundayWebryCrawler
from .urasunday_crawler import UrasundayCrawler
from .yanmaga_crawler import YanmagaCrawler

CRAWLER_CLASSES = (
    RssCrawler,
    CdataRssCrawler,
    ComicFuzCrawler,
    ComicPixivCrawler,
    ComicWalkerCrawler,
    GammaPlusCrawler,
    GanganOnlineCrawler,
    GanmaCrawler,
    IchijinPlusCrawler,
    MangaUpCrawler,
    MechaComicCrawler,
    SundayWebryCrawler,
    UrasundayCrawler,
    YanmagaCrawler,
)

CRAWLER_REGISTRY = {
    source: crawler_cls
    for crawler_cls in CRAWLER_CLASSES
    for source in crawler_cls.SUPPORTED_SOURCES
}


def get_crawler_class(source):
    """Raises ``KeyError`` for a source with no registered crawler."""
    return CRAWLER_REGISTRY[source]


async def fetch_manga(source, manga_id, *, session, browser=None):
    """Fetch the latest chapter of one series, dispatching on ``source`` alone."""
    crawler_cls = get_crawler_class(source)
    crawler = crawler_cls(MangaSource(source), session=session, browser=browser)
    return await crawler.fetch(manga_id)
