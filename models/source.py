"""Closed catalogue of upstream publishers and their per-site quirks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class FetchStrategy(str, Enum):
    RSS = "rss"
    CDATA_RSS = "cdata_rss"
    JSON = "json"
    HTML = "html"
    BROWSER = "browser"


@dataclass(frozen=True)
class SourceProfile:
    """Static description of how one publisher is fetched and cleaned up.

    ``title_banner`` is a literal substring some sites prepend to every
    series title. When ``trim_brackets`` is set, the text left after the
    banner is wrapped in bracket punctuation (``「...」``, ``『...』``) and
    exactly one character is dropped from each end.
    """

    display_name: str
    strategy: FetchStrategy
    url_template: str
    title_banner: Optional[str] = None
    trim_brackets: bool = False
    retry_on_empty: bool = False

    def build_url(self, manga_id: str) -> str:
        return self.url_template.format(manga_id=manga_id)

    def cleanup_title(self, title: str) -> str:
        if not self.title_banner or self.title_banner not in title:
            return title

        cleaned = title.replace(self.title_banner, "", 1)
        if self.trim_brackets and len(cleaned) >= 2:
            cleaned = cleaned[1:-1]
        return cleaned


class MangaSource(str, Enum):
    YANMAGA = "Yanmaga"
    SHOUNEN_JUMP_PLUS = "ShounenJumpPlus"
    COMIC_EARTH_STAR = "ComicEarthStar"
    KURAGE_BUNCH = "KurageBunch"
    COMIC_GROWL = "ComicGrowl"
    COMIC_DAYS = "ComicDays"
    MAGAZINE_POCKET = "MagazinePocket"
    COMIC_PIXIV = "ComicPixiv"
    URASUNDAY = "Urasunday"
    COMIC_WALKER = "ComicWalker"
    TONARI_YOUNG_JUMP = "TonariYoungJump"
    MANGA_UP = "MangaUp"
    SUNDAY_WEBRY = "SundayWebry"
    COMIC_FUZ = "ComicFuz"
    GANGAN_ONLINE = "GanganOnline"
    GAMMA_PLUS = "GammaPlus"
    CHAMPION_CROSS = "ChampionCross"
    GANMA = "GANMA"
    YOUNG_ANIMAL = "YoungAnimal"
    MECHA_COMIC = "MechaComic"
    YOUNG_CHAMPION = "YoungChampion"
    ICHIJIN_PLUS = "IchijinPlus"
    COMIC_ACTION = "ComicAction"

    @property
    def profile(self) -> SourceProfile:
        return SOURCE_PROFILES[self]

    @property
    def display_name(self) -> str:
        return self.profile.display_name

    @classmethod
    def parse(cls, value: object) -> Optional["MangaSource"]:
        """Accept the stored identifier, the enum name or the display name."""
        if isinstance(value, MangaSource):
            return value
        if not isinstance(value, str):
            return None
        text = value.strip()
        if not text:
            return None
        lowered = text.lower()
        for source in cls:
            candidates = (source.value, source.name, source.display_name)
            if any(candidate.lower() == lowered for candidate in candidates):
                return source
        return None


SOURCE_PROFILES: Dict[MangaSource, SourceProfile] = {
    MangaSource.YANMAGA: SourceProfile(
        "YanMaga", FetchStrategy.HTML, "https://yanmaga.jp/comics/{manga_id}"
    ),
    MangaSource.SHOUNEN_JUMP_PLUS: SourceProfile(
        "Shounen Jump Plus", FetchStrategy.RSS, "https://shonenjumpplus.com/rss/series/{manga_id}"
    ),
    MangaSource.COMIC_EARTH_STAR: SourceProfile(
        "Comic Earthstar", FetchStrategy.RSS, "https://comic-earthstar.com/rss/series/{manga_id}"
    ),
    MangaSource.KURAGE_BUNCH: SourceProfile(
        "Kurage Bunch", FetchStrategy.RSS, "https://kuragebunch.com/rss/series/{manga_id}"
    ),
    MangaSource.COMIC_GROWL: SourceProfile(
        "Comic Growl", FetchStrategy.RSS, "https://comic-growl.com/rss/series/{manga_id}"
    ),
    MangaSource.COMIC_DAYS: SourceProfile(
        "Comic Days", FetchStrategy.RSS, "https://comic-days.com/rss/series/{manga_id}"
    ),
    MangaSource.MAGAZINE_POCKET: SourceProfile(
        "Magazine Pocket", FetchStrategy.RSS, "https://pocket.shonenmagazine.com/rss/series/{manga_id}"
    ),
    MangaSource.COMIC_PIXIV: SourceProfile(
        "Comic Pixiv", FetchStrategy.JSON, "https://comic.pixiv.net/api/app/works/v5/{manga_id}"
    ),
    MangaSource.URASUNDAY: SourceProfile(
        "Urasunday", FetchStrategy.HTML, "https://urasunday.com/title/{manga_id}"
    ),
    MangaSource.COMIC_WALKER: SourceProfile(
        "Comic Walker",
        FetchStrategy.JSON,
        "https://comic-walker.com/api/contents/details/work?workCode={manga_id}",
    ),
    MangaSource.TONARI_YOUNG_JUMP: SourceProfile(
        "Tonari Young Jump", FetchStrategy.RSS, "https://tonarinoyj.jp/rss/series/{manga_id}"
    ),
    MangaSource.MANGA_UP: SourceProfile(
        "Manga Up", FetchStrategy.JSON, "https://www.manga-up.com/titles/{manga_id}"
    ),
    MangaSource.SUNDAY_WEBRY: SourceProfile(
        "Sunday Webry",
        FetchStrategy.BROWSER,
        "https://www.sunday-webry.com/series/{manga_id}",
        title_banner="サンデーうぇぶり",
        trim_brackets=True,
    ),
    MangaSource.COMIC_FUZ: SourceProfile(
        "Comic Fuz", FetchStrategy.JSON, "https://comic-fuz.com/manga/{manga_id}"
    ),
    MangaSource.GANGAN_ONLINE: SourceProfile(
        "Gangan Online", FetchStrategy.JSON, "https://www.ganganonline.com/title/{manga_id}"
    ),
    MangaSource.GAMMA_PLUS: SourceProfile(
        "Gamma Plus", FetchStrategy.HTML, "https://gammaplus.takeshobo.co.jp/manga/{manga_id}/"
    ),
    MangaSource.CHAMPION_CROSS: SourceProfile(
        "Champion Cross",
        FetchStrategy.CDATA_RSS,
        "https://championcross.jp/series/{manga_id}/rss",
        title_banner="チャンピオンクロス",
        trim_brackets=True,
    ),
    MangaSource.GANMA: SourceProfile(
        "GANMA", FetchStrategy.HTML, "https://ganma.jp/web/magazine/{manga_id}", retry_on_empty=True
    ),
    MangaSource.YOUNG_ANIMAL: SourceProfile(
        "Young Animal",
        FetchStrategy.CDATA_RSS,
        "https://younganimal.com/series/{manga_id}/rss",
        title_banner="ヤングアニマルWeb",
        trim_brackets=True,
    ),
    MangaSource.MECHA_COMIC: SourceProfile(
        "Mecha Comic", FetchStrategy.HTML, "https://mechacomic.jp/books/{manga_id}", retry_on_empty=True
    ),
    MangaSource.YOUNG_CHAMPION: SourceProfile(
        "Young Champion",
        FetchStrategy.CDATA_RSS,
        "https://youngchampion.jp/series/{manga_id}/rss",
        title_banner="ヤングチャンピオン",
        trim_brackets=True,
    ),
    MangaSource.ICHIJIN_PLUS: SourceProfile(
        "Ichijin Plus", FetchStrategy.JSON, "https://api.ichijin-plus.com/comics/{manga_id}"
    ),
    MangaSource.COMIC_ACTION: SourceProfile(
        "Comic Action", FetchStrategy.RSS, "https://comic-action.com/rss/series/{manga_id}"
    ),
}
