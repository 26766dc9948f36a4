"""RSS decoding for the feed-based sources.

Two dialects exist: the plain RSS 2.0 feeds served by the shared
"series RSS" platform, and a CDATA-wrapped variant with Media RSS
thumbnails and Dublin Core creators.
"""

import logging

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from crawlers.errors import FetchError
from models.manga import Manga
from utils.text import clean_text, strip_cdata
from utils.time import parse_rfc2822

LOGGER = logging.getLogger(__name__)


def _soup(xml):
    try:
        return BeautifulSoup(xml or "", "lxml-xml")
    except ParserRejectedMarkup as exc:
        LOGGER.debug("feed decode failed: %s", exc)
        return None


def _child_text(node, name):
    child = node.find(name, recursive=False) if node is not None else None
    if child is None:
        return None
    return child.get_text()


def _find_namespaced(node, qualified_name):
    found = node.find(qualified_name)
    if found is None and ":" in qualified_name:
        found = node.find(qualified_name.split(":", 1)[1])
    return found


def _channel_and_first_item(xml):
    soup = _soup(xml)
    if soup is None:
        return FetchError.xml_decode("unparseable feed"), None

    channel = soup.find("channel")
    if channel is None:
        return FetchError.xml_decode("missing channel"), None

    item = channel.find("item", recursive=False)
    if item is None:
        return channel, FetchError.chapter_not_found()
    return channel, item


def parse_rss_feed(xml):
    """Decode a plain RSS 2.0 series feed into a :class:`Manga`.

    The channel title is the series title and the first ``<item>`` is the
    latest chapter.
    """
    channel, item = _channel_and_first_item(xml)
    if isinstance(channel, FetchError):
        return channel
    if isinstance(item, FetchError):
        return item

    title = _child_text(channel, "title")
    if title is None:
        return FetchError.xml_decode("missing channel title")

    release_date = parse_rfc2822(_child_text(item, "pubDate"))
    if release_date is None:
        return FetchError.xml_decode("missing or invalid pubDate")

    enclosure = item.find("enclosure", recursive=False)
    cover_url = enclosure.get("url", "") if enclosure is not None else ""

    return Manga(
        title=title,
        cover_url=cover_url,
        author=_child_text(item, "author") or "",
        latest_chapter_title=_child_text(item, "title") or "",
        latest_chapter_url=clean_text(_child_text(item, "link")),
        latest_chapter_release_date=release_date,
    )


def parse_cdata_rss_feed(xml):
    """Decode a CDATA-wrapped feed (Champion Cross, Young Animal, Young Champion)."""
    channel, item = _channel_and_first_item(strip_cdata(xml))
    if isinstance(channel, FetchError):
        return channel
    if isinstance(item, FetchError):
        return item

    title = _child_text(channel, "title")
    if title is None:
        return FetchError.xml_decode("missing channel title")

    release_date = parse_rfc2822(_child_text(item, "pubDate"))
    if release_date is None:
        return FetchError.xml_decode("missing or invalid pubDate")

    cover_url = ""
    thumbnail = _find_namespaced(item, "media:thumbnail")
    if thumbnail is not None:
        cover_url = thumbnail.get_text().strip() or thumbnail.get("url", "")

    creator = _find_namespaced(item, "dc:creator")
    author = creator.get_text() if creator is not None else ""

    return Manga(
        title=title.strip(),
        cover_url=cover_url,
        author=author,
        latest_chapter_title=(_child_text(item, "title") or "").strip(),
        latest_chapter_url=(_child_text(item, "link") or "").strip(),
        latest_chapter_release_date=release_date,
    )
