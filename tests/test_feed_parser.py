from datetime import datetime

from crawlers.errors import FetchError, FetchErrorKind
from models.manga import Manga, Weekday
from services.feed_parser import parse_cdata_rss_feed, parse_rss_feed
from utils.time import to_naive_publisher_time


RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Foo</title>
    <link>https://comic-days.com/episode/1</link>
    <description>series</description>
    <pubDate>Sun, 05 May 2024 15:00:00 +0000</pubDate>
    <item>
      <title>第12話</title>
      <link>https://comic-days.com/episode/12</link>
      <guid>https://comic-days.com/episode/12</guid>
      <pubDate>Sun, 05 May 2024 15:00:00 +0000</pubDate>
      <description>latest</description>
      <enclosure url="https://cdn.comic-days.com/12.png" length="0" type="image/png"/>
      <author>作者A</author>
    </item>
    <item>
      <title>第11話</title>
      <link>https://comic-days.com/episode/11</link>
      <guid>https://comic-days.com/episode/11</guid>
      <pubDate>Sun, 28 Apr 2024 15:00:00 +0000</pubDate>
      <description>older</description>
      <enclosure url="https://cdn.comic-days.com/11.png" length="0" type="image/png"/>
      <author>作者A</author>
    </item>
  </channel>
</rss>
"""

CDATA_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/" xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title><![CDATA[ チャンピオンクロス「バキ道」 ]]></title>
    <item>
      <title><![CDATA[ 第150話 ]]></title>
      <link><![CDATA[https://championcross.jp/episodes/150]]></link>
      <pubDate>Tue, 07 May 2024 03:00:00 +0000</pubDate>
      <media:thumbnail url="https://championcross.jp/thumb/150.jpg"/>
      <dc:creator><![CDATA[板垣恵介]]></dc:creator>
    </item>
  </channel>
</rss>
"""


def test_parse_rss_feed_uses_channel_title_and_first_item():
    manga = parse_rss_feed(RSS_FEED)

    assert isinstance(manga, Manga)
    assert manga.title == "Foo"
    assert manga.latest_chapter_title == "第12話"
    assert manga.latest_chapter_url == "https://comic-days.com/episode/12"
    assert manga.cover_url == "https://cdn.comic-days.com/12.png"
    assert manga.author == "作者A"
    assert to_naive_publisher_time(manga.latest_chapter_release_date) == datetime(2024, 5, 6, 0, 0)
    assert manga.latest_chapter_publish_day is Weekday.MON


def test_parse_rss_feed_without_items_is_chapter_not_found():
    xml = "<rss><channel><title>Foo</title></channel></rss>"

    result = parse_rss_feed(xml)

    assert isinstance(result, FetchError)
    assert result.kind is FetchErrorKind.CHAPTER_NOT_FOUND


def test_parse_rss_feed_rejects_non_feed_documents():
    for body in ("", "<html><body>maintenance</body></html>"):
        result = parse_rss_feed(body)
        assert isinstance(result, FetchError)
        assert result.kind is FetchErrorKind.XML_DECODE


def test_parse_rss_feed_bad_pub_date_is_decode_error():
    xml = RSS_FEED.replace("Sun, 05 May 2024 15:00:00 +0000", "soon", 2)

    result = parse_rss_feed(xml)

    assert isinstance(result, FetchError)
    assert result.kind is FetchErrorKind.XML_DECODE


def test_parse_cdata_rss_feed_reads_media_and_dublin_core():
    manga = parse_cdata_rss_feed(CDATA_FEED)

    assert isinstance(manga, Manga)
    assert manga.title == "チャンピオンクロス「バキ道」"
    assert manga.latest_chapter_title == "第150話"
    assert manga.latest_chapter_url == "https://championcross.jp/episodes/150"
    assert manga.cover_url == "https://championcross.jp/thumb/150.jpg"
    assert manga.author == "板垣恵介"
    assert to_naive_publisher_time(manga.latest_chapter_release_date) == datetime(2024, 5, 7, 12, 0)


def test_parse_cdata_rss_feed_prefers_thumbnail_text_and_defaults_author():
    xml = CDATA_FEED.replace(
        '<media:thumbnail url="https://championcross.jp/thumb/150.jpg"/>',
        "<media:thumbnail>https://cdn.example/inner.jpg</media:thumbnail>",
    ).replace("<dc:creator><![CDATA[板垣恵介]]></dc:creator>", "")

    manga = parse_cdata_rss_feed(xml)

    assert manga.cover_url == "https://cdn.example/inner.jpg"
    assert manga.author == ""
