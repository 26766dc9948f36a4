"""Time utilities for publisher-local (Japan Standard Time) date math.

Every release timestamp is normalized to the publisher zone before it is
compared, stored or turned into a weekday. Stored ``TIMESTAMP`` columns hold
naive JST wall-clock values, so the helpers here convert in both directions.
"""

from datetime import datetime
from email.utils import parsedate_to_datetime
from zoneinfo import ZoneInfo

import config


PUBLISHER_TZ = ZoneInfo(config.PUBLISHER_TIMEZONE)


def current_time_in_publisher_zone() -> datetime:
    """Return the current time as an aware datetime in the publisher zone.

    Adapters fall back to this value when the upstream page carries no
    release date for the latest chapter.
    """

    return datetime.now(PUBLISHER_TZ)


def to_publisher_zone(value: datetime) -> datetime:
    """Convert an aware datetime to the publisher zone; naive input is taken as JST."""

    if value.tzinfo is None:
        return value.replace(tzinfo=PUBLISHER_TZ)
    return value.astimezone(PUBLISHER_TZ)


def to_naive_publisher_time(value: datetime) -> datetime:
    return to_publisher_zone(value).replace(tzinfo=None)


def parse_rfc2822(value: str | None) -> datetime | None:
    """Parse an RSS ``pubDate`` into an aware JST datetime.

    Returns ``None`` if the input cannot be parsed.
    """

    if not value:
        return None

    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError):
        return None

    if parsed is None:
        return None
    return to_publisher_zone(parsed)


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO8601 string (``Z`` suffix allowed) into an aware JST datetime."""

    if not value:
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    return to_publisher_zone(parsed)


def parse_publisher_date(value: str | None, fmt: str) -> datetime | None:
    """Parse a site-local calendar date (e.g. ``2024/05/01``) as JST midnight."""

    if not value:
        return None

    try:
        parsed = datetime.strptime(value.strip(), fmt)
    except ValueError:
        return None

    return parsed.replace(tzinfo=PUBLISHER_TZ)


def from_epoch_millis(value: int | float) -> datetime:
    return datetime.fromtimestamp(value / 1000, PUBLISHER_TZ)


def is_released(release_date: datetime, now: datetime | None = None) -> bool:
    """A chapter is released once JST "now" is at or past its release timestamp."""

    current = to_publisher_zone(now) if now is not None else current_time_in_publisher_zone()
    return current >= to_publisher_zone(release_date)
