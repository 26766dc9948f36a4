# services/notification_service.py
import asyncio
import logging

import config
from services.diff_classifier import DiffKind

LOGGER = logging.getLogger(__name__)

EMBED_COLORS = {
    DiffKind.RELEASED: 0x2ECC71,
    DiffKind.UPCOMING: 0xF1C40F,
}


def build_webhook_payload(diff):
    """Build the Discord webhook body for one classified outcome.

    Only released chapters carry a link; upcoming ones have nothing to open yet.
    """
    manga = diff.manga
    label = "RELEASED" if diff.kind is DiffKind.RELEASED else "UPCOMING"

    embed = {
        "title": f"[{label}] {manga.latest_chapter_title}",
        "color": EMBED_COLORS[diff.kind],
        "fields": [
            {"name": "Series", "value": manga.title or "-", "inline": False},
            {"name": "Source", "value": diff.row.source.display_name, "inline": True},
            {"name": "Author", "value": manga.author or "-", "inline": True},
            {
                "name": "Release date",
                "value": manga.latest_chapter_release_date.strftime("%Y-%m-%d %H:%M JST"),
                "inline": False,
            },
        ],
    }
    if manga.cover_url:
        embed["image"] = {"url": manga.cover_url}
    if diff.kind is DiffKind.RELEASED and manga.latest_chapter_url:
        embed["url"] = manga.latest_chapter_url

    return {"username": config.NOTIFICATION_USERNAME, "embeds": [embed]}


async def send_webhook(session, webhook_url, payload):
    async with session.post(webhook_url, json=payload) as response:
        response.raise_for_status()


async def broadcast_diffs(session, webhook_url, diffs, *, pacing_seconds=None):
    """
    Deliver one webhook message per non-NO_CHANGE diff, in order.

    Any delivery failure propagates and aborts the rest of the broadcast.
    Returns the number of messages sent.
    """
    pacing = config.NOTIFICATION_PACING_SECONDS if pacing_seconds is None else pacing_seconds
    pending = [diff for diff in diffs if diff.kind is not DiffKind.NO_CHANGE]

    sent = 0
    for index, diff in enumerate(pending):
        if index:
            await asyncio.sleep(pacing)
        try:
            await send_webhook(session, webhook_url, build_webhook_payload(diff))
        except Exception:
            LOGGER.error(
                "webhook delivery failed source=%s manga_id=%s kind=%s",
                diff.row.source.value,
                diff.row.manga_id,
                diff.kind.value,
            )
            raise
        sent += 1

    LOGGER.info("webhook broadcast complete sent=%s", sent)
    return sent
