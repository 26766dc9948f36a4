"""Reconciliation pass over every tracked series.

One invocation loads the whole ``series`` table, refetches each row from its
source concurrently (paced per source), classifies the result, writes every
changed row in one atomic batch and then broadcasts the changes.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import aiohttp

import config
from crawlers.errors import FetchError
from crawlers.registry import fetch_manga
from crawlers.remote_browser import RemoteBrowser
from models.series import SeriesRow
from models.source import FetchStrategy
from repositories.series_repo import batch_update_series, list_series_paginated
from services.diff_classifier import DiffKind, DiffResult, apply_diff, build_diff
from services.notification_service import broadcast_diffs
from services.rate_limiter import KeyedRateLimiter
from utils.time import current_time_in_publisher_zone

LOGGER = logging.getLogger(__name__)


@dataclass
class RowOutcome:
    row: SeriesRow
    diff: Optional[DiffResult] = None
    error: Optional[FetchError] = None
    checked_at: Optional[datetime] = None


def create_client_session():
    timeout = aiohttp.ClientTimeout(
        total=config.CRAWLER_HTTP_TOTAL_TIMEOUT_SECONDS,
        connect=config.CRAWLER_HTTP_CONNECT_TIMEOUT_SECONDS,
        sock_read=config.CRAWLER_HTTP_SOCK_READ_TIMEOUT_SECONDS,
    )
    connector = aiohttp.TCPConnector(limit=config.CRAWLER_HTTP_CONCURRENCY_LIMIT, ttl_dns_cache=300)
    return aiohttp.ClientSession(timeout=timeout, connector=connector)


def load_all_series(conn, page_size=None):
    """Read every tracked row, page by page, until an empty page comes back."""
    size = page_size or config.UPDATE_JOB_PAGE_SIZE
    rows = []
    page_number = 1
    while True:
        page = list_series_paginated(conn, page_number, size)
        if not page.data:
            break
        rows.extend(page.data)
        page_number += 1
    return rows


async def diff_update(
    row,
    *,
    session,
    limiter,
    browser=None,
    fetcher=fetch_manga,
    timeout_seconds=None,
    now=None,
):
    timeout = config.CRAWLER_ADAPTER_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds

    await limiter.acquire(row.source)
    try:
        result = await asyncio.wait_for(
            fetcher(row.source, row.manga_id, session=session, browser=browser),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        result = FetchError.transport(f"adapter timed out after {timeout}s")

    if isinstance(result, FetchError):
        return RowOutcome(row=row, error=result)

    # Read the clock after the fetch; adapters default a missing release date to "now".
    checked_at = now if now is not None else current_time_in_publisher_zone()
    return RowOutcome(row=row, diff=build_diff(row, result, checked_at), checked_at=checked_at)


def _needs_browser(rows):
    return any(row.source.profile.strategy is FetchStrategy.BROWSER for row in rows)


def _empty_report(total):
    return {
        "total_series": total,
        "no_change": 0,
        "upcoming": 0,
        "released": 0,
        "failed": 0,
        "failures": [],
        "notified": 0,
    }


async def update_series(
    conn,
    webhook_url,
    *,
    page_size=None,
    limiter=None,
    fetcher=fetch_manga,
    broadcaster=broadcast_diffs,
    browser_factory=RemoteBrowser,
    session_factory=create_client_session,
    now=None,
):
    """
    Run one full reconciliation pass and return a summary report.

    A row whose fetch fails is logged and counted without affecting the other
    rows. Listing, batch write and broadcast errors propagate to the caller.
    """
    rows = load_all_series(conn, page_size)
    report = _empty_report(len(rows))
    if not rows:
        LOGGER.info("no tracked series; nothing to do")
        return report

    limiter = limiter or KeyedRateLimiter()
    browser = browser_factory() if _needs_browser(rows) else None

    try:
        async with session_factory() as session:
            results = await asyncio.gather(
                *(
                    diff_update(
                        row,
                        session=session,
                        limiter=limiter,
                        browser=browser,
                        fetcher=fetcher,
                        now=now,
                    )
                    for row in rows
                ),
                return_exceptions=True,
            )

            changed = []
            for row, result in zip(rows, results):
                if isinstance(result, BaseException):
                    LOGGER.warning(
                        "row reconciliation crashed source=%s manga_id=%s",
                        row.source.value,
                        row.manga_id,
                        exc_info=result,
                    )
                    report["failed"] += 1
                    report["failures"].append(
                        {"source": row.source.value, "manga_id": row.manga_id, "error": repr(result)}
                    )
                    continue

                if result.error is not None:
                    report["failed"] += 1
                    report["failures"].append(
                        {
                            "source": row.source.value,
                            "manga_id": row.manga_id,
                            "error": result.error.describe(),
                        }
                    )
                    continue

                report[result.diff.kind.value] += 1
                if result.diff.kind is not DiffKind.NO_CHANGE:
                    changed.append(result)

            if changed:
                # Rows are committed before the broadcast; a webhook failure leaves
                # them persisted and the next pass reports NoChange for them.
                batch_update_series(conn, [apply_diff(outcome.diff, outcome.checked_at) for outcome in changed])
                report["notified"] = await broadcaster(session, webhook_url, [outcome.diff for outcome in changed])
    finally:
        if browser is not None:
            await browser.close()

    LOGGER.info(
        "update pass finished total=%s released=%s upcoming=%s no_change=%s failed=%s",
        report["total_series"],
        report["released"],
        report["upcoming"],
        report["no_change"],
        report["failed"],
    )
    return report
