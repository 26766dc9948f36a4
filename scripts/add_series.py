"""Start tracking one or more series from the command line."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List

from dotenv import load_dotenv

sys.path.append(str(Path(__file__).resolve().parents[1]))

import config
from crawlers.remote_browser import RemoteBrowser
from database import create_standalone_connection
from models.source import FetchStrategy, MangaSource
from services.manga_service import add_manga_service
from services.update_job import create_client_session

LOGGER = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=config.LOG_FORMAT,
    )


def _make_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch a series once and add it to the tracked set.")
    parser.add_argument(
        "source",
        help="Source identifier, e.g. " + ", ".join(source.value for source in list(MangaSource)[:3]),
    )
    parser.add_argument("manga_ids", nargs="+", help="Series id(s) as used in the source's URL.")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level (DEBUG, INFO, WARNING, ERROR).")
    return parser


async def _async_main(args: argparse.Namespace) -> int:
    source = MangaSource.parse(args.source)
    if source is None:
        LOGGER.error("Unknown source=%s", args.source)
        return 2

    browser = RemoteBrowser() if source.profile.strategy is FetchStrategy.BROWSER else None
    conn = create_standalone_connection()
    failures: List[str] = []
    try:
        async with create_client_session() as session:
            for manga_id in args.manga_ids:
                result = await add_manga_service(conn, session, source, manga_id, browser=browser)
                if result["success"]:
                    print(json.dumps(
                        {"source": source.value, "manga_id": manga_id, **result["manga"].to_dict()},
                        ensure_ascii=False,
                    ))
                else:
                    failures.append(manga_id)
                    LOGGER.error("Add failed source=%s manga_id=%s result=%s", source.value, manga_id, result)
    finally:
        conn.close()
        if browser is not None:
            await browser.close()

    return 1 if failures else 0


def main() -> int:
    load_dotenv()
    parser = _make_arg_parser()
    args = parser.parse_args()
    _setup_logging(args.log_level)
    return asyncio.run(_async_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
