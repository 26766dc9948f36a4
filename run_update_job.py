# run_update_job.py
import asyncio
import json
import logging
import os
import sys
import time
import traceback

from dotenv import load_dotenv

load_dotenv()

import config
from database import create_standalone_connection, get_cursor
from services.update_job import update_series

LOGGER = logging.getLogger(__name__)

JOB_NAME = "series_update"
STATUS_SUCCESS = "success"
STATUS_FAILURE = "failure"


def _setup_logging():
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format=config.LOG_FORMAT,
    )


def store_report(report):
    """Persist the run report; a failure here is logged, never raised."""
    report_conn = None
    try:
        report_conn = create_standalone_connection()
        report_cursor = get_cursor(report_conn)
        report_cursor.execute(
            """
            INSERT INTO update_job_reports (job_name, status, report_data)
            VALUES (%s, %s, %s)
            """,
            (JOB_NAME, report["status"], json.dumps(report, ensure_ascii=False, default=str)),
        )
        report_conn.commit()
        report_cursor.close()
        LOGGER.info("stored update job report status=%s", report["status"])
    except Exception:
        LOGGER.exception("failed to store update job report")
    finally:
        if report_conn:
            report_conn.close()


async def run_job(webhook_url):
    report = {"status": STATUS_SUCCESS}
    start_time = time.time()
    conn = None
    try:
        conn = create_standalone_connection()
        report.update(await update_series(conn, webhook_url))
    except Exception:
        LOGGER.exception("update job failed")
        report["status"] = STATUS_FAILURE
        report["error_message"] = traceback.format_exc()
    finally:
        report["duration"] = time.time() - start_time
        if conn:
            conn.close()
    store_report(report)
    return report


def main():
    _setup_logging()

    webhook_url = os.getenv("WEBHOOK_URL")
    if not webhook_url:
        LOGGER.error("WEBHOOK_URL is not set")
        return 1

    report = asyncio.run(run_job(webhook_url))
    return 0 if report["status"] == STATUS_SUCCESS else 1


if __name__ == "__main__":
    sys.exit(main())
