# init_db.py
import logging
import sys

from dotenv import load_dotenv

import config
from database import setup_database_standalone

LOGGER = logging.getLogger(__name__)


def main():
    load_dotenv()
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format=config.LOG_FORMAT,
    )

    LOGGER.info("Creating series and update_job_reports tables...")
    try:
        setup_database_standalone()
    except Exception:
        LOGGER.exception("Database initialization failed")
        return 1
    LOGGER.info("Database initialization complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
