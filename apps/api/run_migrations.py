#!/usr/bin/env python3
"""Database bootstrap: wait for the database, then run Alembic migrations.

Always runs `alembic upgrade head`. If migrations fail, exit non-zero so the
API does not start against an unknown schema.
"""

import logging
import os
import sys
import time

from alembic import command
from alembic.config import Config

from core.database import check_db_connection
from core.logging import setup_logging

logger = logging.getLogger(__name__)

MAX_WAIT_S = 60


def wait_for_db(max_wait_s: int = MAX_WAIT_S) -> bool:
    deadline = time.time() + max_wait_s
    while time.time() < deadline:
        if check_db_connection():
            return True
        logger.info("Waiting for database...")
        time.sleep(2)
    return False


def alembic_upgrade_head() -> None:
    here = os.path.dirname(os.path.abspath(__file__))
    command.upgrade(Config(os.path.join(here, "alembic.ini")), "head")


def main() -> int:
    setup_logging()
    if not wait_for_db():
        logger.error(f"Database not reachable after {MAX_WAIT_S}s")
        return 1
    try:
        alembic_upgrade_head()
    except Exception:
        logger.exception("Migration failed")
        return 1
    logger.info("Migrations applied")
    return 0


if __name__ == "__main__":
    sys.exit(main())
