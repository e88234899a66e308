"""Create every table for the configured database."""

import logging

from threadline.core.settings import settings
from threadline.db.session import create_tables

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()
    logger.info("Database initialized at %s", settings.database_url.split("@")[-1])


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper())
    init_db()
