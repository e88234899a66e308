# src/threadline/scripts/tokens.py
"""
Cron job removing password reset tokens that can no longer be used.

Run it daily; confirmed resets delete their own tokens, so only abandoned
requests accumulate.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import delete
from sqlalchemy.orm import Session

from threadline.core.settings import settings
from threadline.db.session import session_scope
from threadline.models import PasswordReset

logger = logging.getLogger(__name__)


def purge_expired_reset_tokens(db: Session, now: datetime | None = None) -> int:
    """Delete reset tokens whose expiry has passed.

    Args:
        db: Database session
        now: Reference time (defaults to the current UTC time)

    Returns:
        Number of tokens removed
    """
    now = now or datetime.now(UTC)
    result = db.execute(delete(PasswordReset).where(PasswordReset.expires_at < now))
    db.commit()
    removed = result.rowcount or 0
    logger.info("Removed %s expired password reset tokens", removed)
    return removed


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper())
    with session_scope() as db:
        purge_expired_reset_tokens(db)
