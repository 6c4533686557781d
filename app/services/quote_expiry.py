"""
Quote expiry sweep
Flips pending quotes past their valid_until to expired. Run from the arq cron
job or the admin endpoint; accept/reject re-check valid_until themselves, so
the sweep is housekeeping only.
"""

import logging

from sqlalchemy.orm import Session

from ..domain.quotes.repository import QuoteRepository
from ..models import utcnow

logger = logging.getLogger(__name__)


def mark_expired_quotes(db: Session) -> dict:
    """
    Mark every pending quote whose valid_until has passed as expired

    Returns:
        dict: {"count": number of quotes expired}
    """
    now = utcnow()
    try:
        expired_ids = QuoteRepository.find_expired_ids(db, now)
        if not expired_ids:
            logger.debug("ℹ️ No quotes to expire")
            return {"count": 0}

        count = QuoteRepository.mark_as_expired(db, expired_ids, now)
        logger.info(f"⏰ Expired {count} quote(s)")
        return {"count": count}

    except Exception as e:
        logger.error(f"❌ Error expiring quotes: {str(e)}")
        db.rollback()
        raise
