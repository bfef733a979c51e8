import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import Booking

logger = logging.getLogger("app.availability")

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%B %d, %Y", "%b %d, %Y")


def normalize_event_date(value: str | None) -> str | None:
    """Return the date as YYYY-MM-DD, or None when it can't be read."""
    if not value:
        return None
    raw = value.strip()

    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def check_date_availability(db: Session, event_date: str | None) -> bool | None:
    """
    True if nothing is booked on the date, False if it is taken.
    None means "not checked": no date, a date we can't parse, or a failed lookup.
    """
    day = normalize_event_date(event_date)
    if day is None:
        if event_date:
            logger.warning("event=availability_skip reason=unparseable date=%r", event_date)
        return None

    try:
        taken = (
            db.query(Booking.id)
            .filter(Booking.event_date == day, Booking.status == "booked")
            .first()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("event=availability_error date=%s", day)
        return None

    available = taken is None
    logger.info("event=availability date=%s available=%s", day, available)
    return available
