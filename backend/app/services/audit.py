import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import EmailAudit

logger = logging.getLogger("app.audit")

LEAD_THANK_YOU = "lead_thank_you"
ADMIN_NOTIFICATION = "admin_notification"


def has_sent(db: Session, lead_id: str, email_type: str) -> bool:
    return (
        db.query(EmailAudit.id)
        .filter_by(lead_id=lead_id, email_type=email_type)
        .first()
        is not None
    )


def record(db: Session, entry: dict) -> None:
    """
    Append one audit row. A second row for the same (lead, type) means another
    invocation got there first; that one is dropped and logged.
    """
    to = entry["to"]
    row = EmailAudit(
        lead_id=entry["lead_id"],
        to=", ".join(to) if isinstance(to, (list, tuple)) else to,
        subject=entry["subject"],
        email_type=entry["email_type"],
        lead_name=entry.get("lead_name", ""),
        event_type=entry.get("event_type"),
        event_date=entry.get("event_date"),
    )
    if entry.get("sent_at"):
        row.sent_at = entry["sent_at"]

    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            "event=audit_duplicate lead_id=%s type=%s", entry["lead_id"], entry["email_type"]
        )
        return

    logger.info("event=audit_recorded lead_id=%s type=%s", entry["lead_id"], entry["email_type"])


def list_emails(
    db: Session,
    lead_id: str | None = None,
    to: str | None = None,
    email_type: str | None = None,
    since: datetime | None = None,
    limit: int = 100,
) -> list[EmailAudit]:
    stmt = db.query(EmailAudit)
    if lead_id:
        stmt = stmt.filter(EmailAudit.lead_id == lead_id)
    if to:
        stmt = stmt.filter(EmailAudit.to.ilike(f"%{to}%"))
    if email_type:
        stmt = stmt.filter(EmailAudit.email_type == email_type)
    if since:
        stmt = stmt.filter(EmailAudit.sent_at >= since)
    return stmt.order_by(EmailAudit.sent_at.asc(), EmailAudit.id.asc()).limit(limit).all()
