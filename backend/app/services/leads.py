import logging
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import (
    InvalidStatusError,
    LeadNotFoundError,
    LeadPersistenceError,
    LeadValidationError,
)
from app.models import Lead
from app.schemas.lead import DEFAULT_SOURCE, LEAD_STATUSES, LeadSubmission

logger = logging.getLogger("app.leads")


def _validation_errors(exc: ValidationError) -> list[dict]:
    out = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        out.append({"field": ".".join(loc) or "__root__", "message": err.get("msg", "invalid")})
    return out


def validate_submission(form_data: dict | LeadSubmission) -> LeadSubmission:
    if isinstance(form_data, LeadSubmission):
        return form_data
    if not isinstance(form_data, dict):
        raise LeadValidationError([{"field": "__root__", "message": "expected an object"}])
    try:
        return LeadSubmission.model_validate(form_data)
    except ValidationError as e:
        raise LeadValidationError(_validation_errors(e)) from e


def submit_contact_form(db: Session, form_data: dict | LeadSubmission) -> str:
    """
    Validate a contact form submission and store it as a new lead.

    Returns the generated lead id. No email is sent here; the dispatcher
    picks the lead up once the write has committed.
    """
    data = validate_submission(form_data)
    now = datetime.now(timezone.utc)

    lead = Lead(
        first_name=data.first_name,
        last_name=data.last_name,
        email=str(data.email),
        phone=data.phone,
        event_type=data.event_type,
        event_date=data.event_date,
        event_location=data.event_location,
        preferred_style=list(data.preferred_style),
        budget=data.budget,
        hear_about_us=data.hear_about_us,
        message=data.message,
        status="new",
        source=data.source or DEFAULT_SOURCE,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(lead)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("event=lead_write_failed email=%s", lead.email)
        raise LeadPersistenceError("Could not store lead") from e

    logger.info(
        "event=lead_created lead_id=%s event_type=%s source=%s",
        lead.id, lead.event_type, lead.source,
    )
    return lead.id


def get_lead(db: Session, lead_id: str) -> Lead:
    lead = db.get(Lead, lead_id)
    if lead is None:
        raise LeadNotFoundError(lead_id)
    return lead


def list_leads(db: Session, status: str | None = None, limit: int = 50) -> list[Lead]:
    stmt = db.query(Lead)
    if status:
        stmt = stmt.filter(Lead.status == status)
    return stmt.order_by(Lead.created_at.desc()).limit(limit).all()


def update_lead_status(db: Session, lead_id: str, status: str) -> Lead:
    status = (status or "").strip().lower()
    if status not in LEAD_STATUSES:
        raise InvalidStatusError(status, LEAD_STATUSES)

    lead = get_lead(db, lead_id)
    previous = lead.status
    lead.status = status
    lead.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise LeadPersistenceError("Could not update lead status") from e
    db.refresh(lead)

    logger.info("event=lead_status lead_id=%s from=%s to=%s", lead_id, previous, status)
    return lead


def record_lead_contact(db: Session, lead_id: str, notes: str | None = None) -> Lead:
    """
    Mark that someone reached out to the lead. A note, if given, is appended
    to the lead's notes as a timestamped line; earlier notes are kept.
    """
    lead = get_lead(db, lead_id)
    now = datetime.now(timezone.utc)

    notes = (notes or "").strip()
    if notes:
        line = f"{now:%Y-%m-%d %H:%M}: {notes}"
        lead.notes = f"{lead.notes}\n{line}" if lead.notes else line
    lead.last_contacted_at = now
    lead.updated_at = now
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise LeadPersistenceError("Could not record lead contact") from e
    db.refresh(lead)

    logger.info("event=lead_contacted lead_id=%s with_note=%s", lead_id, bool(notes))
    return lead


def lead_to_dict(lead: Lead) -> dict:
    return {
        "id": lead.id,
        "first_name": lead.first_name,
        "last_name": lead.last_name,
        "email": lead.email,
        "phone": lead.phone,
        "event_type": lead.event_type,
        "event_date": lead.event_date,
        "event_location": lead.event_location,
        "preferred_style": list(lead.preferred_style or []),
        "budget": lead.budget,
        "hear_about_us": lead.hear_about_us,
        "message": lead.message or "",
        "status": lead.status,
        "source": lead.source,
    }
