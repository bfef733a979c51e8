import logging

from fastapi import FastAPI, Depends, BackgroundTasks, Body, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import Base, engine, get_db, SessionLocal
from app.core.errors import (
    InvalidStatusError,
    LeadNotFoundError,
    LeadPersistenceError,
    LeadValidationError,
)
from app.core.logging import setup_logging
from app.schemas.lead import EmailAuditOut, LeadContactNote, LeadOut, LeadStatusUpdate
from app.services import audit
from app.services.dispatcher import LeadCreated, LeadDispatcher
from app.services.leads import (
    get_lead,
    lead_to_dict,
    list_leads,
    record_lead_contact,
    submit_contact_form,
    update_lead_status,
)

# Import models so Base.metadata knows them
import app.models  # noqa

setup_logging()
logger = logging.getLogger("app.api")

app = FastAPI(title="Photo Leads Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=600,
)

# Create tables (Alembic optional)
Base.metadata.create_all(bind=engine)

_dispatcher = LeadDispatcher(settings, SessionLocal)


def get_dispatcher() -> LeadDispatcher:
    return _dispatcher


# -------------------------
# Error mapping
# -------------------------

@app.exception_handler(LeadValidationError)
@app.exception_handler(InvalidStatusError)
def validation_error(request: Request, exc):
    return JSONResponse(status_code=422, content={"detail": "validation_failed", "errors": exc.errors})


@app.exception_handler(LeadNotFoundError)
def not_found(request: Request, exc: LeadNotFoundError):
    return JSONResponse(status_code=404, content={"detail": f"Lead {exc.lead_id} not found"})


@app.exception_handler(LeadPersistenceError)
def persistence_error(request: Request, exc: LeadPersistenceError):
    return JSONResponse(status_code=500, content={"detail": "Submission failed. Please try again later."})


# -------------------------
# Routes
# -------------------------

@app.get("/")
def health():
    return {"status": "ok"}


@app.post("/leads", status_code=201)
def create_lead(
    background_tasks: BackgroundTasks,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    dispatcher: LeadDispatcher = Depends(get_dispatcher),
):
    lead_id = submit_contact_form(db, payload)
    # Runs after the response is sent; the submitter never sees email errors
    lead = get_lead(db, lead_id)
    background_tasks.add_task(dispatcher.handle, LeadCreated(id=lead_id, data=lead_to_dict(lead)))
    return {"id": lead_id}


@app.get("/leads", response_model=list[LeadOut])
def leads_index(status: str | None = None, limit: int = 50, db: Session = Depends(get_db)):
    return list_leads(db, status=status, limit=min(max(limit, 1), 200))


@app.get("/leads/{lead_id}", response_model=LeadOut)
def lead_detail(lead_id: str, db: Session = Depends(get_db)):
    return get_lead(db, lead_id)


@app.patch("/leads/{lead_id}/status", response_model=LeadOut)
def lead_status(lead_id: str, body: LeadStatusUpdate, db: Session = Depends(get_db)):
    return update_lead_status(db, lead_id, body.status)


@app.post("/leads/{lead_id}/contact", response_model=LeadOut)
def lead_contact(lead_id: str, body: LeadContactNote, db: Session = Depends(get_db)):
    return record_lead_contact(db, lead_id, body.notes)


@app.post("/leads/{lead_id}/dispatch")
def redispatch(
    lead_id: str,
    db: Session = Depends(get_db),
    dispatcher: LeadDispatcher = Depends(get_dispatcher),
):
    # Manual resend; already-delivered emails are skipped by the audit check
    lead = get_lead(db, lead_id)
    result = dispatcher.handle(LeadCreated(id=lead_id, data=lead_to_dict(lead)))
    if result.error == "transport_not_configured":
        raise HTTPException(status_code=503, detail="Email transport is not configured")
    return {
        "lead_id": result.lead_id,
        "sent": result.sent,
        "skipped": result.skipped,
        "failed": result.failed,
        "is_date_available": result.is_date_available,
        "error": result.error,
    }


@app.get("/leads/{lead_id}/emails", response_model=list[EmailAuditOut])
def lead_emails(lead_id: str, db: Session = Depends(get_db)):
    get_lead(db, lead_id)
    return audit.list_emails(db, lead_id=lead_id)
