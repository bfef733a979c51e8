"""
Lead notification dispatcher.

Runs once per LeadCreated event: loads the lead, checks the requested date
against the bookings calendar, then sends the client thank-you and the admin
notification. Each send is guarded by the email audit log, so replaying the
same event never mails the same (lead, type) twice unless two invocations
race between the check and the audit write.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, TypedDict

from langgraph.graph import StateGraph, END
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import ConfigurationError
from app.models import Lead
from app.services import audit
from app.services.availability import check_date_availability
from app.services.leads import lead_to_dict
from app.services.mailer import EmailTransport, build_transport
from app.services.templates import ADMIN, CLIENT, admin_subject, client_subject, render_email

logger = logging.getLogger("app.dispatcher")


@dataclass
class LeadCreated:
    id: str
    data: dict = field(default_factory=dict)


@dataclass
class DispatchResult:
    lead_id: str
    sent: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    is_date_available: bool | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failed


class DispatchState(TypedDict):
    lead_id: str
    db: Session
    transport: EmailTransport
    lead: dict | None
    is_date_available: bool | None
    sent: list[str]
    skipped: list[str]
    failed: list[str]
    error: str | None


class LeadDispatcher:
    def __init__(
        self,
        settings: Settings,
        session_factory: Callable[[], Session],
        transport_factory: Callable[[Settings], EmailTransport] = build_transport,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.transport_factory = transport_factory
        self.graph = self._build_graph()

    # -------------------------
    # Entry point
    # -------------------------

    def handle(self, event: LeadCreated) -> DispatchResult:
        logger.info("event=dispatch_start lead_id=%s", event.id)

        try:
            transport = self.transport_factory(self.settings)
        except ConfigurationError as e:
            logger.error("event=dispatch_fatal lead_id=%s reason=transport_not_configured detail=%s", event.id, e)
            return DispatchResult(lead_id=event.id, error="transport_not_configured")

        db = self.session_factory()
        try:
            out = self.graph.invoke(
                {
                    "lead_id": event.id,
                    "db": db,
                    "transport": transport,
                    "lead": None,
                    "is_date_available": None,
                    "sent": [],
                    "skipped": [],
                    "failed": [],
                    "error": None,
                }
            )
        finally:
            db.close()

        result = DispatchResult(
            lead_id=event.id,
            sent=out.get("sent", []),
            skipped=out.get("skipped", []),
            failed=out.get("failed", []),
            is_date_available=out.get("is_date_available"),
            error=out.get("error"),
        )
        logger.info(
            "event=dispatch_done lead_id=%s sent=%s skipped=%s failed=%s error=%s",
            event.id, result.sent, result.skipped, result.failed, result.error,
        )
        return result

    # -------------------------
    # Graph
    # -------------------------

    def _build_graph(self):
        g = StateGraph(DispatchState)
        g.add_node("load_lead", self._load_lead)
        g.add_node("check_availability", self._check_availability)
        g.add_node("send_client", self._send_client)
        g.add_node("send_admin", self._send_admin)

        g.set_entry_point("load_lead")
        g.add_conditional_edges(
            "load_lead",
            lambda s: "missing" if s.get("error") else "found",
            {"missing": END, "found": "check_availability"},
        )
        g.add_edge("check_availability", "send_client")
        g.add_edge("send_client", "send_admin")
        g.add_edge("send_admin", END)

        return g.compile()

    def _load_lead(self, state: DispatchState):
        lead = state["db"].get(Lead, state["lead_id"])
        if lead is None:
            logger.error("event=dispatch_skip lead_id=%s reason=lead_not_found", state["lead_id"])
            state["error"] = "lead_not_found"
            return state
        if not lead.email or not lead.first_name:
            logger.error("event=dispatch_skip lead_id=%s reason=missing_required_fields", state["lead_id"])
            state["error"] = "missing_required_fields"
            return state

        state["lead"] = lead_to_dict(lead)
        return state

    def _check_availability(self, state: DispatchState):
        event_date = state["lead"].get("event_date")
        # without a date there is nothing to look up
        state["is_date_available"] = (
            check_date_availability(state["db"], event_date) if event_date else None
        )
        return state

    def _send_client(self, state: DispatchState):
        fields = {**state["lead"], "is_date_available": state["is_date_available"]}
        self._send_one(
            state,
            email_type=audit.LEAD_THANK_YOU,
            to=fields["email"],
            subject=client_subject(fields, business=self._business()),
            html=render_email(CLIENT, fields, business=self._business()),
            reply_to=self.settings.REPLY_TO_EMAIL,
        )
        return state

    def _send_admin(self, state: DispatchState):
        fields = {**state["lead"], "is_date_available": state["is_date_available"]}
        self._send_one(
            state,
            email_type=audit.ADMIN_NOTIFICATION,
            to=list(self.settings.ADMIN_EMAILS),
            subject=admin_subject(fields),
            html=render_email(ADMIN, fields, lead_id=state["lead_id"], business=self._business()),
            reply_to=fields["email"],
        )
        return state

    # -------------------------
    # Helpers
    # -------------------------

    def _business(self) -> dict:
        s = self.settings
        return {
            "name": s.BUSINESS_NAME,
            "email": s.REPLY_TO_EMAIL,
            "phone": s.BUSINESS_PHONE,
            "location": s.BUSINESS_LOCATION,
            "signature": s.SIGNATURE_NAME,
            "admin_url": s.ADMIN_BASE_URL,
        }

    def _send_one(self, state: DispatchState, email_type: str, to, subject: str, html: str, reply_to: str | None):
        db = state["db"]
        lead_id = state["lead_id"]
        lead = state["lead"]

        try:
            already_sent = audit.has_sent(db, lead_id, email_type)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("event=audit_check_failed lead_id=%s type=%s", lead_id, email_type)
            state["failed"].append(email_type)
            return

        if already_sent:
            logger.info("event=email_skip lead_id=%s type=%s reason=already_sent", lead_id, email_type)
            state["skipped"].append(email_type)
            return

        try:
            state["transport"].send(
                to=to,
                subject=subject,
                html=html,
                from_addr=self.settings.from_header,
                reply_to=reply_to,
            )
        except Exception:
            # the sibling email still goes out; follow-up is manual
            logger.exception("event=email_failed lead_id=%s type=%s", lead_id, email_type)
            state["failed"].append(email_type)
            return

        state["sent"].append(email_type)
        try:
            audit.record(
                db,
                {
                    "lead_id": lead_id,
                    "to": to,
                    "subject": subject,
                    "email_type": email_type,
                    "lead_name": f"{lead['first_name']} {lead['last_name']}".strip(),
                    "event_type": lead.get("event_type"),
                    "event_date": lead.get("event_date"),
                },
            )
        except Exception:
            db.rollback()
            logger.exception("event=audit_failed lead_id=%s type=%s", lead_id, email_type)
