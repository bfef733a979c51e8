"""
Re-run the lead dispatcher for every lead that is missing one of its emails.

Polling stand-in for the create trigger, and the manual follow-up path after
a transport outage. Emails already in the audit log are skipped.

    python scripts/dispatch_pending.py [--limit 50] [--dry-run]
"""
from __future__ import annotations

import argparse
import logging

from sqlalchemy import func

from app.core.config import settings
from app.core.db import SessionLocal
from app.core.logging import setup_logging
from app.models import EmailAudit, Lead
from app.services.dispatcher import LeadCreated, LeadDispatcher
from app.services.leads import lead_to_dict

logger = logging.getLogger("app.dispatch_pending")

EXPECTED_EMAILS = 2


def pending_leads(db, limit: int) -> list[Lead]:
    sent = (
        db.query(EmailAudit.lead_id, func.count(EmailAudit.id).label("n"))
        .group_by(EmailAudit.lead_id)
        .subquery()
    )
    return (
        db.query(Lead)
        .outerjoin(sent, sent.c.lead_id == Lead.id)
        .filter(func.coalesce(sent.c.n, 0) < EXPECTED_EMAILS)
        .order_by(Lead.created_at.asc())
        .limit(limit)
        .all()
    )


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--limit", type=int, default=50)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    setup_logging()

    db = SessionLocal()
    try:
        leads = pending_leads(db, args.limit)
        events = [LeadCreated(id=l.id, data=lead_to_dict(l)) for l in leads]
    finally:
        db.close()

    print(f"Pending leads: {len(events)}")
    if args.dry_run:
        for e in events:
            print(f"- {e.id} {e.data['email']} ({e.data.get('event_type') or '-'})")
        return

    dispatcher = LeadDispatcher(settings, SessionLocal)
    failures = 0
    for e in events:
        result = dispatcher.handle(e)
        if not result.ok:
            failures += 1
        print(f"- {e.id}: sent={result.sent} skipped={result.skipped} failed={result.failed} error={result.error}")

    print(f"\nDone. {len(events) - failures} ok, {failures} with failures")


if __name__ == "__main__":
    main()
