from datetime import datetime, timezone
from sqlalchemy import Integer, String, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.core.db import Base


class EmailAudit(Base):
    """One row per delivered email. Rows are never updated."""

    __tablename__ = "leads_emails"
    __table_args__ = (
        UniqueConstraint("lead_id", "email_type", name="uq_leads_emails_lead_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lead_id: Mapped[str] = mapped_column(String(36), index=True)
    to: Mapped[str] = mapped_column(String(500), index=True)
    subject: Mapped[str] = mapped_column(String(300))
    email_type: Mapped[str] = mapped_column(String(40), index=True)
    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    # denormalized for review without a join
    lead_name: Mapped[str] = mapped_column(String(250), default="")
    event_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    event_date: Mapped[str | None] = mapped_column(String(40), nullable=True)
