from app.models.lead import Lead
from app.models.email_audit import EmailAudit
from app.models.booking import Booking

__all__ = ["Lead", "EmailAudit", "Booking"]
