class LeadValidationError(ValueError):
    """Submitted lead data failed validation. Nothing was written."""

    def __init__(self, errors: list[dict]):
        self.errors = errors
        fields = ", ".join(e["field"] for e in errors) or "unknown"
        super().__init__(f"Invalid lead submission: {fields}")


class LeadPersistenceError(RuntimeError):
    pass


class LeadNotFoundError(LookupError):
    def __init__(self, lead_id: str):
        self.lead_id = lead_id
        super().__init__(f"Lead {lead_id} not found")


class InvalidStatusError(ValueError):
    def __init__(self, status: str, allowed: tuple[str, ...]):
        self.status = status
        self.errors = [
            {"field": "status", "message": f"must be one of: {', '.join(allowed)}"}
        ]
        super().__init__(f"Invalid lead status: {status!r}")


class TransportError(RuntimeError):
    """Email could not be delivered to the relay."""


class ConfigurationError(RuntimeError):
    """Email transport is missing credentials or is misconfigured."""
