from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

EVENT_TYPES = ("wedding", "portrait", "engagement", "other")
LEAD_STATUSES = ("new", "contacted", "qualified", "converted", "lost")
DEFAULT_SOURCE = "website_form"


class LeadSubmission(BaseModel):
    """
    Contact form payload. The site posts camelCase keys (firstName, eventDate),
    scripts tend to use snake_case; both are accepted. Older forms send venue,
    photographyStyle and additionalInfo; those map onto the same fields.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=40)

    event_type: Optional[str] = None
    event_date: Optional[str] = Field(None, max_length=40)
    event_location: Optional[str] = Field(
        None,
        max_length=200,
        validation_alias=AliasChoices("eventLocation", "event_location", "venue"),
    )
    preferred_style: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("preferredStyle", "preferred_style", "photographyStyle"),
    )
    budget: Optional[str] = Field(None, max_length=80)
    hear_about_us: Optional[str] = Field(None, max_length=120)
    message: str = ""
    source: Optional[str] = Field(None, max_length=60)

    @model_validator(mode="before")
    @classmethod
    def _additional_info_as_message(cls, data):
        if isinstance(data, dict) and not data.get("message"):
            extra = data.get("additionalInfo") or data.get("additional_info")
            if extra:
                data = {**data, "message": extra}
        return data

    @field_validator("event_type")
    @classmethod
    def _known_event_type(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        v = v.lower()
        if v not in EVENT_TYPES:
            raise ValueError(f"must be one of: {', '.join(EVENT_TYPES)}")
        return v

    @field_validator("phone", "event_date", "event_location", "budget", "hear_about_us", "source")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("message", mode="before")
    @classmethod
    def _message_default(cls, v):
        return v or ""

    @field_validator("preferred_style", mode="before")
    @classmethod
    def _style_as_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v


class LeadStatusUpdate(BaseModel):
    status: str


class LeadContactNote(BaseModel):
    notes: Optional[str] = None


class LeadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    event_type: Optional[str] = None
    event_date: Optional[str] = None
    event_location: Optional[str] = None
    preferred_style: list[str] = []
    budget: Optional[str] = None
    hear_about_us: Optional[str] = None
    message: str = ""
    status: str
    source: str
    notes: Optional[str] = None
    last_contacted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class EmailAuditOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lead_id: str
    to: str
    subject: str
    email_type: str
    sent_at: datetime
    lead_name: str
    event_type: Optional[str] = None
    event_date: Optional[str] = None
