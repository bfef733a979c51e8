import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import (
    InvalidStatusError,
    LeadNotFoundError,
    LeadPersistenceError,
    LeadValidationError,
)
from app.models import Lead
from app.services.leads import (
    get_lead,
    list_leads,
    record_lead_contact,
    submit_contact_form,
    update_lead_status,
)


def _fields(err: LeadValidationError) -> set[str]:
    return {e["field"] for e in err.errors}


def test_valid_submission_creates_new_lead(db, sarah):
    lead_id = submit_contact_form(db, sarah)

    assert lead_id
    lead = db.get(Lead, lead_id)
    assert lead is not None
    assert lead.status == "new"
    assert lead.source == "website_form"
    assert lead.first_name == "Sarah"
    assert lead.event_type == "wedding"
    assert lead.event_date == "2025-09-15"
    assert lead.created_at is not None
    assert lead.updated_at is not None
    assert lead.created_at == lead.updated_at


def test_snake_case_keys_and_optional_fields(db):
    lead_id = submit_contact_form(
        db,
        {
            "first_name": "  Ana ",
            "last_name": "Reyes",
            "email": "ana@example.com",
            "phone": "555-0100",
            "event_type": "Portrait",
            "preferred_style": "candid, editorial",
            "budget": "$2k-$4k",
            "hear_about_us": "Instagram",
            "message": "Family session in the fall",
            "source": "instagram_ad",
        },
    )
    lead = get_lead(db, lead_id)
    assert lead.first_name == "Ana"
    assert lead.event_type == "portrait"
    assert lead.preferred_style == ["candid", "editorial"]
    assert lead.source == "instagram_ad"
    assert lead.event_date is None


def test_missing_email_is_rejected_and_nothing_written(db, sarah):
    del sarah["email"]
    with pytest.raises(LeadValidationError) as exc:
        submit_contact_form(db, sarah)

    assert "email" in _fields(exc.value)
    assert db.query(Lead).count() == 0


@pytest.mark.parametrize("email", ["not-an-email", "sarah@", "@example.com", ""])
def test_malformed_email_is_rejected(db, sarah, email):
    sarah["email"] = email
    with pytest.raises(LeadValidationError) as exc:
        submit_contact_form(db, sarah)
    assert "email" in _fields(exc.value)
    assert db.query(Lead).count() == 0


def test_blank_names_are_rejected(db, sarah):
    sarah["firstName"] = "   "
    del sarah["lastName"]
    with pytest.raises(LeadValidationError) as exc:
        submit_contact_form(db, sarah)

    fields = _fields(exc.value)
    assert "firstName" in fields or "first_name" in fields
    assert "lastName" in fields or "last_name" in fields
    assert db.query(Lead).count() == 0


def test_unknown_event_type_is_rejected(db, sarah):
    sarah["eventType"] = "bar mitzvah"
    with pytest.raises(LeadValidationError):
        submit_contact_form(db, sarah)


def test_non_object_payload_is_rejected(db):
    with pytest.raises(LeadValidationError):
        submit_contact_form(db, ["sarah@example.com"])


def test_status_update_bumps_updated_at(db, sarah):
    lead_id = submit_contact_form(db, sarah)
    created = get_lead(db, lead_id).created_at

    lead = update_lead_status(db, lead_id, "Contacted")

    assert lead.status == "contacted"
    assert lead.updated_at >= created
    assert [l.id for l in list_leads(db, status="contacted")] == [lead_id]
    assert list_leads(db, status="new") == []


def test_status_update_rejects_unknown_status(db, sarah):
    lead_id = submit_contact_form(db, sarah)
    with pytest.raises(InvalidStatusError):
        update_lead_status(db, lead_id, "archived")
    assert get_lead(db, lead_id).status == "new"


def test_get_lead_missing():
    class _EmptyDb:
        def get(self, model, key):
            return None

    with pytest.raises(LeadNotFoundError):
        get_lead(_EmptyDb(), "nope")


def test_store_failure_raises_and_leaves_no_lead(db, sarah, monkeypatch):
    def _down():
        raise OperationalError("INSERT INTO leads", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", _down)
    with pytest.raises(LeadPersistenceError):
        submit_contact_form(db, sarah)

    monkeypatch.undo()
    assert db.query(Lead).count() == 0


def test_record_contact_appends_timestamped_notes(db, sarah):
    lead_id = submit_contact_form(db, sarah)

    lead = record_lead_contact(db, lead_id, "Called, left voicemail")
    assert lead.last_contacted_at is not None
    assert lead.notes.endswith(": Called, left voicemail")

    lead = record_lead_contact(db, lead_id, "Sent pricing guide")
    lines = lead.notes.splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("Called, left voicemail")
    assert lines[1].endswith("Sent pricing guide")


def test_record_contact_without_note_keeps_notes(db, sarah):
    lead_id = submit_contact_form(db, sarah)

    lead = record_lead_contact(db, lead_id)

    assert lead.notes is None
    assert lead.last_contacted_at is not None
    assert lead.status == "new"


def test_older_form_field_names_are_kept(db):
    lead_id = submit_contact_form(
        db,
        {
            "firstName": "Maria",
            "lastName": "Lopez",
            "email": "maria@example.com",
            "eventType": "wedding",
            "venue": "Perona Farms",
            "photographyStyle": ["documentary", "fine art"],
            "additionalInfo": "We'd love sunset portraits",
        },
    )
    lead = get_lead(db, lead_id)
    assert lead.event_location == "Perona Farms"
    assert lead.preferred_style == ["documentary", "fine art"]
    assert lead.message == "We'd love sunset portraits"


def test_message_wins_over_additional_info(db, sarah):
    sarah.update(message="Call after 5pm", additionalInfo="Outdoor ceremony")
    lead = get_lead(db, submit_contact_form(db, sarah))
    assert lead.message == "Call after 5pm"
