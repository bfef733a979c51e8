import pytest

from app.services.templates import (
    ADMIN,
    CLIENT,
    admin_subject,
    availability_badge,
    client_subject,
    event_type_label,
    render_email,
)

LEAD = {
    "first_name": "Sarah",
    "last_name": "Johnson",
    "email": "sarah@example.com",
    "event_type": "wedding",
    "event_date": "2025-09-15",
}


def _client(**overrides):
    return render_email(CLIENT, {**LEAD, **overrides}, year=2025)


def test_available_date_message():
    html = _client(is_date_available=True)
    assert "currently available" in html
    assert "available for your wedding on 2025-09-15" in html
    assert "currently booked" not in html
    assert "love to learn more" not in html


def test_booked_date_message_offers_referral():
    html = _client(is_date_available=False)
    assert "currently booked on 2025-09-15" in html
    assert "photographer colleagues" in html
    assert "currently available" not in html


def test_no_date_uses_generic_message():
    html = _client(event_date=None, is_date_available=None)
    assert "love to learn more" in html
    assert "currently available" not in html
    assert "currently booked" not in html


def test_date_with_unknown_availability_falls_back_to_generic():
    html = _client(is_date_available=None)
    assert "love to learn more" in html
    assert "currently" not in html


def test_client_email_greets_by_first_name_with_footer_year():
    html = render_email(CLIENT, {**LEAD, "first_name": "Sarah Jane"}, year=2031)
    assert "Hi Sarah," in html
    assert "&copy; 2031" in html
    assert "Wedding Photography" in html


def test_client_email_escapes_lead_input():
    html = _client(first_name="<script>alert(1)</script>")
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_business_override():
    html = render_email(CLIENT, LEAD, business={"name": "Other Studio", "phone": "555-0000"}, year=2025)
    assert "Other Studio" in html
    assert "555-0000" in html


@pytest.mark.parametrize(
    "event_type,label",
    [
        ("wedding", "Wedding Photography"),
        ("engagement", "Engagement Photography"),
        ("portrait", "Portrait Photography"),
        ("other", "Custom Photography Services"),
        (None, "Photography Services"),
    ],
)
def test_event_type_label(event_type, label):
    assert event_type_label(event_type) == label


def test_subjects():
    assert "Wedding" in client_subject(LEAD)
    assert client_subject(LEAD, business={"name": "X Studio"}).endswith("| X Studio")
    assert admin_subject(LEAD) == "New Lead: Sarah Johnson - Wedding Photography"


def test_admin_email_lists_lead_fields():
    fields = {
        **LEAD,
        "phone": "555-0100",
        "event_location": "Skylands Manor",
        "preferred_style": ["documentary", "fine art"],
        "budget": "$5k+",
        "hear_about_us": "Google",
        "message": "Looking forward!\nThanks",
        "source": "website_form",
        "is_date_available": False,
    }
    html = render_email(ADMIN, fields, lead_id="abc-123", business={"admin_url": "https://x.test/admin/leads/"})

    for expected in (
        "Sarah Johnson",
        "sarah@example.com",
        "555-0100",
        "Wedding Photography",
        "2025-09-15",
        "Not Available",
        "Skylands Manor",
        "documentary, fine art",
        "$5k+",
        "Google",
        "Looking forward!<br>Thanks",
        "website_form",
        "https://x.test/admin/leads/abc-123",
    ):
        assert expected in html


def test_admin_email_omits_empty_rows():
    html = render_email(ADMIN, {"first_name": "Sam", "last_name": "Lee", "email": "sam@example.com"})
    assert "Phone" not in html
    assert "Budget" not in html
    assert "Event Date" not in html


def test_availability_badge():
    assert availability_badge(True) == "Available"
    assert availability_badge(False) == "Not Available"
    assert availability_badge(None) == "Not Checked"


def test_unknown_template_kind():
    with pytest.raises(ValueError):
        render_email("newsletter", LEAD)
