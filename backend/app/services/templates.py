"""
HTML bodies for the two lead emails.

Rendering is plain string building with no I/O. Business details default to
the configured settings and can be overridden per call with `business`.
"""
from __future__ import annotations

from datetime import datetime
from html import escape

from app.core.config import settings

CLIENT = "client"
ADMIN = "admin"
KINDS = (CLIENT, ADMIN)

AVAILABLE_PHRASE = "I'm currently available for your {occasion} on {date}!"
BOOKED_PHRASE = "I'm currently booked on {date}."
BOOKED_REFERRAL = (
    "I'd love to recommend some talented photographer colleagues who might be available. "
    "Alternatively, if your date is flexible, let me know and we can check other dates."
)
GENERIC_PHRASE = (
    "I'd love to learn more about what you're envisioning. What parts of the day are you "
    "most excited about? What do you want your photos to remind you of years from now?"
)


def event_type_label(event_type: str | None) -> str:
    if not event_type:
        return "Photography Services"
    if event_type == "other":
        return "Custom Photography Services"
    return event_type.strip().capitalize() + " Photography"


def _e(value) -> str:
    return escape(str(value)) if value not in (None, "") else ""


def _business(business: dict | None) -> dict:
    b = {
        "name": settings.BUSINESS_NAME,
        "email": settings.REPLY_TO_EMAIL,
        "phone": settings.BUSINESS_PHONE,
        "location": settings.BUSINESS_LOCATION,
        "signature": settings.SIGNATURE_NAME,
        "admin_url": settings.ADMIN_BASE_URL,
    }
    b.update(business or {})
    return b


# -------------------------
# Subjects
# -------------------------

def client_subject(fields: dict, business: dict | None = None) -> str:
    b = _business(business)
    return f"Thank You for Your {event_type_label(fields.get('event_type'))} Inquiry | {b['name']}"


def admin_subject(fields: dict) -> str:
    name = f"{fields.get('first_name', '')} {fields.get('last_name', '')}".strip()
    return f"New Lead: {name} - {event_type_label(fields.get('event_type'))}"


# -------------------------
# Shared layout
# -------------------------

def _layout(title: str, body: str, b: dict, year: int) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(title)} | {escape(b['name'])}</title>
</head>
<body style="margin: 0; padding: 0; font-family: 'Helvetica Neue', Helvetica, Arial, sans-serif; color: #333333; background-color: #000000;">
  <table border="0" cellpadding="0" cellspacing="0" width="100%" style="background-color: #000000;">
    <tr>
      <td align="center" valign="top">
        <table border="0" cellpadding="0" cellspacing="0" width="600" style="max-width: 600px; margin: 20px auto; background-color: #ffffff;">
          <tr>
            <td style="padding: 40px 40px 20px;">
              <h1 style="color: #000000; font-size: 28px; margin: 0 0 20px; font-weight: 600; text-align: center; font-family: 'Playfair Display', Georgia, serif;">{escape(title)}</h1>
{body}
            </td>
          </tr>
          <tr>
            <td align="center" style="background-color: #000000; padding: 30px 40px; color: #ffffff; font-size: 14px; line-height: 1.6;">
              <p style="margin: 0 0 10px;">
                {escape(b['name'])}<br>
                {escape(b['location'])}<br>
                <a href="mailto:{escape(b['email'])}" style="color: #ffffff; text-decoration: none;">{escape(b['email'])}</a>
              </p>
              <p style="margin: 0; font-size: 12px; color: rgba(255,255,255,0.7);">
                &copy; {year} {escape(b['name'])}. All rights reserved.
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""


def _p(text: str) -> str:
    return f'              <p style="margin: 0 0 20px; line-height: 1.6; font-size: 16px;">{text}</p>\n'


# -------------------------
# Client (thank you)
# -------------------------

def availability_block(fields: dict) -> str:
    """
    Exactly one of the three availability variants. A date whose availability
    was never determined gets the generic wording, same as no date at all.
    """
    date = fields.get("event_date")
    available = fields.get("is_date_available")
    event_type = fields.get("event_type")
    occasion = event_type if event_type and event_type != "other" else "event"

    if date and available is True:
        return (
            '              <div style="background-color: #f0f7ee; border-left: 4px solid #4caf50; padding: 15px; margin: 20px 0;">\n'
            f'                <p style="margin: 0; font-size: 16px; color: #2e7d32; font-weight: 600;">'
            f"{AVAILABLE_PHRASE.format(occasion=escape(occasion), date=escape(date))}</p>\n"
            "              </div>\n"
        )
    if date and available is False:
        return (
            '              <div style="background-color: #fef6f6; border-left: 4px solid #f44336; padding: 15px; margin: 20px 0;">\n'
            f'                <p style="margin: 0; font-size: 16px; color: #c62828; font-weight: 600;">'
            f"{BOOKED_PHRASE.format(date=escape(date))}</p>\n"
            f'                <p style="margin: 10px 0 0; font-size: 14px; color: #4a6a8a;">{BOOKED_REFERRAL}</p>\n'
            "              </div>\n"
        )
    return _p(GENERIC_PHRASE)


def render_client_email(fields: dict, business: dict | None = None, year: int | None = None) -> str:
    b = _business(business)
    year = year or datetime.now().year
    label = event_type_label(fields.get("event_type"))
    first_name = _e((fields.get("first_name") or "").split(" ")[0]) or "there"

    body = (
        _p(f"Hi {first_name},")
        + _p(
            f"Thank you for reaching out to {escape(b['name'])} about {escape(label)}. "
            "I'm truly honored to be considered to document this chapter of your story."
        )
        + availability_block(fields)
        + _p("Feel free to reply with any questions. I'd love to hear from you and connect further.")
        + f"""              <p style="margin: 0 0 5px; line-height: 1.6; font-size: 16px;">Warmly,</p>
              <p style="margin: 20px 0 5px; font-size: 18px; font-weight: 600; font-family: Georgia, serif;">{escape(b['signature'])}</p>
              <p style="margin: 0; font-size: 14px; color: #666;">
                {escape(b['name'])}<br>
                Phone: {escape(b['phone'])}<br>
                Email: {escape(b['email'])}
              </p>
"""
    )
    return _layout("Thank You for Your Inquiry", body, b, year)


# -------------------------
# Admin (internal notification)
# -------------------------

def _row(label: str, value: str) -> str:
    return (
        "                <tr>\n"
        f'                  <td style="padding: 8px 12px; background-color: #f2f2f2; font-weight: bold; width: 30%;">{label}</td>\n'
        f'                  <td style="padding: 8px 12px; border: 1px solid #ddd;">{value}</td>\n'
        "                </tr>\n"
    )


def availability_badge(is_date_available: bool | None) -> str:
    if is_date_available is None:
        return "Not Checked"
    return "Available" if is_date_available else "Not Available"


def render_admin_email(
    fields: dict,
    lead_id: str | None = None,
    business: dict | None = None,
    year: int | None = None,
) -> str:
    b = _business(business)
    year = year or datetime.now().year

    rows = _row("Name", _e(f"{fields.get('first_name', '')} {fields.get('last_name', '')}".strip()))
    rows += _row("Email", _e(fields.get("email")))
    if fields.get("phone"):
        rows += _row("Phone", _e(fields["phone"]))
    rows += _row("Event Type", escape(event_type_label(fields.get("event_type"))))
    if fields.get("event_date"):
        badge = availability_badge(fields.get("is_date_available"))
        rows += _row(
            "Event Date",
            f'{_e(fields["event_date"])} <span style="margin-left: 10px; font-size: 12px;">{badge}</span>',
        )
    if fields.get("event_location"):
        rows += _row("Location", _e(fields["event_location"]))
    if fields.get("preferred_style"):
        rows += _row("Preferred Style", _e(", ".join(fields["preferred_style"])))
    if fields.get("budget"):
        rows += _row("Budget", _e(fields["budget"]))
    if fields.get("hear_about_us"):
        rows += _row("How They Found Us", _e(fields["hear_about_us"]))
    if fields.get("message"):
        rows += _row("Message", _e(fields["message"]).replace("\n", "<br>"))
    rows += _row("Source", _e(fields.get("source") or "website_form"))
    if lead_id:
        rows += _row("Lead ID", _e(lead_id))

    body = _p("A new lead has been submitted through the website. Here are the details:")
    body += f"""              <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">
{rows}              </table>
"""
    if lead_id:
        body += f"""              <div style="margin: 30px 0; text-align: center;">
                <a href="{escape(b['admin_url'].rstrip('/'))}/{_e(lead_id)}" style="background-color: #000000; color: #ffffff; padding: 12px 30px; text-decoration: none; display: inline-block; font-size: 16px;">View Lead in Admin Panel</a>
              </div>
"""
    return _layout("New Lead Notification", body, b, year)


def render_email(kind: str, fields: dict, *, lead_id: str | None = None,
                 business: dict | None = None, year: int | None = None) -> str:
    if kind == CLIENT:
        return render_client_email(fields, business=business, year=year)
    if kind == ADMIN:
        return render_admin_email(fields, lead_id=lead_id, business=business, year=year)
    raise ValueError(f"Unknown email template: {kind!r}")
