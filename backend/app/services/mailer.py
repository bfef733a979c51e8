import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import getaddresses

import httpx

from app.core.config import Settings
from app.core.errors import ConfigurationError, TransportError

logger = logging.getLogger("app.mailer")


def _recipients(to: str | list[str]) -> list[str]:
    if isinstance(to, str):
        to = [to]
    return [a.strip() for a in to if a and a.strip()]


class EmailTransport:
    """Sends one HTML email. Raises TransportError when delivery fails."""

    def __init__(self, default_from: str, default_reply_to: str | None = None):
        self.default_from = default_from
        self.default_reply_to = default_reply_to

    def send(
        self,
        to: str | list[str],
        subject: str,
        html: str,
        from_addr: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        raise NotImplementedError


class SmtpTransport(EmailTransport):
    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        default_from: str,
        default_reply_to: str | None = None,
        use_tls: bool = True,
        timeout: float = 15.0,
    ):
        super().__init__(default_from, default_reply_to)
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, to, subject, html, from_addr=None, reply_to=None) -> bool:
        recipients = _recipients(to)
        if not recipients:
            raise TransportError("No recipients")

        from_header = from_addr or self.default_from
        reply_to = reply_to or self.default_reply_to

        msg = MIMEMultipart("alternative")
        msg["From"] = from_header
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        if reply_to:
            msg["Reply-To"] = reply_to
        msg.attach(MIMEText(html, "html", "utf-8"))

        envelope_from = getaddresses([from_header])[0][1] or from_header
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.user, self.password)
                refused = server.sendmail(envelope_from, recipients, msg.as_string())
        except (smtplib.SMTPException, OSError, UnicodeError) as e:
            # smtplib speaks ASCII unless the server negotiates SMTPUTF8
            raise TransportError(f"SMTP delivery to {', '.join(recipients)} failed: {e}") from e

        if refused:
            # sendmail only returns here if at least one recipient was accepted
            logger.warning("event=smtp_partial_refusal refused=%s", ",".join(refused))

        logger.info("event=email_sent transport=smtp to=%s subject=%r", ",".join(recipients), subject)
        return True


class MailgunTransport(EmailTransport):
    def __init__(
        self,
        api_key: str,
        domain: str,
        default_from: str,
        default_reply_to: str | None = None,
        base_url: str = "https://api.mailgun.net",
        timeout: float = 15.0,
    ):
        super().__init__(default_from, default_reply_to)
        self.api_key = api_key
        self.domain = domain
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def send(self, to, subject, html, from_addr=None, reply_to=None) -> bool:
        recipients = _recipients(to)
        if not recipients:
            raise TransportError("No recipients")

        data = {
            "from": from_addr or self.default_from,
            "to": recipients,
            "subject": subject,
            "html": html,
        }
        reply_to = reply_to or self.default_reply_to
        if reply_to:
            data["h:Reply-To"] = reply_to

        url = f"{self.base_url}/v3/{self.domain}/messages"
        try:
            resp = httpx.post(url, auth=("api", self.api_key), data=data, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise TransportError(f"Mailgun request failed: {e}") from e

        if resp.status_code >= 300:
            raise TransportError(f"Mailgun rejected message ({resp.status_code}): {resp.text[:200]}")

        logger.info("event=email_sent transport=mailgun to=%s subject=%r", ",".join(recipients), subject)
        return True


def build_transport(settings: Settings) -> EmailTransport:
    """
    The one place a transport gets constructed. Missing credentials raise
    ConfigurationError so the caller can report it instead of failing mid-send.
    """
    provider = (settings.EMAIL_PROVIDER or "").strip().lower()
    default_from = settings.from_header

    if provider == "smtp":
        missing = [k for k in ("SMTP_HOST", "SMTP_USER", "SMTP_PASS") if not getattr(settings, k)]
        if missing:
            raise ConfigurationError(f"SMTP transport missing: {', '.join(missing)}")
        return SmtpTransport(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASS,
            default_from=default_from,
            default_reply_to=settings.REPLY_TO_EMAIL,
            use_tls=settings.SMTP_USE_TLS,
            timeout=settings.SMTP_TIMEOUT,
        )

    if provider == "mailgun":
        missing = [k for k in ("MAILGUN_API_KEY", "MAILGUN_DOMAIN") if not getattr(settings, k)]
        if missing:
            raise ConfigurationError(f"Mailgun transport missing: {', '.join(missing)}")
        return MailgunTransport(
            api_key=settings.MAILGUN_API_KEY,
            domain=settings.MAILGUN_DOMAIN,
            default_from=default_from,
            default_reply_to=settings.REPLY_TO_EMAIL,
            base_url=settings.MAILGUN_BASE_URL,
        )

    raise ConfigurationError(f"Unknown EMAIL_PROVIDER: {settings.EMAIL_PROVIDER!r}")
