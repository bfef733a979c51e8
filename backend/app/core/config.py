from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str

    # Logging
    LOG_LEVEL: str = "INFO"

    # Email transport: "smtp" or "mailgun"
    EMAIL_PROVIDER: str = "smtp"

    # SMTP relay
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASS: str | None = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: float = 15.0

    # Mailgun HTTP API
    MAILGUN_API_KEY: str | None = None
    MAILGUN_DOMAIN: str | None = None
    MAILGUN_BASE_URL: str = "https://api.mailgun.net"

    # Business identity used in the emails
    BUSINESS_NAME: str = "Hariel Xavier Photography"
    BUSINESS_PHONE: str = "(862) 355-3502"
    BUSINESS_LOCATION: str = "Sparta, NJ"
    SIGNATURE_NAME: str = "Mauricio Fernandez"
    FROM_EMAIL: str = "hi@harielxavier.com"
    REPLY_TO_EMAIL: str = "hi@harielxavier.com"
    ADMIN_EMAILS: list[str] = ["hi@harielxavier.com"]
    ADMIN_BASE_URL: str = "https://harielxavier.com/admin/leads"

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="allow"
    )

    @property
    def from_header(self) -> str:
        return f"{self.BUSINESS_NAME} <{self.FROM_EMAIL}>"


settings = Settings()
