"""Server configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    port: int = 8007
    debug: bool = False
    log_level: str = "INFO"

    # Cookies
    cookie_secure: bool = True

    # Contact email delivery
    resend_api_key: str | None = None
    contact_to_email: str | None = None
    contact_from_email: str | None = None

    @property
    def email_configured(self) -> bool:
        """Whether every setting needed to deliver contact emails is present."""
        return bool(self.resend_api_key and self.contact_to_email and self.contact_from_email)


settings = Settings()
