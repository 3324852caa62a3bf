"""Outbound email delivery through Resend."""

import asyncio
import logging

import resend
from resend.exceptions import ResendError

from digify_server.config import Settings


class EmailDeliveryError(Exception):
    """The email provider rejected the message or could not be reached."""


class EmailService:
    """
    Transactional email sender backed by the Resend SDK.

    Usage:
        mailer = EmailService.from_settings(settings)
        email_id = await mailer.send(subject="Hello", html="<p>Hi</p>")
    """

    def __init__(
        self,
        api_key: str,
        from_email: str,
        to_email: str,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            api_key: Resend API key.
            from_email: Sender address.
            to_email: Recipient address.
            logger: Logger instance; defaults to ``logging.getLogger("digify_server.email")``.
        """
        self.from_email = from_email
        self.to_email = to_email
        self.logger = logger or logging.getLogger("digify_server.email")

        resend.api_key = api_key
        self.resend_client = resend

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailService":
        """Create a service from server settings; requires email to be configured."""
        if not settings.email_configured:
            raise ValueError("Email delivery is not configured")
        return cls(
            api_key=settings.resend_api_key or "",
            from_email=settings.contact_from_email or "",
            to_email=settings.contact_to_email or "",
        )

    async def send(self, subject: str, html: str, reply_to: str | None = None) -> str | None:
        """Send one email.

        The SDK call is blocking, so it runs in a worker thread. Not retried
        on failure.

        Returns:
            The provider's message id, if it returned one.

        Raises:
            EmailDeliveryError: When Resend rejects the message or the
                request does not complete.
        """
        params: dict = {
            "from": self.from_email,
            "to": [self.to_email],
            "subject": subject,
            "html": html,
        }
        if reply_to:
            params["reply_to"] = reply_to

        try:
            response = await asyncio.to_thread(self.resend_client.Emails.send, params)
        except ResendError as exc:
            self.logger.warning("Resend rejected email: %s", type(exc).__name__)
            raise EmailDeliveryError("Email provider rejected the message") from exc
        except OSError as exc:
            # requests' transport errors derive from OSError
            self.logger.warning("Email provider unreachable: %s", type(exc).__name__)
            raise EmailDeliveryError("Email provider unreachable") from exc

        if isinstance(response, dict):
            return response.get("id")
        return getattr(response, "id", None)
