"""Contact route - lead submission with attribution, delivered by email."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from digify import sanitize_attribution
from digify_server.config import settings
from digify_server.models import ContactSubmission
from digify_server.services.contact import deliver_contact
from digify_server.services.email import EmailDeliveryError, EmailService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contact"])


@router.post("/api/contact")
async def submit_contact(request: Request) -> JSONResponse:
    """Accept a contact form submission and forward it by email.

    The submitted attribution is sanitized and included in the email; it is
    never written back to the attribution cookie.
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"ok": False, "error": "Invalid JSON body"}, status_code=400)

    try:
        submission = ContactSubmission.model_validate(body)
    except ValidationError:
        return JSONResponse({"ok": False, "error": "Missing required fields"}, status_code=400)
    if not submission.complete:
        return JSONResponse({"ok": False, "error": "Missing required fields"}, status_code=400)

    attrib = sanitize_attribution(submission.attrib) if submission.attrib else None

    if not settings.email_configured:
        logger.warning("Contact submission received but email delivery is not configured")
        return JSONResponse(
            {
                "ok": True,
                "delivered": False,
                "reason": "Email not configured",
                "attrib": attrib.model_dump() if attrib else None,
            }
        )

    try:
        mailer = EmailService.from_settings(settings)
        email_id = await deliver_contact(mailer, submission, attrib)
    except EmailDeliveryError:
        return JSONResponse({"ok": False, "error": "Failed to send email"}, status_code=500)
    except Exception:
        logger.exception("Contact submission failed")
        return JSONResponse({"ok": False, "error": "Internal server error"}, status_code=500)

    return JSONResponse({"ok": True, "delivered": True, "email_id": email_id})
