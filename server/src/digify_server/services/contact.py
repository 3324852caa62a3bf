"""Contact form notification: render and deliver one lead email."""

from html import escape

from digify import LeadAttribution
from digify_server.models import ContactSubmission
from digify_server.services.email import EmailService


def render_attribution(attrib: LeadAttribution) -> str:
    """HTML section summarizing the lead's attribution."""
    latest = " / ".join(
        part for part in (attrib.latest_channel, attrib.latest_source, attrib.latest_medium) if part
    )
    time_on_site = "-" if attrib.latest_total_time_sec is None else str(attrib.latest_total_time_sec)
    return (
        "<h3>Attribution</h3>"
        f"<p><strong>Visitor ID:</strong> {escape(attrib.digify_visitor_id or '-')}</p>"
        f"<p><strong>Latest:</strong> {escape(latest or '-')}</p>"
        f"<p><strong>Latest time on site (sec):</strong> {time_on_site}</p>"
        '<pre style="white-space:pre-wrap;background:#f6f8fa;padding:8px;border-radius:6px;">'
        f"{escape(attrib.touches_json)}</pre>"
    )


def render_contact_email(submission: ContactSubmission, attrib: LeadAttribution | None) -> tuple[str, str]:
    """Subject and HTML body for a contact submission. User input is escaped."""
    subject = f"New contact form message from {submission.name}"
    parts = [
        "<h2>New contact form message</h2>",
        f"<p><strong>Name:</strong> {escape(submission.name or '')}</p>",
        f"<p><strong>Email:</strong> {escape(submission.email or '')}</p>",
    ]
    if submission.company:
        parts.append(f"<p><strong>Company:</strong> {escape(submission.company)}</p>")
    if submission.phone:
        parts.append(f"<p><strong>Phone:</strong> {escape(submission.phone)}</p>")
    parts.append("<p><strong>Message:</strong></p>")
    parts.append(f'<p style="white-space: pre-wrap;">{escape(submission.message or "")}</p>')
    if attrib is not None:
        parts.append(render_attribution(attrib))
    return subject, "".join(parts)


async def deliver_contact(
    mailer: EmailService,
    submission: ContactSubmission,
    attrib: LeadAttribution | None,
) -> str | None:
    """Send the notification email for a submission; returns the provider message id."""
    subject, html = render_contact_email(submission, attrib)
    return await mailer.send(subject=subject, html=html, reply_to=submission.email)
