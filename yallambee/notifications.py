# Transactional email: templates plus an SMTP sender that never raises.
# Without SMTP_HOST the sender runs offline and only logs, so dev and CI need no mail server.
from __future__ import annotations

import logging
import os
import re
import smtplib
from email.message import EmailMessage
from typing import Any, Dict, Mapping

from .config import to_int, truthy

logger = logging.getLogger("yallambee.notifications")

SUPPORT_ADDRESS = "support@yallambeetinyhomes.com"

# Template name -> subject, plain-text and HTML bodies with {{placeholder}} fields
TEMPLATES: Dict[str, Dict[str, str]] = {
    "welcome": {
        "subject": "Welcome to Yallambee Tiny Homes!",
        "text": (
            "Hello {{name}},\n\n"
            "Thank you for signing up with Yallambee Tiny Homes! We're excited to have you on board.\n\n"
            "If you have any questions or need assistance, feel free to reach out to us.\n\n"
            "Best regards,\nThe Yallambee Tiny Homes Team"
        ),
        "html": (
            "<h1>Hello {{name}},</h1>"
            "<p>Thank you for joining Yallambee Tiny Homes! We're thrilled to have you with us.</p>"
            f"<p>If you have any questions, please <a href=\"mailto:{SUPPORT_ADDRESS}\">contact us</a>.</p>"
            "<p>Best regards,<br/>The Yallambee Tiny Homes Team</p>"
        ),
    },
    "booking_received": {
        "subject": "Your Booking Request - Yallambee Tiny Homes",
        "text": (
            "Dear {{name}},\n\n"
            "We have received your booking request. Our team will review it, and you will be notified upon confirmation.\n\n"
            "Booking Reference: {{booking_id}}\n"
            "Booking Dates: {{start_date}} to {{end_date}}\n\n"
            "Thank you for choosing Yallambee Tiny Homes!"
        ),
        "html": (
            "<h1>Dear {{name}},</h1>"
            "<p>We have received your booking request. Our team will review it, and you will be notified upon confirmation.</p>"
            "<p><strong>Booking Reference:</strong> {{booking_id}}</p>"
            "<p><strong>Booking Dates:</strong> {{start_date}} to {{end_date}}</p>"
            "<p>Thank you for choosing Yallambee Tiny Homes!</p>"
        ),
    },
    "booking_updated": {
        "subject": "Your Booking Has Been Updated - Yallambee Tiny Homes",
        "text": (
            "Dear {{name}},\n\n"
            "Your booking has been successfully updated.\n\n"
            "Booking Reference: {{booking_id}}\n"
            "New Dates: {{start_date}} to {{end_date}}\n"
            "Status: {{status}}\n\n"
            "Thank you for staying with Yallambee Tiny Homes."
        ),
        "html": (
            "<h1>Dear {{name}},</h1>"
            "<p>Your booking has been successfully updated.</p>"
            "<p><strong>Booking Reference:</strong> {{booking_id}}</p>"
            "<p><strong>New Dates:</strong> {{start_date}} to {{end_date}}</p>"
            "<p><strong>Status:</strong> {{status}}</p>"
            "<p>Thank you for staying with Yallambee Tiny Homes.</p>"
        ),
    },
    "booking_confirmation": {
        "subject": "Your Booking is Confirmed - Yallambee Tiny Homes",
        "text": (
            "Dear {{name}},\n\n"
            "We are delighted to confirm your booking with Yallambee Tiny Homes. "
            "Your stay is scheduled from {{start_date}} to {{end_date}}.\n\n"
            "We look forward to hosting you!\n\nBest regards,\nThe Yallambee Team"
        ),
        "html": (
            "<h1>Booking Confirmation</h1>"
            "<p>Dear {{name}},</p>"
            "<p>We are delighted to confirm your booking with <strong>Yallambee Tiny Homes</strong>.</p>"
            "<p>Your stay is scheduled from <strong>{{start_date}}</strong> to <strong>{{end_date}}</strong>.</p>"
            "<p>We look forward to hosting you!</p>"
            "<p>Best regards,<br/>The Yallambee Team</p>"
        ),
    },
}

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def render_template(name: str, context: Mapping[str, Any]) -> Dict[str, str]:
    """
    Fill a template's subject/text/html with values from `context`.

    Unknown placeholders are left as-is so a missing value is visible in the email.
    Raises KeyError for an unknown template name.
    """
    template = TEMPLATES[name]

    def _sub(match: re.Match) -> str:
        key = match.group(1)
        return str(context[key]) if key in context else match.group(0)

    return {part: _PLACEHOLDER.sub(_sub, body) for part, body in template.items()}


def smtp_enabled() -> bool:
    return bool(os.getenv("SMTP_HOST", "").strip())


def _sender_address() -> str:
    return os.getenv("EMAIL_FROM") or os.getenv("SMTP_USER") or "no-reply@yallambeetinyhomes.com"


def send_email(to: str, subject: str, text: str, html: str | None = None) -> bool:
    """
    Send one email over SMTP.

    Returns True when handed to the mail server, False when skipped (offline
    mode) or when delivery failed. Failures are logged, never raised: a booking
    must not be rolled back because an email could not be sent.
    """
    if not smtp_enabled():
        logger.info("email.skipped (SMTP not configured) to=%s subject=%s", to, subject)
        return False

    msg = EmailMessage()
    msg["From"] = _sender_address()
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")

    host = os.getenv("SMTP_HOST", "").strip()
    port = to_int(os.getenv("SMTP_PORT"), 587)
    user = os.getenv("SMTP_USER")
    password = os.getenv("SMTP_PASSWORD")
    try:
        with smtplib.SMTP(host, port, timeout=10) as server:
            if truthy(os.getenv("SMTP_USE_TLS", "true")):
                server.starttls()
            if user and password:
                server.login(user, password)
            server.send_message(msg)
        logger.info("email.sent to=%s subject=%s", to, subject)
        return True
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("email.failed to=%s subject=%s: %s", to, subject, exc)
        return False


def send_template(to: str, name: str, context: Mapping[str, Any]) -> bool:
    rendered = render_template(name, context)
    return send_email(to, rendered["subject"], rendered["text"], rendered["html"])


def display_name(user) -> str:
    return user.first_name or user.username


def booking_context(user, booking) -> Dict[str, Any]:
    """
    Placeholder values for the booking_* templates.

    Built while the request's session is open so background sends only carry plain values.
    """
    return {
        "name": display_name(user),
        "booking_id": booking.id,
        "start_date": booking.start_date.isoformat(),
        "end_date": booking.end_date.isoformat(),
        "status": booking.status,
    }
