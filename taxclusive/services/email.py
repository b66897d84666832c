"""
Notification emails for website form submissions.
Bodies are rendered from Jinja2 templates and sent over SMTP.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from taxclusive import config
from taxclusive.db.models import utcnow

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates" / "email"


def nl2br(value: str) -> Markup:
    """Escape text and turn newlines into <br> tags."""
    return Markup("<br>").join(escape(value).split("\n"))


templates = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
)
templates.filters["nl2br"] = nl2br


class EmailDeliveryError(Exception):
    """The SMTP server could not be reached or refused the message."""


@dataclass
class EmailData:
    subject: str
    text: str
    html: Optional[str] = None
    reply_to: Optional[str] = None


def render(template: str, **context) -> tuple[str, str]:
    """Render the text and HTML variants of an email template."""
    text = templates.get_template(f"{template}.txt").render(**context)
    html = templates.get_template(f"{template}.html").render(**context)
    return text, html


def format_contact_email(
    first_name: str,
    last_name: str,
    email: str,
    subject: str,
    message: str,
    phone: Optional[str] = None,
) -> EmailData:
    text, html = render(
        "contact",
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        subject=subject,
        message=message,
    )
    return EmailData(subject=f"Contact Form: {subject}", text=text, html=html, reply_to=email)


def format_appointment_email(
    first_name: str,
    last_name: str,
    email: str,
    phone: str,
    service: str,
    date: str,
    time: str,
    meeting_type: str,
    message: Optional[str] = None,
) -> EmailData:
    text, html = render(
        "appointment",
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        service=service,
        date=date,
        time=time,
        meeting_type=meeting_type,
        message=message,
    )
    return EmailData(subject=f"Appointment Request: {service}", text=text, html=html, reply_to=email)


def format_newsletter_email(email: str) -> EmailData:
    text, html = render(
        "newsletter",
        email=email,
        subscribed_at=utcnow().strftime("%Y-%m-%d %H:%M"),
    )
    return EmailData(subject="New Newsletter Subscription", text=text, html=html, reply_to=email)


def format_query_email(
    full_name: str,
    email: str,
    category: str,
    subject: str,
    query: str,
    phone: Optional[str] = None,
    priority: Optional[str] = None,
    files: Optional[list[str]] = None,
) -> EmailData:
    text, html = render(
        "query",
        full_name=full_name,
        email=email,
        phone=phone,
        category=category,
        priority=priority,
        subject=subject,
        query=query,
        files=files,
    )
    return EmailData(subject=f"Query: {subject}", text=text, html=html, reply_to=email)


def format_message_email(
    name: str,
    email: str,
    subject: str,
    message: str,
    phone: Optional[str] = None,
) -> EmailData:
    text, html = render(
        "message",
        name=name,
        email=email,
        phone=phone,
        subject=subject,
        message=message,
    )
    return EmailData(subject=f"Message: {subject}", text=text, html=html, reply_to=email)


def build_message(data: EmailData) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = formataddr((config.EMAIL_SENDER_NAME, config.EMAIL_SENDER_ADDRESS))
    msg["To"] = formataddr((config.EMAIL_RECIPIENT_NAME, config.EMAIL_RECIPIENT_ADDRESS))
    msg["Subject"] = data.subject
    if data.reply_to:
        msg["Reply-To"] = data.reply_to
    msg.set_content(data.text)
    if data.html:
        msg.add_alternative(data.html, subtype="html")
    return msg


def send_email(data: EmailData) -> None:
    """Send a notification to the firm's inbox. Blocking."""
    msg = build_message(data)
    try:
        if config.SMTP_SSL:
            server = smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, timeout=config.EMAIL_TIMEOUT_SECONDS)
        else:
            server = smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=config.EMAIL_TIMEOUT_SECONDS)
        with server:
            if not config.SMTP_SSL and config.SMTP_STARTTLS:
                server.starttls()
            if config.SMTP_USER:
                server.login(config.SMTP_USER, config.SMTP_PASSWORD)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email %r: %s", data.subject, exc)
        raise EmailDeliveryError("Failed to send email") from exc

    logger.info("Sent email %r", data.subject)


async def send_email_async(data: EmailData, timeout: Optional[float] = None) -> None:
    """Send from a worker thread, giving up after `timeout` seconds."""
    timeout = config.EMAIL_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        await asyncio.wait_for(asyncio.to_thread(send_email, data), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.error("Email service timeout after %.0fs for %r", timeout, data.subject)
        raise EmailDeliveryError("Email service timeout") from exc
