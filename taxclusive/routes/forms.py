"""
Website form submissions: contact, appointment, query, message and newsletter.
Each accepted submission is emailed to the firm.
"""

import logging
import re
from datetime import date

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from taxclusive.schemas import AppointmentForm, ContactForm, MessageForm, NewsletterForm, QueryForm
from taxclusive.services import email as email_service
from taxclusive.services.recaptcha import verify_recaptcha

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["forms"])

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def form_error(message: str, errors: dict, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        {"success": False, "message": message, "errors": errors},
        status_code=status_code
    )


def missing_fields(form, labels: dict[str, str]) -> dict[str, str]:
    """Map each blank required field (by its wire name) to its error message."""
    errors = {}
    for field, label in labels.items():
        value = getattr(form, field)
        if not value or not value.strip():
            alias = type(form).model_fields[field].alias or field
            errors[alias] = f"{label} is required"
    return errors


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


@router.post("/contact")
async def submit_contact(form: ContactForm):
    """Contact form; the email must go out within the configured timeout."""
    errors = missing_fields(form, {
        "first_name": "First name",
        "last_name": "Last name",
        "email": "Email",
        "subject": "Subject",
        "message": "Message",
    })
    if errors:
        return form_error("Please fill in all required fields.", errors)
    if not is_valid_email(form.email):
        return form_error("Please provide a valid email address.", {"email": "Invalid email format"})

    data = email_service.format_contact_email(
        first_name=form.first_name,
        last_name=form.last_name,
        email=form.email,
        phone=form.phone,
        subject=form.subject,
        message=form.message,
    )
    try:
        await email_service.send_email_async(data)
    except email_service.EmailDeliveryError:
        logger.exception("Error submitting contact form")
        return form_error(
            "Failed to send message. Please try again later.",
            {"server": "Internal server error"},
            status_code=500
        )

    return {
        "success": True,
        "message": "Your message has been sent successfully! We will get back to you soon.",
        "data": {"firstName": form.first_name, "lastName": form.last_name, "email": form.email},
    }


@router.post("/appointment")
async def submit_appointment(form: AppointmentForm):
    """Appointment request for a future date."""
    errors = missing_fields(form, {
        "first_name": "First name",
        "last_name": "Last name",
        "email": "Email",
        "phone": "Phone number",
        "service": "Service selection",
        "date": "Preferred date",
        "time": "Preferred time",
        "meeting_type": "Meeting type",
    })
    if errors:
        return form_error("Please fill in all required fields.", errors)
    if not is_valid_email(form.email):
        return form_error("Please provide a valid email address.", {"email": "Invalid email format"})

    try:
        requested = date.fromisoformat(form.date[:10])
    except ValueError:
        return form_error("Please provide a valid date.", {"date": "Invalid date format"})
    if requested < date.today():
        return form_error(
            "Please select a future date for your appointment.",
            {"date": "Date cannot be in the past"}
        )

    data = email_service.format_appointment_email(
        first_name=form.first_name,
        last_name=form.last_name,
        email=form.email,
        phone=form.phone,
        service=form.service,
        date=form.date,
        time=form.time,
        meeting_type=form.meeting_type,
        message=form.message,
    )
    try:
        await email_service.send_email_async(data)
    except email_service.EmailDeliveryError:
        logger.exception("Error submitting appointment form")
        return form_error(
            "Failed to submit appointment request. Please try again later.",
            {"server": "Internal server error"},
            status_code=500
        )

    return {
        "success": True,
        "message": "Your appointment request has been submitted successfully! We will contact you soon to confirm.",
        "data": {
            "firstName": form.first_name,
            "lastName": form.last_name,
            "email": form.email,
            "service": form.service,
            "date": form.date,
            "time": form.time,
        },
    }


@router.post("/query")
async def submit_query(form: QueryForm):
    """Ask-a-query submission, guarded by reCAPTCHA."""
    recaptcha = await verify_recaptcha(form.recaptcha_token, "query_submission", 0.5)
    if not recaptcha.success:
        return form_error(
            "Security verification failed. Please try again.",
            {"recaptcha": recaptcha.error or "reCAPTCHA verification failed"},
            status_code=403
        )

    errors = missing_fields(form, {
        "full_name": "Full name",
        "email": "Email",
        "category": "Category",
        "subject": "Subject",
        "query": "Query",
    })
    if errors:
        return form_error("Please fill in all required fields.", errors)
    if not is_valid_email(form.email):
        return form_error("Please provide a valid email address.", {"email": "Invalid email format"})

    data = email_service.format_query_email(
        full_name=form.full_name,
        email=form.email,
        phone=form.phone,
        category=form.category,
        priority=form.priority,
        subject=form.subject,
        query=form.query,
        files=form.files,
    )
    try:
        await email_service.send_email_async(data)
    except email_service.EmailDeliveryError:
        logger.exception("Error submitting query form")
        return form_error(
            "Failed to submit query. Please try again later.",
            {"server": "Internal server error"},
            status_code=500
        )

    return {
        "success": True,
        "message": "Your query has been submitted successfully! Our experts will review it and get back to you soon.",
        "data": {
            "fullName": form.full_name,
            "email": form.email,
            "category": form.category,
            "subject": form.subject,
        },
    }


@router.post("/message")
async def submit_message(form: MessageForm):
    """General message form."""
    errors = missing_fields(form, {
        "name": "Name",
        "email": "Email",
        "subject": "Subject",
        "message": "Message",
    })
    if errors:
        return form_error("Please fill in all required fields.", errors)
    if not is_valid_email(form.email):
        return form_error("Please provide a valid email address.", {"email": "Invalid email format"})

    data = email_service.format_message_email(
        name=form.name,
        email=form.email,
        phone=form.phone,
        subject=form.subject,
        message=form.message,
    )
    try:
        await email_service.send_email_async(data)
    except email_service.EmailDeliveryError:
        logger.exception("Error submitting message form")
        return form_error(
            "Failed to send message. Please try again later.",
            {"server": "Internal server error"},
            status_code=500
        )

    return {
        "success": True,
        "message": "Your message has been sent successfully! We appreciate your inquiry and will respond promptly.",
        "data": {"name": form.name, "email": form.email, "subject": form.subject},
    }


@router.post("/newsletter")
async def submit_newsletter(form: NewsletterForm):
    """Newsletter signup, guarded by reCAPTCHA."""
    recaptcha = await verify_recaptcha(form.recaptcha_token, "newsletter_signup", 0.3)
    if not recaptcha.success:
        return form_error(
            "Security verification failed. Please try again.",
            {"recaptcha": recaptcha.error or "reCAPTCHA verification failed"},
            status_code=403
        )

    if not form.email or not form.email.strip():
        return form_error("Please provide your email address.", {"email": "Email is required"})
    if not is_valid_email(form.email):
        return form_error("Please provide a valid email address.", {"email": "Invalid email format"})

    try:
        await email_service.send_email_async(email_service.format_newsletter_email(form.email))
    except email_service.EmailDeliveryError:
        logger.exception("Error submitting newsletter form")
        return form_error(
            "Failed to subscribe to newsletter. Please try again later.",
            {"server": "Internal server error"},
            status_code=500
        )

    return {
        "success": True,
        "message": (
            "Thank you for subscribing to our newsletter! You will receive updates "
            "about tax regulations and financial insights."
        ),
        "data": {"email": form.email},
    }
