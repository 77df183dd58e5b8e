import logging
import smtplib
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from clinic_booking.core.config import settings

logger = logging.getLogger(__name__)


def _send_email_sync(to_email: str, subject: str, html_body: str) -> None:
    """Send email via SMTP (blocking). Use from background task."""
    if not settings.email_enabled:
        logger.debug("Email disabled (SMTP not configured), skipping send")
        return
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.from_name} <{settings.from_email}>"
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.from_email, [to_email], msg.as_string())
        logger.info("Email sent to %s", to_email)
    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)


def _html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def build_booking_confirmation_html(
    patient_name: str,
    clinic_name: str,
    doctor_name: str,
    booking_date: date,
    booking_time: str,
    duration_minutes: int,
    treatment: str,
) -> str:
    date_str = booking_date.strftime("%A, %B %d, %Y")
    contact = _html_escape(settings.contact_email)
    if settings.contact_phone:
        contact += f" &nbsp;·&nbsp; {_html_escape(settings.contact_phone)}"
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Booking Confirmation</title>
</head>
<body style="margin:0;padding:24px;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;background-color:#f3f4f6;">
  <div style="max-width:560px;margin:0 auto;background:#ffffff;border-radius:12px;padding:32px;">
    <h1 style="margin:0 0 8px 0;font-size:22px;color:#111827;">Booking Confirmed</h1>
    <p style="margin:0 0 24px 0;color:#6b7280;">Hi {_html_escape(patient_name) or 'there'}, your visit to {_html_escape(clinic_name)} is booked.</p>
    <p style="margin:0;color:#111827;"><strong>Date:</strong> {date_str}</p>
    <p style="margin:0;color:#111827;"><strong>Time:</strong> {booking_time} ({duration_minutes} min)</p>
    <p style="margin:0;color:#111827;"><strong>Treatment:</strong> {_html_escape(treatment)}</p>
    <p style="margin:0 0 24px 0;color:#111827;"><strong>Doctor:</strong> {_html_escape(doctor_name)}</p>
    <p style="margin:0;font-size:13px;color:#6b7280;">{_html_escape(settings.site_name)} &nbsp;·&nbsp; {contact}</p>
  </div>
</body>
</html>
"""


def send_booking_confirmation_email(
    to_email: str,
    patient_name: str,
    clinic_name: str,
    doctor_name: str,
    booking_date: date,
    booking_time: str,
    duration_minutes: int,
    treatment: str,
) -> None:
    """Compose and send an online booking confirmation (call from background task)."""
    subject = f"{settings.site_name} – Booking Confirmed"
    html = build_booking_confirmation_html(
        patient_name=patient_name,
        clinic_name=clinic_name,
        doctor_name=doctor_name,
        booking_date=booking_date,
        booking_time=booking_time,
        duration_minutes=duration_minutes,
        treatment=treatment,
    )
    _send_email_sync(to_email, subject, html)
