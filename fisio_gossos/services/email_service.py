"""
EmailService - sends transactional emails through the Mailtrap SDK and logs each attempt.

Synchronous; used from Celery workers with a session from get_sync_db().
"""
from __future__ import annotations

import html
import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from fisio_gossos.core.config import settings
from fisio_gossos.models.email_log import EmailLog

logger = logging.getLogger(__name__)

# Payload keys that describe the send itself; everything else is template data.
ENVELOPE_KEYS = frozenset(
    {"email_type", "to", "recipient_name", "subject", "language", "booking_id", "user_id"}
)

DEFAULT_SUBJECTS: dict[str, dict[str, str]] = {
    "welcome": {
        "ca": "Benvingut/da a Fisioterapia Gossos",
        "es": "Bienvenido/a a Fisioterapia Gossos",
        "en": "Welcome to Fisioterapia Gossos",
    },
    "booking_created": {
        "ca": "Cita confirmada",
        "es": "Cita confirmada",
        "en": "Appointment confirmed",
    },
    "reminder_24h": {
        "ca": "Recordatori: la teva cita és demà",
        "es": "Recordatorio: tu cita es mañana",
        "en": "Reminder: your appointment is tomorrow",
    },
    "booking_cancelled": {
        "ca": "Cita cancel·lada",
        "es": "Cita cancelada",
        "en": "Appointment cancelled",
    },
}


def _uuid_or_none(value: Any) -> Optional[UUID]:
    if not value:
        return None
    try:
        return value if isinstance(value, UUID) else UUID(str(value))
    except (TypeError, ValueError):
        return None


def resolve_subject(email_type: str, language: Optional[str], explicit: Optional[str] = None) -> str:
    """Explicit subject wins; otherwise the per-type default in the recipient's language."""
    if explicit:
        return explicit
    by_language = DEFAULT_SUBJECTS.get(email_type)
    if not by_language:
        return f"Fisioterapia Gossos - {email_type}"
    return by_language.get(language or settings.DEFAULT_LANGUAGE, by_language["es"])


def template_data(payload: dict[str, Any]) -> dict[str, Any]:
    """Keys of a send payload that are template variables."""
    return {k: v for k, v in payload.items() if k not in ENVELOPE_KEYS}


class EmailService:
    """Sends transactional emails using Mailtrap and records every attempt."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def is_configured(self) -> bool:
        return settings.EMAIL_ENABLED and bool(settings.MAILTRAP_API_KEY)

    # ------------------------------------------------------------------
    # Log helper
    # ------------------------------------------------------------------

    def _log(
        self,
        payload: dict[str, Any],
        *,
        subject: str,
        status: str,
        error_message: Optional[str] = None,
    ) -> None:
        """Persist one row in email_logs."""
        entry = EmailLog(
            email_type=payload["email_type"],
            status=status,
            recipient_email=payload["to"],
            recipient_name=payload.get("recipient_name"),
            subject=subject,
            booking_id=_uuid_or_none(payload.get("booking_id")),
            user_id=_uuid_or_none(payload.get("user_id")),
            language=payload.get("language"),
            email_data=template_data(payload) or None,
            error_message=error_message,
        )
        self._db.add(entry)
        # Committed right away so a failed attempt survives the re-raise
        self._db.commit()

    def log_not_configured(self, payload: dict[str, Any]) -> None:
        """Record a send that could not be attempted; it stays retryable."""
        self._log(
            payload,
            subject=resolve_subject(payload["email_type"], payload.get("language"), payload.get("subject")),
            status="failed",
            error_message="email_not_configured",
        )

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def send(self, payload: dict[str, Any]) -> None:
        """
        Send one email described by ``payload`` and log the outcome.

        Raises:
            Exception: Whatever the Mailtrap client raised, after the
                failed attempt was logged.
        """
        import mailtrap as mt

        subject = resolve_subject(payload["email_type"], payload.get("language"), payload.get("subject"))
        html_body = _render_template(
            title=subject,
            body=_render_body(payload.get("recipient_name"), template_data(payload)),
            language=payload.get("language") or settings.DEFAULT_LANGUAGE,
        )

        try:
            mail = mt.Mail(
                sender=mt.Address(email=settings.MAIL_SENDER_EMAIL, name=settings.MAIL_SENDER_NAME),
                to=[mt.Address(email=payload["to"])],
                subject=subject,
                html=html_body,
                category=payload["email_type"],
            )
            client = mt.MailtrapClient(token=settings.MAILTRAP_API_KEY)
            client.send(mail)

            self._log(payload, subject=subject, status="sent")
            logger.info("Email %s sent to %s", payload["email_type"], payload["to"])

        except Exception as exc:
            self._log(payload, subject=subject, status="failed", error_message=str(exc)[:500])
            raise


def _render_body(recipient_name: Optional[str], data: dict[str, Any]) -> str:
    greeting = f"<p>Hola {html.escape(recipient_name)},</p>" if recipient_name else "<p>Hola,</p>"
    rows = "".join(
        f"<tr><td style=\"padding:4px 12px 4px 0;color:#6b7280\">{html.escape(str(key))}</td>"
        f"<td style=\"padding:4px 0\">{html.escape(str(value))}</td></tr>"
        for key, value in data.items()
        if value is not None
    )
    details = f"<table>{rows}</table>" if rows else ""
    return greeting + details


def _render_template(title: str, body: str, language: str) -> str:
    """Inline HTML layout for transactional emails."""
    return f"""<!DOCTYPE html>
<html lang="{html.escape(language)}">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width,initial-scale=1">
</head>
<body style="margin:0;padding:0;background:#f3f4f6;font-family:'Segoe UI',Helvetica,Arial,sans-serif">
  <div style="max-width:560px;margin:40px auto;background:#ffffff;border-radius:12px;overflow:hidden">
    <div style="background:#0f766e;padding:24px 32px">
      <h1 style="margin:0;color:#ffffff;font-size:20px">{html.escape(title)}</h1>
    </div>
    <div style="padding:32px;color:#1f2937;font-size:15px;line-height:1.6">
      {body}
    </div>
    <div style="padding:16px 32px;border-top:1px solid #e5e7eb;text-align:center;color:#6b7280;font-size:12px">
      Fisioterapia Gossos
    </div>
  </div>
</body>
</html>"""
