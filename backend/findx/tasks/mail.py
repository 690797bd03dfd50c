"""
Outbound mail tasks.

Delivery goes through smtplib against settings.smtp_*; transient SMTP
failures are retried by Celery up to three times.
"""

import logging
import smtplib
import time
from email.message import EmailMessage

from prometheus_client import Counter, Histogram

from findx.celery import celery_app
from findx.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

TASK_DURATION = Histogram(
    "celery_task_duration_seconds",
    "Time spent executing Celery tasks",
    ["task_name"]
)

TASK_FAILURES = Counter(
    "celery_task_failures_total",
    "Number of Celery task failures",
    ["task_name"]
)


def build_reset_email(to_address: str, name: str, code: str) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = "Your FindX password reset code"
    message["From"] = settings.mail_from
    message["To"] = to_address
    message.set_content(
        f"Hi {name},\n\n"
        f"Your password reset code is {code}. "
        f"It expires in {settings.reset_code_ttl_minutes} minutes.\n\n"
        "If you did not ask to reset your password you can ignore this email.\n"
    )
    return message


def deliver(message: EmailMessage) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as server:
        if settings.smtp_use_tls:
            server.starttls()
        if settings.smtp_username:
            server.login(settings.smtp_username, settings.smtp_password)
        server.send_message(message)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def send_password_reset_email(self, to_address: str, name: str, code: str) -> dict:
    """
    Email a password reset code.

    Args:
        to_address: recipient email
        name: greeting name
        code: the plain six-digit code

    Returns:
        {"sent": True, "to": to_address}
    """
    start_time = time.time()
    try:
        deliver(build_reset_email(to_address, name, code))
        logger.info(f"Sent password reset email to {to_address}")
        return {"sent": True, "to": to_address}

    except (smtplib.SMTPException, OSError) as exc:
        TASK_FAILURES.labels(task_name="send_password_reset_email").inc()
        logger.error(f"Password reset email to {to_address} failed: {exc}")
        raise self.retry(exc=exc, countdown=60)

    finally:
        TASK_DURATION.labels(task_name="send_password_reset_email").observe(time.time() - start_time)
