"""
services/notifications.py

Outgoing email for the billing jobs, exam workflow and instructor tools.

A notifier exposes a single `send(to, subject, body)` call that raises
ExternalServiceError when delivery fails. Callers that treat a message as
best-effort use `notify_safely`, which logs the failure and returns False so
the surrounding operation (a sweep, an exam creation, a grading) carries on.

Main features:
- SmtpNotifier       : delivery through smtplib (STARTTLS + login)
- LoggingNotifier    : development notifier used when EMAIL_ENABLED=False
- message builders   : subject / body text for every automatic email

Related files:
- app.core.config        : EMAIL_* settings
- app.core.deps          : get_notifier dependency
- app.services.billing   : monthly / overdue / reminder emails
- app.services.exams     : new exam / results emails

"""

import logging
import smtplib
from decimal import Decimal
from datetime import datetime
from email.message import EmailMessage
from typing import Protocol

from app.core.config import settings
from app.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class SmtpNotifier:
    def __init__(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, to: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        if self.sender:
            msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise ExternalServiceError(f"Email to {to} failed: {e}") from e


class LoggingNotifier:
    def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Email (not sent) to=%s subject=%r", to, subject)


def build_notifier() -> Notifier:
    if not settings.EMAIL_ENABLED:
        return LoggingNotifier()
    return SmtpNotifier(
        host=settings.EMAIL_HOST,
        port=settings.EMAIL_PORT,
        username=settings.EMAIL_USER,
        password=settings.EMAIL_PASS,
        sender=settings.EMAIL_FROM,
        use_tls=settings.EMAIL_USE_TLS,
        timeout=settings.EMAIL_TIMEOUT_SECONDS,
    )


def notify_safely(notifier: Notifier, to: str, subject: str, body: str) -> bool:
    """Send and swallow delivery failures, returning whether the email went out."""
    try:
        notifier.send(to, subject, body)
        return True
    except Exception as e:
        logger.warning("Notification %r to %s failed: %s", subject, to, e)
        return False


def format_amount(amount: Decimal) -> str:
    return f"${Decimal(amount):.2f}"


def format_date(value: datetime) -> str:
    return value.strftime("%m/%d/%Y")


# message builders

def monthly_fee_message(amount: Decimal) -> tuple[str, str]:
    return (
        "Monthly Payment Due",
        f"Your monthly payment of {format_amount(amount)} is due. Please log in to make your payment.",
    )


def account_blocked_message() -> tuple[str, str]:
    return (
        "Account Blocked - Overdue Payments",
        "Your account has been blocked due to overdue payments. Please contact your instructor.",
    )


def payment_reminder_message(amount: Decimal, due_date: datetime) -> tuple[str, str]:
    return (
        "Payment Reminder",
        f"Your payment of {format_amount(amount)} is due on {format_date(due_date)}. "
        "Please log in to make your payment.",
    )


def new_exam_message(exam_name: str, target_belt: str, exam_date: datetime) -> tuple[str, str]:
    return (
        "New Exam Available",
        f'A new exam "{exam_name}" for {target_belt} belt is available on {format_date(exam_date)}.',
    )


def exam_results_message(exam_name: str) -> tuple[str, str]:
    return (
        "Exam Results Available",
        f"Your results for the {exam_name} are now available. Please log in to view your results.",
    )


def belt_promotion_message(belt: str) -> tuple[str, str]:
    return (
        "Congratulations on Your Belt Promotion!",
        f"Congratulations! You have been promoted to {belt} belt.",
    )
