"""
services/billing.py

Scheduled billing lifecycle jobs.

Each job is a plain function of (db, notifier, now) so it can run from the
scheduler, from scripts/run_billing_job.py or from a test with a fixed clock.

Jobs:
- generate_monthly_charges : 1st of the month, one pending payment per
                             non-blocked student, due one month later
- block_overdue_accounts   : daily, blocks students with a pending payment
                             due two months ago or earlier
- send_payment_reminders   : weekly, emails every pending payment due within
                             the next seven days

Design principles:
- one record's failure never aborts the batch: every record is committed
  (or rolled back) on its own and notification is best-effort
- the payment row is never moved to "overdue"; blocking the student is the
  overdue state
- no duplicate-period guard: running generate_monthly_charges twice for the
  same month creates two payments per student
- the overdue sweep re-blocks and re-notifies a still-overdue student on every
  run

Related files:
- app.services.payments       : fee schedule / payment creation
- app.services.notifications  : email delivery and message text
- app.services.scheduler      : cron triggers

"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.models.payment import Payment, PaymentStatus
from app.models.user import User, Role
from app.services.notifications import (
    Notifier,
    notify_safely,
    monthly_fee_message,
    account_blocked_message,
    payment_reminder_message,
)
from app.services.payments import create_student_payment

logger = logging.getLogger(__name__)


@dataclass
class JobSummary:
    job: str
    processed: int = 0
    failed: int = 0
    notified: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "job": self.job,
            "processed": self.processed,
            "failed": self.failed,
            "notified": self.notified,
        }


def overdue_threshold(now: datetime) -> datetime:
    return now - relativedelta(months=settings.OVERDUE_AFTER_MONTHS)


def reminder_threshold(now: datetime) -> datetime:
    return now + timedelta(days=settings.REMINDER_LOOKAHEAD_DAYS)


"""
Monthly charge generation

- every student with is_blocked=False
- amount from the membership plan, due one calendar month after `now`
- payment committed per student, then the "Monthly Payment Due" email

"""

def generate_monthly_charges(db: Session, notifier: Notifier, now: datetime) -> JobSummary:
    summary = JobSummary(job="monthly_charges")
    due_date = now + relativedelta(months=1)

    students = db.scalars(
        select(User)
        .where(User.role == Role.STUDENT, User.is_blocked.is_(False))
        .order_by(User.created_at)
    ).all()

    for student in students:
        try:
            payment = create_student_payment(db, student=student, due_date=due_date)
            db.commit()
        except Exception as e:
            db.rollback()
            summary.failed += 1
            summary.errors.append(f"{student.id}: {e}")
            logger.error("Monthly charge for student %s failed: %s", student.id, e)
            continue

        summary.processed += 1
        logger.info("Generated payment %s for student %s", payment.id, student.full_name)

        subject, body = monthly_fee_message(payment.amount)
        if notify_safely(notifier, student.email, subject, body):
            summary.notified += 1

    logger.info("Monthly charges done: %s", summary.as_dict())
    return summary


"""
Overdue sweep

- pending payments with due_date <= now - OVERDUE_AFTER_MONTHS
- the owning student is blocked (committed per payment) and emailed
- the payment status is left untouched

"""

def block_overdue_accounts(db: Session, notifier: Notifier, now: datetime) -> JobSummary:
    summary = JobSummary(job="overdue_sweep")
    threshold = overdue_threshold(now)

    rows = db.execute(
        select(Payment.id, Payment.student_id)
        .where(Payment.status == PaymentStatus.PENDING, Payment.due_date <= threshold)
        .order_by(Payment.due_date)
    ).all()

    for payment_id, student_id in rows:
        try:
            student = db.get(User, student_id)
            if student is None:
                raise LookupError("student not found")
            student.is_blocked = True
            db.commit()
        except Exception as e:
            db.rollback()
            summary.failed += 1
            summary.errors.append(f"{payment_id}: {e}")
            logger.error("Blocking student %s for payment %s failed: %s", student_id, payment_id, e)
            continue

        summary.processed += 1
        logger.info("Blocked student %s (overdue payment %s)", student_id, payment_id)

        subject, body = account_blocked_message()
        if notify_safely(notifier, student.email, subject, body):
            summary.notified += 1

    logger.info("Overdue sweep done: %s", summary.as_dict())
    return summary


"""
Reminder sweep

- pending payments with due_date <= now + REMINDER_LOOKAHEAD_DAYS
- email only, no state change

"""

def send_payment_reminders(db: Session, notifier: Notifier, now: datetime) -> JobSummary:
    summary = JobSummary(job="payment_reminders")
    threshold = reminder_threshold(now)

    payments = db.scalars(
        select(Payment)
        .options(selectinload(Payment.student))
        .where(Payment.status == PaymentStatus.PENDING, Payment.due_date <= threshold)
        .order_by(Payment.due_date)
    ).all()

    for payment in payments:
        summary.processed += 1
        subject, body = payment_reminder_message(payment.amount, payment.due_date)
        if notify_safely(notifier, payment.student.email, subject, body):
            summary.notified += 1
        else:
            summary.failed += 1

    logger.info("Payment reminders done: %s", summary.as_dict())
    return summary


JOBS = {
    "monthly": generate_monthly_charges,
    "overdue": block_overdue_accounts,
    "reminders": send_payment_reminders,
}
