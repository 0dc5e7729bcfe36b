"""
services/scheduler.py

Cron triggers for the billing jobs.

- monthly charges : day 1 of every month, 00:00
- overdue sweep   : every day, 00:00
- reminders       : every Monday, 09:00

Each run opens its own session, calls the job from app.services.billing with
the current UTC time and closes the session. An exception escaping a job is
logged and does not stop the scheduler. APScheduler's default max_instances=1
skips a run while the previous run of the same job is still going.

Related files:
- app.services.billing   : job bodies
- app.main               : starts / stops the scheduler in the lifespan

"""

import logging
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.config import settings
from app.services.billing import (
    JobSummary,
    generate_monthly_charges,
    block_overdue_accounts,
    send_payment_reminders,
)
from app.services.notifications import Notifier

logger = logging.getLogger(__name__)


def run_job(
    job: Callable[[Session, Notifier, object], JobSummary],
    session_factory: Callable[[], Session],
    notifier: Notifier,
) -> JobSummary | None:
    db = session_factory()
    try:
        return job(db, notifier, utcnow())
    except Exception:
        logger.exception("Billing job %s failed", getattr(job, "__name__", job))
        return None
    finally:
        db.close()


def build_scheduler(session_factory: Callable[[], Session], notifier: Notifier) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone=settings.SCHEDULER_TIMEZONE)

    scheduler.add_job(
        run_job,
        CronTrigger(day=1, hour=0, minute=0, timezone=settings.SCHEDULER_TIMEZONE),
        args=[generate_monthly_charges, session_factory, notifier],
        id="monthly_charges",
        replace_existing=True,
    )
    scheduler.add_job(
        run_job,
        CronTrigger(hour=0, minute=0, timezone=settings.SCHEDULER_TIMEZONE),
        args=[block_overdue_accounts, session_factory, notifier],
        id="overdue_sweep",
        replace_existing=True,
    )
    scheduler.add_job(
        run_job,
        CronTrigger(day_of_week="mon", hour=9, minute=0, timezone=settings.SCHEDULER_TIMEZONE),
        args=[send_payment_reminders, session_factory, notifier],
        id="payment_reminders",
        replace_existing=True,
    )
    return scheduler
