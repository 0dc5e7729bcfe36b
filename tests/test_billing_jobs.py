"""
Scheduled billing jobs, run directly with a fixed clock.
- monthly generation (plan fee, one month ahead, blocked students skipped),
  overdue sweep (block + email, payment stays pending), weekly reminders,
  and one failing email never stopping a sweep.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta

from app.core.errors import ValidationError
from app.models.payment import Payment, PaymentStatus
from app.models.user import BeltLevel, MembershipPlan
from app.services.billing import (
    JOBS,
    block_overdue_accounts,
    generate_monthly_charges,
    send_payment_reminders,
)
from app.services.payments import create_student_payment, fee_for_plan
from tests.helpers import (
    RecordingNotifier,
    create_instructor_in_db,
    create_student_in_db,
    get_user,
    payments_of,
)

NOW = datetime(2026, 3, 1, 0, 0, 0)


def _pending_payment(db, student, due_date):
    payment = create_student_payment(db, student=student, due_date=due_date)
    db.commit()
    return payment


@pytest.mark.parametrize(
    "plan, fee",
    [
        (MembershipPlan.TWO_CLASSES, Decimal("14.99")),
        (MembershipPlan.THREE_CLASSES, Decimal("22.99")),
        (MembershipPlan.FOUR_CLASSES, Decimal("29.99")),
        ("4classes", Decimal("29.99")),
    ],
)
def test_fee_schedule(plan, fee):
    assert fee_for_plan(plan) == fee


def test_unknown_plan_rejected():
    with pytest.raises(ValidationError):
        fee_for_plan("5classes")


def test_monthly_charges_skip_blocked_students(db_session):
    instructor = create_instructor_in_db(db_session)
    a = create_student_in_db(db_session, instructor=instructor, plan=MembershipPlan.TWO_CLASSES)
    b = create_student_in_db(db_session, instructor=instructor, plan=MembershipPlan.FOUR_CLASSES)
    blocked = create_student_in_db(db_session, instructor=instructor, is_blocked=True)
    notifier = RecordingNotifier()

    summary = generate_monthly_charges(db_session, notifier, NOW)

    assert summary.processed == 2
    assert summary.failed == 0
    assert summary.notified == 2

    (pa,) = payments_of(db_session, a.id)
    assert pa.amount == Decimal("14.99")
    assert pa.due_date == datetime(2026, 4, 1, 0, 0, 0)
    assert pa.status == PaymentStatus.PENDING
    assert pa.instructor_id == instructor.id

    (pb,) = payments_of(db_session, b.id)
    assert pb.amount == Decimal("29.99")

    assert payments_of(db_session, blocked.id) == []
    assert notifier.subjects_for(a.email) == ["Monthly Payment Due"]
    assert any("$14.99" in body for (to, _, body) in notifier.sent if to == a.email)


def test_monthly_due_date_clamps_to_month_end(db_session):
    student = create_student_in_db(db_session, instructor=create_instructor_in_db(db_session))

    generate_monthly_charges(db_session, RecordingNotifier(), datetime(2026, 1, 31, 0, 0, 0))

    (payment,) = payments_of(db_session, student.id)
    assert payment.due_date == datetime(2026, 2, 28, 0, 0, 0)


def test_monthly_charges_survive_email_failure(db_session):
    instructor = create_instructor_in_db(db_session)
    broken = create_student_in_db(db_session, instructor=instructor, full_name="A Broken")
    ok = create_student_in_db(db_session, instructor=instructor, full_name="B Fine")
    notifier = RecordingNotifier(failing={broken.email})

    summary = generate_monthly_charges(db_session, notifier, NOW)

    # the payment is still created, only the email is lost
    assert summary.processed == 2
    assert summary.notified == 1
    assert len(payments_of(db_session, broken.id)) == 1
    assert len(payments_of(db_session, ok.id)) == 1
    assert notifier.subjects_for(ok.email) == ["Monthly Payment Due"]


def test_monthly_charges_twice_creates_two_payments(db_session):
    student = create_student_in_db(db_session, instructor=create_instructor_in_db(db_session))

    generate_monthly_charges(db_session, RecordingNotifier(), NOW)
    generate_monthly_charges(db_session, RecordingNotifier(), NOW)

    assert len(payments_of(db_session, student.id)) == 2


def test_overdue_sweep_blocks_only_old_pending_payments(db_session):
    instructor = create_instructor_in_db(db_session)
    late = create_student_in_db(db_session, instructor=instructor)
    recent = create_student_in_db(db_session, instructor=instructor)
    paid_late = create_student_in_db(db_session, instructor=instructor)

    late_payment = _pending_payment(db_session, late, NOW - relativedelta(months=2))
    _pending_payment(db_session, recent, NOW - relativedelta(months=1))
    paid = _pending_payment(db_session, paid_late, NOW - relativedelta(months=3))
    paid.status = PaymentStatus.PAID
    db_session.commit()

    notifier = RecordingNotifier()
    summary = block_overdue_accounts(db_session, notifier, NOW)

    assert summary.processed == 1
    assert get_user(db_session, str(late.id)).is_blocked is True
    assert get_user(db_session, str(recent.id)).is_blocked is False
    assert get_user(db_session, str(paid_late.id)).is_blocked is False
    assert notifier.subjects_for(late.email) == ["Account Blocked - Overdue Payments"]

    # blocking is the overdue state; the payment row stays pending
    assert db_session.get(Payment, late_payment.id).status == PaymentStatus.PENDING


def test_overdue_sweep_repeats_for_still_overdue_student(db_session):
    student = create_student_in_db(db_session, instructor=create_instructor_in_db(db_session))
    _pending_payment(db_session, student, NOW - relativedelta(months=3))
    notifier = RecordingNotifier()

    block_overdue_accounts(db_session, notifier, NOW)
    block_overdue_accounts(db_session, notifier, NOW)

    assert notifier.subjects_for(student.email) == ["Account Blocked - Overdue Payments"] * 2


def test_overdue_sweep_continues_after_email_failure(db_session):
    instructor = create_instructor_in_db(db_session)
    first = create_student_in_db(db_session, instructor=instructor)
    second = create_student_in_db(db_session, instructor=instructor)
    _pending_payment(db_session, first, NOW - relativedelta(months=4))
    _pending_payment(db_session, second, NOW - relativedelta(months=3))
    notifier = RecordingNotifier(failing={first.email})

    summary = block_overdue_accounts(db_session, notifier, NOW)

    assert summary.processed == 2
    assert summary.notified == 1
    assert get_user(db_session, str(first.id)).is_blocked is True
    assert get_user(db_session, str(second.id)).is_blocked is True


def test_reminders_for_payments_due_within_a_week(db_session):
    instructor = create_instructor_in_db(db_session)
    soon = create_student_in_db(db_session, instructor=instructor)
    later = create_student_in_db(db_session, instructor=instructor)
    past_due = create_student_in_db(db_session, instructor=instructor)

    _pending_payment(db_session, soon, NOW + relativedelta(days=7))
    _pending_payment(db_session, later, NOW + relativedelta(days=8))
    _pending_payment(db_session, past_due, NOW - relativedelta(days=3))

    notifier = RecordingNotifier()
    summary = send_payment_reminders(db_session, notifier, NOW)

    assert summary.processed == 2
    assert notifier.subjects_for(soon.email) == ["Payment Reminder"]
    assert notifier.subjects_for(past_due.email) == ["Payment Reminder"]
    assert notifier.subjects_for(later.email) == []
    body = [b for (to, _, b) in notifier.sent if to == soon.email][0]
    assert "03/08/2026" in body

    # reminders never change state
    assert all(p.status == PaymentStatus.PENDING for p in payments_of(db_session, soon.id))
    assert get_user(db_session, str(past_due.id)).is_blocked is False


def test_job_registry_names():
    assert set(JOBS) == {"monthly", "overdue", "reminders"}


def test_belt_levels_are_ordered():
    assert BeltLevel.WHITE < BeltLevel.YELLOW < BeltLevel.BLACK
    assert max([BeltLevel.GREEN, BeltLevel.BROWN, BeltLevel.BLUE]) == BeltLevel.BROWN
    assert BeltLevel.BLUE.rank == 4
