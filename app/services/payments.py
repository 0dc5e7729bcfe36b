"""
services/payments.py

Payment rules: fee schedule, payment creation, the pay action and the
instructor-side payment queries.

Routers call these functions and only shape the response.

Design principles:
- every fee comes from FEE_SCHEDULE
- status moves pending -> paid only through pay_payment
- "overdue" is expressed by blocking the student (app.services.billing);
  the payment row itself keeps status=pending
- commit is left to the caller (router / job)

Related files:
- app.models.payment       : Payment / PaymentStatus
- app.services.billing     : scheduled generation / overdue / reminders
- app.routers.payments     : payment API
- app.routers.auth         : first payment at registration

"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, desc
from sqlalchemy.orm import Session, selectinload

from app.core.clock import utcnow
from app.core.errors import ValidationError, NotFoundError
from app.models.payment import Payment, PaymentStatus
from app.models.user import User, Role, MembershipPlan
from app.services.access import authorize, ensure_owner
from app.services.notifications import Notifier


FEE_SCHEDULE: dict[MembershipPlan, Decimal] = {
    MembershipPlan.TWO_CLASSES: Decimal("14.99"),
    MembershipPlan.THREE_CLASSES: Decimal("22.99"),
    MembershipPlan.FOUR_CLASSES: Decimal("29.99"),
}


def fee_for_plan(plan: MembershipPlan | str) -> Decimal:
    try:
        return FEE_SCHEDULE[MembershipPlan(plan)]
    except ValueError:
        raise ValidationError(f"Unknown membership plan: {plan}")


"""
Create a pending payment for a student

- amount defaults to the fee of the student's plan
- instructor is copied from the student
- flush only; the caller commits

"""

def create_student_payment(
    db: Session,
    *,
    student: User,
    due_date: datetime,
    amount: Decimal | None = None,
    membership_plan: MembershipPlan | None = None,
    status: PaymentStatus = PaymentStatus.PENDING,
) -> Payment:
    plan = membership_plan or student.membership_plan
    if plan is None:
        raise ValidationError("Student has no membership plan")

    payment = Payment(
        student_id=student.id,
        instructor_id=student.instructor_id,
        amount=amount if amount is not None else fee_for_plan(plan),
        due_date=due_date,
        status=status,
        membership_plan=plan,
        paid_date=utcnow() if status == PaymentStatus.PAID else None,
    )
    db.add(payment)
    db.flush()
    return payment


def get_student(db: Session, student_id: uuid.UUID) -> User:
    student = db.get(User, student_id)
    if not student or student.role != Role.STUDENT:
        raise NotFoundError("Student not found")
    return student


"""
Manual payment creation by an instructor

- only for the instructor's own students

"""

def create_payment_for_student(
    db: Session,
    *,
    instructor: User,
    student_id: uuid.UUID,
    due_date: datetime,
    amount: Decimal | None = None,
    membership_plan: MembershipPlan | None = None,
    status: PaymentStatus = PaymentStatus.PENDING,
) -> Payment:
    authorize(instructor, Role.INSTRUCTOR)
    student = get_student(db, student_id)
    ensure_owner(student.instructor_id, instructor, "Not authorized to manage this student")

    return create_student_payment(
        db,
        student=student,
        due_date=due_date,
        amount=amount,
        membership_plan=membership_plan,
        status=status,
    )


"""
Pay action

- only the student the payment belongs to
- unconditional: paying an already paid payment overwrites paid_date

"""

def pay_payment(db: Session, *, student: User, payment_id: uuid.UUID, now: datetime | None = None) -> Payment:
    authorize(student, Role.STUDENT)

    payment = db.get(Payment, payment_id)
    if not payment:
        raise NotFoundError("Payment not found")

    ensure_owner(payment.student_id, student, "Not authorized to pay this payment")

    payment.status = PaymentStatus.PAID
    payment.paid_date = now or utcnow()
    db.flush()
    return payment


def list_student_payments(db: Session, *, student_id: uuid.UUID) -> list[Payment]:
    return list(
        db.scalars(
            select(Payment)
            .where(Payment.student_id == student_id)
            .order_by(desc(Payment.due_date))
        ).all()
    )


"""
Payments of every student of an instructor

- status=None or "all" returns every status
- newest due date first

"""

def list_instructor_payments(
    db: Session,
    *,
    instructor_id: uuid.UUID,
    status: PaymentStatus | str | None = None,
) -> list[Payment]:
    student_ids = select(User.id).where(User.instructor_id == instructor_id, User.role == Role.STUDENT)

    stmt = (
        select(Payment)
        .options(selectinload(Payment.student))
        .where(Payment.student_id.in_(student_ids))
        .order_by(desc(Payment.due_date))
    )
    if status and status != "all":
        stmt = stmt.where(Payment.status == PaymentStatus(status))

    return list(db.scalars(stmt).all())


def send_payment_reminder(
    db: Session,
    notifier: Notifier,
    *,
    instructor: User,
    student_id: uuid.UUID,
    subject: str,
    message: str,
) -> User:
    """Instructor-written reminder; delivery failures propagate to the caller."""
    authorize(instructor, Role.INSTRUCTOR)
    student = db.get(User, student_id)
    if not student:
        raise NotFoundError("Student not found")

    notifier.send(student.email, subject, message)
    return student
