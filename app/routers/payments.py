"""
payments.py

Membership payment API.

Main features:
- instructor: create a payment for one of their students
- list a student's payments
- student: pay one of their own payments (pending -> paid)
- instructor: list every student's payments with a status filter
- instructor: send a written payment reminder
- instructor: CSV / Excel(xlsx) export of the payment list

Design principles:
- business rules live in app.services.payments
- scheduled generation / overdue / reminder jobs are in app.services.billing,
  not behind an HTTP route

Related files:
- app.services.payments    : fee schedule / pay action / listings
- app.schemas.payment      : request / response bodies
"""

import csv
import io
import uuid

from fastapi import APIRouter, Depends, Query, status
from openpyxl import Workbook
from sqlalchemy.orm import Session
from starlette.responses import Response, StreamingResponse

from app.core.deps import get_db, get_current_user, get_current_student, get_current_instructor, get_notifier
from app.models.user import User
from app.schemas.payment import (
    PaymentCreateRequest,
    PaymentResponse,
    InstructorPaymentResponse,
    PaymentStatusFilter,
    ReminderRequest,
)
from app.services.notifications import Notifier, format_date
from app.services.payments import (
    create_payment_for_student,
    pay_payment,
    list_student_payments,
    list_instructor_payments,
    send_payment_reminder,
)

router = APIRouter(prefix="/api/payments", tags=["payments"])

EXPORT_HEADER = ["student", "email", "plan", "amount", "due_date", "status", "paid_date"]


def _export_rows(payments):
    for p in payments:
        yield [
            p.student.full_name,
            p.student.email,
            p.membership_plan.value,
            f"{p.amount:.2f}",
            format_date(p.due_date),
            p.status.value,
            format_date(p.paid_date) if p.paid_date else "",
        ]


@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    body: PaymentCreateRequest,
    db: Session = Depends(get_db),
    instructor: User = Depends(get_current_instructor),
):
    try:
        payment = create_payment_for_student(
            db,
            instructor=instructor,
            student_id=body.student,
            due_date=body.due_date,
            amount=body.amount,
            membership_plan=body.membership_plan,
            status=body.status,
        )
        db.commit()
        db.refresh(payment)
    except Exception:
        db.rollback()
        raise
    return payment


@router.get("/student/{student_id}", response_model=list[PaymentResponse])
def student_payments(
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return list_student_payments(db, student_id=student_id)


"""
Pay action

- only the student who owns the payment
- sets status=paid and paid_date=now (paying twice overwrites paid_date)

"""

@router.patch("/{payment_id}/pay", response_model=PaymentResponse)
def pay(
    payment_id: uuid.UUID,
    db: Session = Depends(get_db),
    student: User = Depends(get_current_student),
):
    try:
        payment = pay_payment(db, student=student, payment_id=payment_id)
        db.commit()
        db.refresh(payment)
    except Exception:
        db.rollback()
        raise
    return payment


"""
Payments of an instructor's students

- status filter: all / pending / paid / overdue
- newest due date first

"""

@router.get("/instructor/{instructor_id}", response_model=list[InstructorPaymentResponse])
def instructor_payments(
    instructor_id: uuid.UUID,
    status: PaymentStatusFilter = Query(default="all"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_instructor),
):
    return list_instructor_payments(db, instructor_id=instructor_id, status=status)


"""
Payment list CSV download

- same rows as the instructor payment list
- UTF-8 BOM first so Excel opens the file with the right encoding

"""

@router.get("/instructor/{instructor_id}/export")
def export_payments_csv(
    instructor_id: uuid.UUID,
    status: PaymentStatusFilter = Query(default="all"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_instructor),
):
    payments = list_instructor_payments(db, instructor_id=instructor_id, status=status)

    def generate():
        yield "\ufeff"

        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(EXPORT_HEADER)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for row in _export_rows(payments):
            writer.writerow(row)
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    filename = f"payments_{instructor_id}_{status}.csv"
    return StreamingResponse(
        generate(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/instructor/{instructor_id}/export.xlsx")
def export_payments_xlsx(
    instructor_id: uuid.UUID,
    status: PaymentStatusFilter = Query(default="all"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_instructor),
):
    payments = list_instructor_payments(db, instructor_id=instructor_id, status=status)

    wb = Workbook()
    ws = wb.active
    ws.title = "payments"
    ws.append(EXPORT_HEADER)
    for row in _export_rows(payments):
        ws.append(row)

    buf = io.BytesIO()
    wb.save(buf)

    filename = f"payments_{instructor_id}_{status}.xlsx"
    return Response(
        content=buf.getvalue(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/send-reminder/{student_id}")
def send_reminder(
    student_id: uuid.UUID,
    body: ReminderRequest,
    db: Session = Depends(get_db),
    instructor: User = Depends(get_current_instructor),
    notifier: Notifier = Depends(get_notifier),
):
    send_payment_reminder(
        db,
        notifier,
        instructor=instructor,
        student_id=student_id,
        subject=body.subject,
        message=body.message,
    )
    return {"message": "Reminder sent successfully"}
