"""
services/exams.py

Belt-promotion exam workflow.

Main features:
- create an exam and announce it to eligible students
- self-service registration, bounded by max_registrants
- grading: results replaced wholesale, passed students promoted
- owner-only status update and deletion
- student-side queries (registered exams, completed results)

Design principles:
- permission checks first (app.services.access)
- announcement / result emails are best-effort and never fail the operation
- registration does not re-check the exam's eligibility requirements
- status update accepts any ExamStatus value, no transition table
- create_exam commits before announcing and grade_exam commits each
  promotion on its own; every other write is left to the caller to commit

Related files:
- app.models.exam          : Exam / ExamRegistration / ExamResult
- app.routers.exams        : exam API

"""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select, desc
from sqlalchemy.orm import Session, selectinload

from app.core.clock import utcnow
from app.core.errors import ValidationError, NotFoundError, ConflictError
from app.models.exam import Exam, ExamStatus, ExamRegistration, ExamResult
from app.models.user import User, Role, BeltLevel
from app.services.access import authorize, ensure_owner
from app.services.notifications import Notifier, notify_safely, new_exam_message, exam_results_message

logger = logging.getLogger(__name__)


def _exam_query():
    return select(Exam).options(
        selectinload(Exam.instructor),
        selectinload(Exam.registrations).selectinload(ExamRegistration.student),
        selectinload(Exam.results),
    )


def get_exam(db: Session, exam_id: uuid.UUID) -> Exam:
    exam = db.scalar(_exam_query().where(Exam.id == exam_id))
    if not exam:
        raise NotFoundError("Exam not found")
    return exam


def list_exams(db: Session, *, belt: str | None = None, status: str | None = None) -> list[Exam]:
    stmt = _exam_query().order_by(desc(Exam.created_at))
    try:
        if belt and belt != "all":
            stmt = stmt.where(Exam.target_belt == BeltLevel(belt))
        if status and status != "all":
            stmt = stmt.where(Exam.status == ExamStatus(status))
    except ValueError as e:
        raise ValidationError(str(e))
    return list(db.scalars(stmt).all())


"""
Students notified about a new exam

- belt equal to the exam's minimum belt
- not blocked

"""

def eligible_students(db: Session, minimum_belt: BeltLevel) -> list[User]:
    return list(
        db.scalars(
            select(User).where(
                User.role == Role.STUDENT,
                User.belt_level == minimum_belt,
                User.is_blocked.is_(False),
            )
        ).all()
    )


def announce_exam(db: Session, notifier: Notifier, exam: Exam) -> int:
    """Email every eligible student; returns how many emails went out."""
    sent = 0
    try:
        subject, body = new_exam_message(exam.name, exam.target_belt.value, exam.exam_date)
        for student in eligible_students(db, exam.minimum_belt):
            if notify_safely(notifier, student.email, subject, body):
                sent += 1
    except Exception as e:
        logger.error("Notifying students about exam %s failed: %s", exam.id, e)
    return sent


def create_exam(
    db: Session,
    notifier: Notifier,
    *,
    instructor: User,
    name: str | None,
    exam_date: datetime | None,
    max_registrants: int | None,
    target_belt: BeltLevel | None,
    minimum_belt: BeltLevel | None,
    minimum_training_months: int | None,
) -> Exam:
    authorize(instructor, Role.INSTRUCTOR)

    required = [name, exam_date, max_registrants, target_belt, minimum_belt, minimum_training_months]
    if any(v is None or v == "" for v in required):
        raise ValidationError("All fields are required")

    exam = Exam(
        name=name,
        instructor_id=instructor.id,
        exam_date=exam_date,
        max_registrants=max_registrants,
        target_belt=target_belt,
        minimum_belt=minimum_belt,
        minimum_training_months=minimum_training_months,
        status=ExamStatus.UPCOMING,
    )
    db.add(exam)
    db.commit()

    announce_exam(db, notifier, exam)
    return get_exam(db, exam.id)


"""
Student self-registration

- fails with "Exam is full" once registrations reach max_registrants
- registering twice is a no-op

"""

def register_student(db: Session, *, student: User, exam_id: uuid.UUID) -> Exam:
    authorize(student, Role.STUDENT)
    exam = get_exam(db, exam_id)

    if exam.is_full:
        raise ConflictError("Exam is full")

    if student.id not in exam.registrant_ids:
        exam.registrations.append(ExamRegistration(student_id=student.id, registered_at=utcnow()))
        db.flush()

    return exam


"""
Grading

- results replace any previous results, every entry stamped with `now`
- status becomes completed
- passed students get the target belt and a results email; a failing
  promotion is logged and skipped

"""

def grade_exam(
    db: Session,
    notifier: Notifier,
    *,
    instructor: User,
    exam_id: uuid.UUID,
    results: list[dict],
    now: datetime | None = None,
) -> Exam:
    authorize(instructor, Role.INSTRUCTOR)
    exam = get_exam(db, exam_id)
    graded_at = now or utcnow()

    student_ids = {r["student"] for r in results}
    known = set(
        db.scalars(select(User.id).where(User.id.in_(student_ids), User.role == Role.STUDENT)).all()
    )
    if student_ids - known:
        raise ValidationError("Results reference unknown students")

    for result in results:
        if not result.get("passed"):
            continue
        try:
            student = db.get(User, result["student"])
            if student is None:
                continue
            student.belt_level = exam.target_belt
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error("Promoting student %s for exam %s failed: %s", result.get("student"), exam_id, e)
            continue

        subject, body = exam_results_message(exam.name)
        notify_safely(notifier, student.email, subject, body)

    exam = get_exam(db, exam_id)
    exam.results = [
        ExamResult(
            student_id=result["student"],
            passed=bool(result.get("passed")),
            notes=result.get("notes"),
            graded_at=graded_at,
        )
        for result in results
    ]
    exam.status = ExamStatus.COMPLETED
    db.flush()
    return exam


def update_status(db: Session, *, instructor: User, exam_id: uuid.UUID, status: ExamStatus) -> Exam:
    authorize(instructor, Role.INSTRUCTOR)
    exam = get_exam(db, exam_id)
    ensure_owner(exam.instructor_id, instructor, "Not authorized to update this exam")

    exam.status = ExamStatus(status)
    db.flush()
    return exam


def delete_exam(db: Session, *, instructor: User, exam_id: uuid.UUID) -> None:
    authorize(instructor, Role.INSTRUCTOR)
    exam = get_exam(db, exam_id)
    ensure_owner(exam.instructor_id, instructor, "Not authorized to delete this exam")

    if exam.status != ExamStatus.UPCOMING:
        raise ConflictError("Can only delete upcoming exams")

    db.delete(exam)
    db.flush()


def registered_exams(db: Session, *, student_id: uuid.UUID) -> list[Exam]:
    stmt = (
        _exam_query()
        .join(ExamRegistration, ExamRegistration.exam_id == Exam.id)
        .where(
            ExamRegistration.student_id == student_id,
            Exam.status.in_([ExamStatus.UPCOMING, ExamStatus.ONGOING]),
        )
        .order_by(Exam.exam_date)
    )
    return list(db.scalars(stmt).unique().all())


def student_results(db: Session, *, student_id: uuid.UUID) -> list[Exam]:
    stmt = (
        _exam_query()
        .where(
            Exam.status == ExamStatus.COMPLETED,
            Exam.results.any(ExamResult.student_id == student_id),
        )
        .order_by(desc(Exam.exam_date))
    )
    return list(db.scalars(stmt).all())
