"""
exams.py

Belt-promotion exam API.

Main features:
- instructor: create an exam (eligible students are emailed)
- list / get exams
- student: register for an exam
- instructor: record results (passed students are promoted)
- instructor: update status / delete an upcoming exam they own
- student views: registered exams, completed exam results

Design principles:
- business rules live in app.services.exams
- routes with a fixed first segment (/registered, /student) are declared
  before /{exam_id} so they are matched first

Related files:
- app.services.exams       : exam workflow
- app.schemas.exam         : request / response bodies
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user, get_current_student, get_current_instructor, get_notifier
from app.models.user import User
from app.schemas.exam import (
    ExamCreateRequest,
    ExamResponse,
    ExamResultsRequest,
    ExamStatusUpdateRequest,
)
from app.services.notifications import Notifier
from app.services.exams import (
    create_exam,
    list_exams,
    get_exam,
    register_student,
    grade_exam,
    update_status,
    delete_exam,
    registered_exams,
    student_results,
)

router = APIRouter(prefix="/api/exams", tags=["exams"])


"""
Exam creation API

- every field is required
- students whose belt equals the minimum belt are emailed; email problems
  never fail the request

"""

@router.post("/", response_model=ExamResponse, status_code=status.HTTP_201_CREATED)
def create(
    body: ExamCreateRequest,
    db: Session = Depends(get_db),
    instructor: User = Depends(get_current_instructor),
    notifier: Notifier = Depends(get_notifier),
):
    eligibility = body.eligibility_requirements
    try:
        return create_exam(
            db,
            notifier,
            instructor=instructor,
            name=body.exam_name,
            exam_date=body.exam_date,
            max_registrants=body.max_registrants,
            target_belt=body.target_belt,
            minimum_belt=eligibility.minimum_belt if eligibility else None,
            minimum_training_months=eligibility.minimum_training_months if eligibility else None,
        )
    except Exception:
        db.rollback()
        raise


@router.get("/", response_model=list[ExamResponse])
def list_all(
    belt: str | None = Query(default=None, description="target belt or 'all'"),
    status: str | None = Query(default=None, description="exam status or 'all'"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return list_exams(db, belt=belt, status=status)


# upcoming / ongoing exams a student is registered for
@router.get("/registered/{student_id}", response_model=list[ExamResponse])
def registered(
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return registered_exams(db, student_id=student_id)


# completed exams with a result for the student, newest exam first
@router.get("/student/{student_id}/results", response_model=list[ExamResponse])
def results_for_student(
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return student_results(db, student_id=student_id)


@router.get("/{exam_id}", response_model=ExamResponse)
def get_one(
    exam_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return get_exam(db, exam_id)


"""
Exam registration API (student)

- 400 "Exam is full" when the exam is at capacity
- registering again is accepted and changes nothing

"""

@router.post("/{exam_id}/register", response_model=ExamResponse)
def register(
    exam_id: uuid.UUID,
    db: Session = Depends(get_db),
    student: User = Depends(get_current_student),
):
    try:
        exam = register_student(db, student=student, exam_id=exam_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_exam(db, exam.id)


"""
Exam results API (instructor)

- replaces all results and marks the exam completed
- passed students receive the exam's target belt

"""

@router.post("/{exam_id}/results", response_model=ExamResponse)
def results(
    exam_id: uuid.UUID,
    body: ExamResultsRequest,
    db: Session = Depends(get_db),
    instructor: User = Depends(get_current_instructor),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        exam = grade_exam(
            db,
            notifier,
            instructor=instructor,
            exam_id=exam_id,
            results=[r.model_dump() for r in body.results],
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_exam(db, exam.id)


@router.patch("/{exam_id}/status", response_model=ExamResponse)
def change_status(
    exam_id: uuid.UUID,
    body: ExamStatusUpdateRequest,
    db: Session = Depends(get_db),
    instructor: User = Depends(get_current_instructor),
):
    try:
        exam = update_status(db, instructor=instructor, exam_id=exam_id, status=body.status)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_exam(db, exam.id)


@router.delete("/{exam_id}")
def delete(
    exam_id: uuid.UUID,
    db: Session = Depends(get_db),
    instructor: User = Depends(get_current_instructor),
):
    try:
        delete_exam(db, instructor=instructor, exam_id=exam_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"message": "Exam deleted successfully"}
