"""
exam.py

Belt-promotion exam models.

An Exam owns two child collections:
- registrations : ordered (by registered_at) list of registered students,
                  at most one row per (exam, student)
- results       : grading outcome per student, replaced wholesale when the
                  instructor grades the exam

Both are deleted together with their exam.

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.db.base import Base
from app.models.user import BeltLevel, User


class ExamStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Exam(Base):
    __tablename__ = "exams"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    instructor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    exam_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    max_registrants: Mapped[int] = mapped_column(Integer, nullable=False)
    target_belt: Mapped[BeltLevel] = mapped_column(
        SAEnum(BeltLevel, name="belt_level", values_callable=_values), nullable=False
    )

    # eligibility requirements
    minimum_belt: Mapped[BeltLevel] = mapped_column(
        SAEnum(BeltLevel, name="belt_level", values_callable=_values), nullable=False
    )
    minimum_training_months: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[ExamStatus] = mapped_column(
        SAEnum(ExamStatus, name="exam_status", values_callable=_values),
        nullable=False,
        default=ExamStatus.UPCOMING,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    instructor: Mapped[User] = relationship(User)
    registrations: Mapped[list["ExamRegistration"]] = relationship(
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="ExamRegistration.registered_at",
    )
    results: Mapped[list["ExamResult"]] = relationship(
        back_populates="exam",
        cascade="all, delete-orphan",
    )

    @property
    def registrants(self) -> list[User]:
        return [r.student for r in self.registrations]

    @property
    def registrant_ids(self) -> list[uuid.UUID]:
        return [r.student_id for r in self.registrations]

    @property
    def is_full(self) -> bool:
        return len(self.registrations) >= self.max_registrants

    @property
    def eligibility_requirements(self) -> dict:
        return {
            "minimum_belt": self.minimum_belt,
            "minimum_training_months": self.minimum_training_months,
        }


class ExamRegistration(Base):
    __tablename__ = "exam_registrations"
    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", name="uq_exam_registrations_exam_student"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    exam_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    registered_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    exam: Mapped[Exam] = relationship(back_populates="registrations")
    student: Mapped[User] = relationship(User)


class ExamResult(Base):
    __tablename__ = "exam_results"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    exam_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    passed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    graded_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    exam: Mapped[Exam] = relationship(back_populates="results")
    student: Mapped[User] = relationship(User)
