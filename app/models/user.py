"""
user.py

User, role, belt level and membership plan definitions.

A user is either a student or an instructor. Students belong to exactly one
instructor (instructor_id) and pay a recurring fee for their membership plan;
an instructor's `students` collection is the inverse side of that same
foreign key, so both views always agree.

Every auth, billing and exam feature is keyed on this model.

"""

import uuid
import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.db.base import Base


class Role(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"


"""
Belt levels in promotion order

white < yellow < orange < green < blue < brown < black

"""

class BeltLevel(str, Enum):
    WHITE = "white"
    YELLOW = "yellow"
    ORANGE = "orange"
    GREEN = "green"
    BLUE = "blue"
    BROWN = "brown"
    BLACK = "black"

    @property
    def rank(self) -> int:
        return BELT_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, BeltLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, BeltLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, BeltLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, BeltLevel):
            return NotImplemented
        return self.rank >= other.rank


BELT_ORDER = list(BeltLevel)


class MembershipPlan(str, Enum):
    TWO_CLASSES = "2classes"
    THREE_CLASSES = "3classes"
    FOUR_CLASSES = "4classes"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


def _values(enum_cls):
    return [m.value for m in enum_cls]


"""
User model

- email is the unique login identifier
- membership_plan / instructor_id are set only for students
- is_blocked is set by the overdue sweep or the instructor's block toggle
- belt_level changes through exam grading or the instructor's belt update

"""

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[Gender] = mapped_column(
        SAEnum(Gender, name="gender", values_callable=_values), nullable=False
    )
    profile_photo: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    role: Mapped[Role] = mapped_column(SAEnum(Role, name="user_role", values_callable=_values), nullable=False)
    belt_level: Mapped[BeltLevel] = mapped_column(
        SAEnum(BeltLevel, name="belt_level", values_callable=_values),
        nullable=False,
        default=BeltLevel.WHITE,
    )
    membership_plan: Mapped[MembershipPlan | None] = mapped_column(
        SAEnum(MembershipPlan, name="membership_plan", values_callable=_values), nullable=True
    )

    is_blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    instructor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True, index=True
    )

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    instructor: Mapped[Optional["User"]] = relationship(
        "User", remote_side="User.id", back_populates="students"
    )
    students: Mapped[list["User"]] = relationship(
        "User", back_populates="instructor", order_by="User.full_name"
    )
