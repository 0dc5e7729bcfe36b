# tests/helpers.py
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.errors import ExternalServiceError
from app.core.security import get_password_hash
from app.models.payment import Payment
from app.models.user import User, Role, Gender, MembershipPlan, BeltLevel


class RecordingNotifier:
    """Collects sent emails; addresses in `failing` raise like a dead SMTP server."""

    def __init__(self, failing: set[str] | None = None):
        self.sent: list[tuple[str, str, str]] = []
        self.failing = failing or set()

    def send(self, to: str, subject: str, body: str) -> None:
        if to in self.failing:
            raise ExternalServiceError(f"Email to {to} failed")
        self.sent.append((to, subject, body))

    def subjects_for(self, to: str) -> list[str]:
        return [s for (addr, s, _) in self.sent if addr == to]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def unique_email(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:6]}@test.com"


def create_instructor_in_db(db: Session, *, email: str | None = None, password: str = "SenseiPass1") -> User:
    instructor = User(
        email=email or unique_email("sensei"),
        password_hash=get_password_hash(password),
        full_name="Sensei Test",
        age=40,
        gender=Gender.OTHER,
        role=Role.INSTRUCTOR,
    )
    db.add(instructor)
    db.commit()
    db.refresh(instructor)
    return instructor


def create_student_in_db(
    db: Session,
    *,
    instructor: User,
    email: str | None = None,
    password: str = "StudentPass1",
    full_name: str = "Student Test",
    plan: MembershipPlan = MembershipPlan.TWO_CLASSES,
    belt: BeltLevel = BeltLevel.WHITE,
    is_blocked: bool = False,
) -> User:
    student = User(
        email=email or unique_email("student"),
        password_hash=get_password_hash(password),
        full_name=full_name,
        age=12,
        gender=Gender.FEMALE,
        role=Role.STUDENT,
        membership_plan=plan,
        belt_level=belt,
        is_blocked=is_blocked,
        instructor_id=instructor.id,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


def login(client, email: str, password: str) -> str:
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return res.json()["token"]


def setup_instructor_and_student(client, db: Session, **student_kwargs):
    """
    Instructor in the DB + a student of theirs, both logged in.
    """
    instructor = create_instructor_in_db(db)
    student = create_student_in_db(db, instructor=instructor, **student_kwargs)

    return {
        "instructor": instructor,
        "instructor_id": str(instructor.id),
        "instructor_token": login(client, instructor.email, "SenseiPass1"),
        "student": student,
        "student_id": str(student.id),
        "student_email": student.email,
        "student_token": login(client, student.email, student_kwargs.get("password", "StudentPass1")),
    }


def get_user(db: Session, user_id: str) -> User:
    db.expire_all()
    return db.scalar(select(User).where(User.id == uuid.UUID(user_id)))


def payments_of(db: Session, user_id) -> list[Payment]:
    db.expire_all()
    student_id = uuid.UUID(str(user_id))
    return list(db.scalars(select(Payment).where(Payment.student_id == student_id)).all())
