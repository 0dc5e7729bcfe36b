"""
services/users.py

Account rules: registration, login, profile and instructor-side student
management.

Main features:
- registration (student's first payment, instructor link)
- credential check (blocked accounts cannot log in)
- QR login tokens backed by the ephemeral token cache
- profile update / password change / profile photo
- instructor tools: student list, block toggle, belt update

Design principles:
- HTTP-free; errors come from app.core.errors
- the instructor <-> students link is the student's instructor_id only
- commit is left to the caller

Related files:
- app.models.user          : User / Role / BeltLevel
- app.services.payments    : first payment at registration
- app.core.cache           : QR token storage
- app.routers.auth / app.routers.users

"""

import logging
import secrets
import uuid
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.core.cache import TokenCache
from app.core.clock import utcnow
from app.core.config import settings
from app.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.core.security import get_password_hash, verify_password
from app.models.user import User, Role, BeltLevel
from app.services.access import authorize, ensure_owner
from app.services.notifications import Notifier, notify_safely, belt_promotion_message
from app.services.payments import create_student_payment

logger = logging.getLogger(__name__)

QR_KEY_PREFIX = "qr-"
ALLOWED_PHOTO_TYPES = {"image/jpeg": ".jpg", "image/png": ".png", "image/gif": ".gif", "image/webp": ".webp"}


"""
Registration

- email must be unused
- a student needs an existing instructor account
- a student's first payment (plan fee) is created immediately, due now

"""

def register_user(
    db: Session,
    *,
    email: str,
    password: str,
    full_name: str,
    role: Role,
    age: int,
    gender,
    instructor_id: uuid.UUID | None = None,
    membership_plan=None,
) -> User:
    if db.scalar(select(User).where(User.email == email)):
        raise ConflictError("Email already registered")

    instructor = None
    if role == Role.STUDENT:
        if membership_plan is None or instructor_id is None:
            raise ValidationError("Students need a membership plan and an instructor")
        instructor = db.get(User, instructor_id)
        if not instructor or instructor.role != Role.INSTRUCTOR:
            raise ValidationError("Instructor not found")

    user = User(
        email=email,
        password_hash=get_password_hash(password),
        full_name=full_name,
        role=role,
        age=age,
        gender=gender,
        membership_plan=membership_plan if role == Role.STUDENT else None,
        instructor=instructor,
    )
    db.add(user)
    db.flush()

    if role == Role.STUDENT:
        create_student_payment(db, student=user, due_date=utcnow())

    return user


def authenticate(db: Session, *, email: str, password: str) -> User:
    user = db.scalar(select(User).where(User.email == email))
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid credentials")

    if user.is_blocked:
        raise AuthorizationError("Account is blocked due to overdue payments")

    return user


def get_profile(db: Session, user_id: uuid.UUID) -> User:
    user = db.scalar(
        select(User)
        .options(selectinload(User.instructor), selectinload(User.students))
        .where(User.id == user_id)
    )
    if not user:
        raise NotFoundError("User not found")
    return user


def photo_url(path: str) -> str:
    if not path:
        return ""
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}{path}"


def list_instructors(db: Session) -> list[User]:
    return list(
        db.scalars(
            select(User)
            .where(User.role == Role.INSTRUCTOR, User.is_blocked.is_(False))
            .order_by(User.full_name)
        ).all()
    )


# QR login

def issue_qr_token(cache: TokenCache) -> str:
    token = secrets.token_hex(32)
    cache.set(f"{QR_KEY_PREFIX}{token}", "pending", settings.QR_TOKEN_TTL_SECONDS)
    return token


def consume_qr_token(cache: TokenCache, token: str) -> None:
    key = f"{QR_KEY_PREFIX}{token}"
    if cache.get(key) is None:
        raise ValidationError("Invalid or expired QR code")
    cache.delete(key)


# instructor tools

def list_students(db: Session, *, instructor: User, instructor_id: uuid.UUID) -> list[User]:
    authorize(instructor, Role.INSTRUCTOR)
    return list(
        db.scalars(
            select(User)
            .where(User.instructor_id == instructor_id, User.role == Role.STUDENT)
            .order_by(User.full_name)
        ).all()
    )


def _own_student(db: Session, instructor: User, student_id: uuid.UUID, detail: str) -> User:
    authorize(instructor, Role.INSTRUCTOR)
    student = db.get(User, student_id)
    if not student or student.role != Role.STUDENT:
        raise NotFoundError("Student not found")
    ensure_owner(student.instructor_id, instructor, detail)
    return student


def toggle_block(db: Session, *, instructor: User, student_id: uuid.UUID) -> User:
    student = _own_student(db, instructor, student_id, "Not authorized to manage this student")
    student.is_blocked = not student.is_blocked
    db.flush()
    logger.info("Student %s blocked=%s by instructor %s", student.id, student.is_blocked, instructor.id)
    return student


def update_belt(
    db: Session,
    notifier: Notifier,
    *,
    instructor: User,
    student_id: uuid.UUID,
    belt_level: BeltLevel,
) -> User:
    student = _own_student(db, instructor, student_id, "Not authorized to update this student")
    student.belt_level = BeltLevel(belt_level)
    db.commit()

    subject, body = belt_promotion_message(student.belt_level.value)
    notify_safely(notifier, student.email, subject, body)
    return student


# profile

def update_profile(db: Session, *, user: User, changes: dict) -> User:
    editable = {"full_name", "age", "gender", "membership_plan"}
    for key, value in changes.items():
        if key not in editable or value is None:
            continue
        if key == "membership_plan" and user.role != Role.STUDENT:
            continue
        setattr(user, key, value)
    db.flush()
    return user


def change_password(db: Session, *, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    user.password_hash = get_password_hash(new_password)
    db.flush()


def save_profile_photo(
    db: Session,
    *,
    user: User,
    filename: str,
    content_type: str | None,
    data: bytes,
) -> User:
    if not content_type or not content_type.startswith("image/"):
        raise ValidationError("Please upload an image file")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError("File too large")

    suffix = Path(filename or "").suffix.lower() or ALLOWED_PHOTO_TYPES.get(content_type, "")
    stored_name = f"{int(utcnow().timestamp() * 1000)}-{uuid.uuid4().hex[:8]}{suffix}"

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    (upload_dir / stored_name).write_bytes(data)

    user.profile_photo = f"/uploads/{stored_name}"
    db.flush()
    return user


def send_email_to_user(db: Session, notifier: Notifier, *, user_id: uuid.UUID, subject: str, message: str) -> User:
    """Direct email; delivery failures propagate as ExternalServiceError."""
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    notifier.send(user.email, subject, message)
    return user
