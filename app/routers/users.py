"""
users.py

Profile and instructor-side student management API.

Main features:
- instructor: list own students, block / unblock a student, set belt level
- any user: update profile, change password, upload profile photo
- email a user directly

Design principles:
- instructor routes require role=instructor and ownership of the student
- role / password / blocked flag / belt cannot be changed via /profile
- business rules live in app.services.users

Related files:
- app.services.users       : profile / student rules
- app.schemas.user         : request / response bodies
"""

import uuid

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user, get_current_instructor, get_notifier
from app.models.user import User
from app.schemas.auth import ChangePasswordRequest
from app.schemas.user import (
    UserResponse,
    ProfileUpdateRequest,
    BeltUpdateRequest,
    EmailRequest,
)
from app.services.notifications import Notifier
from app.services.users import (
    list_students,
    toggle_block,
    update_belt,
    update_profile,
    change_password,
    save_profile_photo,
    send_email_to_user,
    photo_url,
)

router = APIRouter(prefix="/api/users", tags=["users"])


def _with_photo_url(user: User) -> UserResponse:
    body = UserResponse.model_validate(user)
    body.profile_photo = photo_url(user.profile_photo)
    return body


@router.get("/instructor/{instructor_id}/students", response_model=list[UserResponse])
def instructor_students(
    instructor_id: uuid.UUID,
    db: Session = Depends(get_db),
    instructor: User = Depends(get_current_instructor),
):
    return [_with_photo_url(s) for s in list_students(db, instructor=instructor, instructor_id=instructor_id)]


"""
Block / unblock a student

- flips is_blocked
- only the student's own instructor

"""

@router.patch("/{student_id}/block", response_model=UserResponse)
def block_student(
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    instructor: User = Depends(get_current_instructor),
):
    try:
        student = toggle_block(db, instructor=instructor, student_id=student_id)
        db.commit()
        db.refresh(student)
    except Exception:
        db.rollback()
        raise
    return _with_photo_url(student)


@router.patch("/profile", response_model=UserResponse)
def profile(
    data: ProfileUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        user = update_profile(db, user=current_user, changes=data.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise
    return _with_photo_url(user)


"""
Belt update by the student's instructor

- congratulation email is best-effort

"""

@router.patch("/{student_id}/belt", response_model=UserResponse)
def belt(
    student_id: uuid.UUID,
    data: BeltUpdateRequest,
    db: Session = Depends(get_db),
    instructor: User = Depends(get_current_instructor),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        student = update_belt(db, notifier, instructor=instructor, student_id=student_id, belt_level=data.belt_level)
    except Exception:
        db.rollback()
        raise
    return _with_photo_url(student)


@router.patch("/change-password")
def password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        change_password(
            db,
            user=current_user,
            current_password=data.current_password,
            new_password=data.new_password,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"message": "Password updated successfully"}


"""
Profile photo upload

- image/* content types only, MAX_UPLOAD_BYTES at most
- stored under UPLOAD_DIR and served from /uploads

"""

@router.post("/profile-photo")
async def profile_photo(
    profile_photo: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    data = await profile_photo.read()
    try:
        user = save_profile_photo(
            db,
            user=current_user,
            filename=profile_photo.filename or "",
            content_type=profile_photo.content_type,
            data=data,
        )
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    body = _with_photo_url(user)
    return {
        "message": "Profile photo updated successfully",
        "profile_photo": body.profile_photo,
        "user": body,
    }


@router.post("/send-email/{user_id}")
def send_email(
    user_id: uuid.UUID,
    data: EmailRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    _: User = Depends(get_current_user),
):
    send_email_to_user(db, notifier, user_id=user_id, subject=data.subject, message=data.message)
    return {"success": True, "message": "Email sent successfully"}
