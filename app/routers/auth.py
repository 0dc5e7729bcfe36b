"""
auth.py

Authentication and account entry API.

Handles registration, login, the current profile, QR login and the public
instructor list used by the sign-up form. Bearer access tokens (JWT) are
returned in the response body.

Main features:
- registration (students get their first payment right away)
- login (blocked accounts are refused)
- current profile with instructor / students resolved
- QR login: generate a one-time token, verify it from an authenticated device
- instructor list for the registration form

Design principles:
- the access token travels in the Authorization header (Bearer)
- QR tokens live in the process-wide token cache for QR_TOKEN_TTL_SECONDS
- business rules live in app.services.users

Related files:
- app.core.security        : password hashing / JWT
- app.core.deps            : get_current_user
- app.services.users       : registration / login rules
- app.schemas.auth         : request / response bodies

"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.cache import TokenCache
from app.core.deps import get_db, get_cache, get_current_user
from app.core.security import create_access_token
from app.models.user import User
from app.schemas.auth import RegisterRequest, LoginRequest, TokenResponse, QrVerifyRequest
from app.schemas.user import ProfileResponse, UserSummary
from app.services.users import (
    register_user,
    authenticate,
    get_profile,
    photo_url,
    list_instructors,
    issue_qr_token,
    consume_qr_token,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


"""
Registration API

- rejects an email that is already registered
- students must name an existing instructor and a membership plan
- a student's first payment is created with the account

"""

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = register_user(
            db,
            email=data.email,
            password=data.password,
            full_name=data.full_name,
            role=data.role,
            age=data.age,
            gender=data.gender,
            instructor_id=data.instructor,
            membership_plan=data.membership_plan,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    return TokenResponse(token=create_access_token(subject=str(user.id)))


"""
Login API

- email / password check
- blocked accounts get 403

"""

@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, email=data.email, password=data.password)
    return TokenResponse(token=create_access_token(subject=str(user.id)))


@router.get("/me", response_model=ProfileResponse)
def me(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user = get_profile(db, current_user.id)
    profile = ProfileResponse.model_validate(user)
    profile.profile_photo = photo_url(user.profile_photo)
    return profile


"""
QR login token generation

- no authentication: the screen showing the QR code is not logged in yet
- the token is valid for QR_TOKEN_TTL_SECONDS and usable once

"""

@router.post("/qr-generate")
def qr_generate(cache: TokenCache = Depends(get_cache)):
    return {"token": issue_qr_token(cache)}


"""
QR login verification

- called by an already authenticated device that scanned the code
- consumes the token and returns a fresh access token for that user

"""

@router.post("/qr-verify", response_model=TokenResponse)
def qr_verify(
    data: QrVerifyRequest,
    cache: TokenCache = Depends(get_cache),
    current_user: User = Depends(get_current_user),
):
    consume_qr_token(cache, data.token)
    return TokenResponse(token=create_access_token(subject=str(current_user.id)))


@router.get("/instructors", response_model=list[UserSummary])
def instructors(db: Session = Depends(get_db)):
    return list_instructors(db)
