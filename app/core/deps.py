from typing import Generator

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.cache import TokenCache, token_cache
from app.core.errors import AuthenticationError
from app.core.security import identity_from_token
from app.db.session import SessionLocal
from app.models.user import User, Role
from app.services.access import authorize
from app.services.notifications import Notifier, build_notifier

# Bearer token scheme shown in Swagger's Authorize dialog
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_notifier() -> Notifier:
    return build_notifier()


def get_cache() -> TokenCache:
    return token_cache


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if cred is None:
        raise AuthenticationError("Not authenticated")

    user_id = identity_from_token(cred.credentials)

    user = db.scalar(select(User).where(User.id == user_id))
    if not user:
        raise AuthenticationError("User not found")

    return user


def require_role(role: Role):
    def _checker(current_user: User = Depends(get_current_user)) -> User:
        return authorize(current_user, role)
    return _checker

get_current_student = require_role(Role.STUDENT)
get_current_instructor = require_role(Role.INSTRUCTOR)
