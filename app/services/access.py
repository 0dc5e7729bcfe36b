"""
services/access.py

Role and ownership checks shared by the service layer.

Every workflow operation calls these first, before touching any data, so an
operation's permission rule is visible at its top instead of hidden in a
dependency chain.

Design principles:
- no HTTP / FastAPI dependency
- failures raise AuthorizationError (403)

Related files:
- app.core.deps          : resolves the authenticated user
- app.services.*         : callers

"""

import uuid

from app.core.errors import AuthorizationError
from app.models.user import User, Role


def authorize(user: User, required_role: Role) -> User:
    if user.role != required_role:
        raise AuthorizationError(f"User role {user.role.value} is not authorized to access this route")
    return user


def ensure_owner(owner_id: uuid.UUID | None, user: User, detail: str) -> None:
    if owner_id != user.id:
        raise AuthorizationError(detail)
