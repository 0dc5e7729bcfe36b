"""
security.py

Password hashing and access token issue / validation.

Low-level helpers only: no routers, no business rules.

Main features:
- password hashing and verification (bcrypt)
- JWT access token creation
- access token decoding into a user id

Design principles:
- `exp` is computed in UTC
- a single token type (bearer access token); the QR login flow re-issues one
- decoding failures surface as AuthenticationError, never as JWTError

Related files:
- app.core.config        : JWT secret / expiry
- app.core.deps          : resolves the current user from the bearer token
- app.routers.auth       : login / QR login

"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import AuthenticationError


# bcrypt hashing context
# deprecated="auto" keeps older schemes verifiable after a future switch

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


"""
Access token creation

- subject(sub): user id
- exp: expiry as a UTC timestamp
- sent back by the client in the Authorization header (Bearer)

"""

def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "sub": subject,
        "type": "access",
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


"""
Access token decoding

- validates signature, expiry and token type
- returns the user id carried in `sub`
- any failure raises AuthenticationError

"""

def identity_from_token(token: str) -> uuid.UUID:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        if payload.get("type") != "access":
            raise JWTError("Not an access token")

        sub = payload.get("sub")
        if not sub:
            raise JWTError("Missing subject")

        return uuid.UUID(sub)
    except (JWTError, ValueError):
        raise AuthenticationError("Could not validate credentials")
