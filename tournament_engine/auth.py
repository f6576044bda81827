"""
Minimal auth for result submission: hashed passwords and JWT with a role claim.
Only the admin role may add or edit results. Passwords are never stored in plain text.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from jose import JWTError, jwt
from passlib.context import CryptContext

# pbkdf2_sha256 needs no native backend
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "tournament-dev-secret-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 12

ROLE_ADMIN = "admin"
ROLE_VIEWER = "viewer"


@dataclass(frozen=True)
class TokenClaims:
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def create_access_token(username: str, role: str = ROLE_VIEWER) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": username, "role": role, "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> TokenClaims | None:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub")
    if not sub:
        return None
    return TokenClaims(username=sub, role=payload.get("role") or ROLE_VIEWER)


def authenticate(users: Iterable[dict[str, Any]], username: str, password: str) -> TokenClaims | None:
    """
    Check a login against users.json records ({username, passwordHash, role}).
    Returns the claims to put in a token, or None.
    """
    for user in users:
        if user.get("username") != username:
            continue
        if verify_password(password, str(user.get("passwordHash") or "")):
            return TokenClaims(username=username, role=str(user.get("role") or ROLE_VIEWER))
        return None
    return None
