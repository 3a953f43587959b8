"""
Invoicely Authentication

Session-cookie authentication backed by a signed JWT. The same token is
accepted as a Bearer credential for API clients.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from fastapi import Depends, HTTPException, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, EmailStr

import jwt
from passlib.context import CryptContext

from invoicely.core import settings

ALGORITHM = "HS256"
SESSION_MAX_AGE = timedelta(days=settings.SESSION_MAX_AGE_DAYS)

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Bearer token security
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """Authenticated user resolved from the session token."""
    id: str
    email: EmailStr
    name: Optional[str] = None


def hash_password(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_session_token(
    user_id: str,
    email: str,
    name: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create the signed session token stored in the session cookie."""
    if expires_delta is None:
        expires_delta = SESSION_MAX_AGE

    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "name": name,
        "exp": now + expires_delta,
        "iat": now,
        "type": "session",
    }

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a session token."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session has expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid session")


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        max_age=int(SESSION_MAX_AGE.total_seconds()),
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """
    Get the current user from the session cookie or a Bearer token.

    Supports:
    - Cookie: session=<jwt>
    - Bearer token: Authorization: Bearer <jwt>
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials and credentials.credentials:
        token = credentials.credentials

    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    payload = decode_token(token)
    if payload.get("type") != "session":
        raise HTTPException(status_code=401, detail="Invalid session")

    return CurrentUser(
        id=payload["sub"],
        email=payload["email"],
        name=payload.get("name"),
    )
