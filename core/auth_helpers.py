# core/auth_helpers.py

from datetime import timedelta
from typing import Optional

from jose import jwt
from passlib.context import CryptContext

from core.config import settings
from core.utils import utcnow

# Only used when JWT_SECRET is unset in development
DEV_JWT_SECRET = "dev-insecure-secret"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================
# Passwords
# ============================================================
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# ============================================================
# Access tokens
# ============================================================
def jwt_secret() -> str:
    return settings.JWT_SECRET or DEV_JWT_SECRET


def create_access_token(user_id: str, email: str, display_name: Optional[str] = None,
                        expires_delta: Optional[timedelta] = None) -> str:
    """Issue a bearer token carrying the claims dependencies.auth reads back."""
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": user_id, "email": email, "exp": expire}
    if display_name:
        payload["name"] = display_name
    return jwt.encode(payload, jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Raises jose.JWTError on a bad signature or expired token."""
    return jwt.decode(token, jwt_secret(), algorithms=[settings.JWT_ALGORITHM])
