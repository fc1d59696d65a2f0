from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from core.auth_helpers import decode_access_token
from models.user import Principal


bearer_scheme = HTTPBearer()


# ============================================================
# AUTH DECODING (bearer JWT → Principal)
# ============================================================
def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Principal:

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise unauthorized

    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise unauthorized

    return Principal(
        id=user_id,
        email=email,
        display_name=payload.get("name"),
    )


# ============================================================
# OPTIONAL AUTHENTICATION (for invitation endpoints)
# ============================================================
def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
) -> Optional[Principal]:
    """
    Optional authentication dependency.
    Returns Principal if valid token provided, None otherwise.
    Does not raise exceptions if no token provided.
    """
    if not credentials:
        return None

    try:
        return get_current_principal(credentials)
    except HTTPException:
        # Invalid token - return None instead of raising
        return None
