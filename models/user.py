# models/user.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


# ===============================================================
# PRINCIPAL (the authenticated caller)
# ===============================================================

class Principal(BaseModel):
    """
    Explicit identity passed into every engine call.
    Built from the bearer token by dependencies.auth.
    """
    id: str
    email: str
    display_name: Optional[str] = None


class UserRead(BaseModel):
    """
    Returned to API consumers. Never includes the password hash.
    """
    id: str
    email: EmailStr
    display_name: str
    email_verified: bool = False
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegistrationData(BaseModel):
    """
    Account details supplied by an invitee without an account.
    `password` is plain text at the HTTP boundary only; the router
    hashes it before it reaches the invitation engine.
    """
    display_name: str = Field(..., min_length=1, max_length=100, alias="displayName")
    password: str = Field(..., min_length=8, max_length=128)

    model_config = {"populate_by_name": True}


class AccountRegistration(BaseModel):
    """Registration as the invitation flow sees it: password already hashed."""
    display_name: str
    password_hash: str
