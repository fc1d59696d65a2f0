# models/invitation.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from models.enums import InvitationAction
from models.user import RegistrationData


class InvitationCreate(BaseModel):
    """Owner invites an e-mail address to a map."""
    email: EmailStr
    role: str


class InvitationRead(BaseModel):
    """
    Owner/invitee facing view. The token is absent:
    it only ever travels inside the invitation e-mail.
    """
    id: str
    map_id: str
    inviter_id: str
    invitee_email: str
    role: str
    status: str
    expires_at: datetime
    created_at: datetime
    responded_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class InvitationTokenRead(BaseModel):
    """Public view of a token, for the "accept invitation" page."""
    map_id: str
    map_name: Optional[str] = None
    inviter_name: Optional[str] = None
    email: str
    role: str
    status: str
    expires_at: datetime
    has_account: bool = Field(False, serialization_alias="hasAccount")


class InvitationResponse(BaseModel):
    action: InvitationAction
    registration_data: Optional[RegistrationData] = Field(None, alias="registrationData")

    model_config = {"populate_by_name": True}
