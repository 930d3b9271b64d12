"""Legacy partner invitation schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from src.models.couple import InvitationStatus
from src.schemas.common import CamelModel


class PartnerInvitationCreate(CamelModel):
    """Schema for inviting a partner by email."""

    invitee_email: EmailStr = Field(..., description="Email address of the partner to invite")


class PartnerInvitationResponse(CamelModel):
    """Schema for partner invitation API responses."""

    id: UUID = Field(description="Invitation unique identifier")
    inviter_id: UUID = Field(description="Profile ID of the inviter")
    invitee_email: str = Field(description="Invited email address")
    status: InvitationStatus = Field(description="Current invitation status")
    created_at: datetime | None = Field(default=None, description="Invitation creation timestamp")


class PartnerActionResponse(CamelModel):
    """Acknowledgement for accept, decline and unpair."""

    message: str = Field(description="Outcome description")
