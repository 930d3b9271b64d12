"""Couple Pydantic schemas for API request/response models."""

from enum import Enum
from uuid import UUID

from pydantic import Field

from src.models.couple import MembershipRole, MembershipStatus
from src.schemas.common import CamelModel


class CoupleAction(str, Enum):
    """Actions accepted by the couple-actions endpoint."""

    CREATE = "create"
    JOIN = "join"
    LEAVE = "leave"


class CoupleActionRequest(CamelModel):
    """Request body for POST /couple-actions."""

    action: CoupleAction = Field(..., description="Action to perform")
    name: str | None = Field(default=None, max_length=120, description="Couple name (create only)")
    invite_code: str | None = Field(default=None, max_length=64, description="Partner's invite code (join only)")


class CoupleSummary(CamelModel):
    """Couple fields exposed to clients."""

    id: UUID = Field(description="Couple unique identifier")
    name: str | None = Field(default=None, description="Couple display name")
    invite_code: str | None = Field(default=None, description="Shareable invite code")


class MembershipView(CamelModel):
    """A caller's couple together with the status and role of their membership.

    Returned by the couple actions and embedded in profile snapshots.
    """

    couple: CoupleSummary | None = Field(default=None, description="Couple, or null when the user has none")
    membership_status: MembershipStatus = Field(description="Membership status")
    membership_role: MembershipRole | None = Field(default=None, description="Membership role")


class CoupleMemberResponse(CamelModel):
    """Accepted member of a couple with a profile summary."""

    profile_id: UUID = Field(description="Member's profile ID")
    display_name: str | None = Field(default=None, description="Member display name")
    avatar_url: str | None = Field(default=None, description="Member avatar URL")
    theme: str | None = Field(default=None, description="Member theme preference")
    role: MembershipRole | None = Field(default=None, description="Member's role in the couple")
