"""Couple model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict
from uuid import UUID


class MembershipStatus(str, Enum):
    """Membership status values matching the profile_couples.status column."""

    ACCEPTED = "accepted"
    PENDING = "pending"
    DECLINED = "declined"


class MembershipRole(str, Enum):
    """Membership role values. OWNER marks the profile that created the couple."""

    OWNER = "owner"
    MEMBER = "member"


class InvitationStatus(str, Enum):
    """Legacy partner invitation status values."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class Couple(TypedDict):
    """Couple table row representation."""

    id: UUID
    name: str | None
    invite_code: str | None
    created_at: datetime


class CoupleCreate(TypedDict):
    """Data required to create a new couple."""

    name: str
    invite_code: str


class Membership(TypedDict):
    """profile_couples table row representation.

    Unique on (profile_id, couple_id).
    """

    profile_id: UUID
    couple_id: UUID
    status: MembershipStatus
    role: MembershipRole | None
    created_at: datetime


class MembershipUpsert(TypedDict):
    """Data written when a profile creates or joins a couple."""

    profile_id: str
    couple_id: str
    status: str
    role: str


class CoupleInvitation(TypedDict):
    """couple_invitations table row (legacy one-to-one partner model)."""

    id: UUID
    inviter_id: UUID
    invitee_email: str
    status: InvitationStatus
    created_at: datetime
