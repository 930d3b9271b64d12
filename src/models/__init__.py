"""Database model type definitions."""

from src.models.couple import (
    Couple,
    CoupleCreate,
    CoupleInvitation,
    InvitationStatus,
    Membership,
    MembershipRole,
    MembershipStatus,
    MembershipUpsert,
)
from src.models.profile import Profile

__all__ = [
    "Profile",
    "Couple",
    "CoupleCreate",
    "CoupleInvitation",
    "InvitationStatus",
    "Membership",
    "MembershipRole",
    "MembershipStatus",
    "MembershipUpsert",
]
