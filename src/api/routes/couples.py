"""Couple API routes."""

from uuid import UUID

from fastapi import APIRouter

from src.api.deps import CurrentUser
from src.schemas.couple import CoupleMemberResponse
from src.services.membership_service import MembershipService

router = APIRouter(prefix="/couples", tags=["couples"])


@router.get(
    "/{couple_id}/members",
    response_model=list[CoupleMemberResponse],
    summary="List couple members",
    description="Returns the accepted members of a couple. Only accessible to its accepted members.",
)
async def list_couple_members(
    couple_id: UUID,
    user: CurrentUser,
) -> list[CoupleMemberResponse]:
    """List all accepted members of a couple.

    Raises:
        AuthorizationError: 403 if the caller is not an accepted member.
    """
    service = MembershipService()
    return await service.list_members(user.user_id, couple_id)
