"""Legacy partner invitation routes."""

from uuid import UUID

from fastapi import APIRouter, status

from src.api.deps import CurrentUser
from src.schemas.partner import (
    PartnerActionResponse,
    PartnerInvitationCreate,
    PartnerInvitationResponse,
)
from src.services.partner_service import PartnerService

router = APIRouter(prefix="/partners", tags=["partners"])


@router.post(
    "/invitations",
    response_model=PartnerInvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a partner",
    description="Invites another user by email to become the caller's partner.",
)
async def invite_partner(
    data: PartnerInvitationCreate,
    user: CurrentUser,
) -> PartnerInvitationResponse:
    """Create a partner invitation."""
    service = PartnerService()
    invitation = await service.invite(user, data.invitee_email)
    return PartnerInvitationResponse(**invitation)


@router.get(
    "/invitations",
    response_model=list[PartnerInvitationResponse],
    summary="List my invitations",
    description="Returns pending partner invitations addressed to the caller's email.",
)
async def list_my_invitations(user: CurrentUser) -> list[PartnerInvitationResponse]:
    """List pending invitations for the current user."""
    service = PartnerService()
    invitations = await service.list_pending(user)
    return [PartnerInvitationResponse(**inv) for inv in invitations]


@router.post(
    "/invitations/{invitation_id}/accept",
    response_model=PartnerActionResponse,
    summary="Accept invitation",
)
async def accept_invitation(invitation_id: UUID, user: CurrentUser) -> PartnerActionResponse:
    """Accept an invitation and link both partners."""
    service = PartnerService()
    await service.accept(user, invitation_id)
    return PartnerActionResponse(message="Invitation accepted and partners linked.")


@router.post(
    "/invitations/{invitation_id}/decline",
    response_model=PartnerActionResponse,
    summary="Decline invitation",
)
async def decline_invitation(invitation_id: UUID, user: CurrentUser) -> PartnerActionResponse:
    """Decline an invitation."""
    service = PartnerService()
    await service.decline(user, invitation_id)
    return PartnerActionResponse(message="Invitation declined.")


@router.post(
    "/unpair",
    response_model=PartnerActionResponse,
    summary="Unpair from partner",
)
async def unpair_partner(user: CurrentUser) -> PartnerActionResponse:
    """Unlink the caller and their partner."""
    service = PartnerService()
    await service.unpair(user)
    return PartnerActionResponse(message="Successfully unpaired.")
