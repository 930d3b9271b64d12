"""Legacy one-to-one partner pairing.

Older clients pair two profiles directly through profiles.partner_id, using
email invitations. This pathway is independent from couple memberships; the
link and unlink steps run as store-side RPCs so both profiles change together.
"""

import logging
from typing import Any
from uuid import UUID

from postgrest.exceptions import APIError as PostgrestAPIError

from src.api.middleware.error_handler import (
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from src.core.supabase import get_supabase_client
from src.models.couple import CoupleInvitation, InvitationStatus
from src.schemas.auth import UserContext

logger = logging.getLogger(__name__)


class PartnerService:
    """Service for legacy partner invitations and unpairing."""

    def __init__(self) -> None:
        """Initialize partner service with Supabase client."""
        self.client = get_supabase_client()

    async def _get_partner_id(self, profile_id: UUID | str) -> str | None:
        response = (
            self.client.table("profiles")
            .select("id, partner_id")
            .eq("id", str(profile_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            raise NotFoundError("Profile not found")
        return response.data[0].get("partner_id")

    async def _find_pending(self, inviter_id: str, invitee_email: str) -> dict[str, Any] | None:
        response = (
            self.client.table("couple_invitations")
            .select("id")
            .eq("inviter_id", inviter_id)
            .eq("invitee_email", invitee_email)
            .eq("status", InvitationStatus.PENDING.value)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    async def invite(self, user: UserContext, invitee_email: str) -> CoupleInvitation:
        """Invite another user to become the caller's partner.

        Args:
            user: The authenticated inviter.
            invitee_email: Email of the profile to invite.

        Returns:
            dict: The created invitation.

        Raises:
            ValidationError: Self invite, or either side already paired.
            NotFoundError: No profile has that email.
            ConflictError: A pending invitation exists in either direction.
        """
        invitee_email = invitee_email.strip().lower()
        caller_email = (user.email or "").strip().lower()

        if caller_email and caller_email == invitee_email:
            raise ValidationError("You cannot invite yourself")

        if await self._get_partner_id(user.user_id):
            raise ValidationError("You are already paired with someone")

        invitee_response = (
            self.client.table("profiles")
            .select("id, partner_id")
            .eq("email", invitee_email)
            .limit(1)
            .execute()
        )
        if not invitee_response.data:
            raise NotFoundError("No user exists with this email")

        invitee = invitee_response.data[0]
        if invitee.get("partner_id"):
            raise ValidationError("This user is already paired")

        existing = await self._find_pending(str(user.user_id), invitee_email)
        if not existing and caller_email:
            existing = await self._find_pending(str(invitee["id"]), caller_email)
        if existing:
            raise ConflictError("An invitation already exists between you and this user")

        invitation_data = {
            "inviter_id": str(user.user_id),
            "invitee_email": invitee_email,
            "status": InvitationStatus.PENDING.value,
        }

        try:
            response = self.client.table("couple_invitations").insert(invitation_data).execute()
        except PostgrestAPIError as e:
            logger.error("Failed to create invitation: %s", e.message, extra={"user_id": str(user.user_id)})
            raise UpstreamError("We could not send the invitation") from e

        logger.info("Partner invitation created", extra={"user_id": str(user.user_id)})
        return response.data[0]

    async def list_pending(self, user: UserContext) -> list[CoupleInvitation]:
        """List pending invitations addressed to the caller's email."""
        if not user.email:
            return []

        response = (
            self.client.table("couple_invitations")
            .select("*")
            .eq("invitee_email", user.email.strip().lower())
            .eq("status", InvitationStatus.PENDING.value)
            .order("created_at", desc=True)
            .execute()
        )

        return response.data or []

    async def _get_addressed_invitation(self, invitation_id: UUID, email: str | None) -> CoupleInvitation:
        if not email:
            raise ValidationError("Email address required to answer an invitation")

        response = (
            self.client.table("couple_invitations")
            .select("*")
            .eq("id", str(invitation_id))
            .eq("invitee_email", email.strip().lower())
            .limit(1)
            .execute()
        )
        if not response.data:
            raise NotFoundError("Invitation not found or you are not the invitee")
        return response.data[0]

    async def accept(self, user: UserContext, invitation_id: UUID) -> None:
        """Accept an invitation and link both profiles as partners.

        Raises:
            NotFoundError: If the invitation is not addressed to the caller.
            ValidationError: If the invitation was already answered.
            UpstreamError: If the link RPC fails.
        """
        invitation = await self._get_addressed_invitation(invitation_id, user.email)

        if invitation["status"] != InvitationStatus.PENDING.value:
            raise ValidationError("Invitation has already been responded to")

        try:
            self.client.rpc(
                "link_partners",
                {
                    "inviter_id": str(invitation["inviter_id"]),
                    "invitee_id": str(user.user_id),
                    "p_invitation_id": str(invitation_id),
                },
            ).execute()
        except PostgrestAPIError as e:
            logger.error("link_partners failed: %s", e.message, extra={"user_id": str(user.user_id)})
            raise UpstreamError(f"Failed to link partners. {e.message}") from e

        logger.info(
            "Partner invitation accepted",
            extra={"user_id": str(user.user_id), "invitation_id": str(invitation_id)},
        )

    async def decline(self, user: UserContext, invitation_id: UUID) -> None:
        """Decline a pending invitation addressed to the caller.

        Raises:
            NotFoundError: If no pending invitation matched.
        """
        if not user.email:
            raise ValidationError("Email address required to answer an invitation")

        try:
            response = (
                self.client.table("couple_invitations")
                .update({"status": InvitationStatus.DECLINED.value})
                .eq("id", str(invitation_id))
                .eq("invitee_email", user.email.strip().lower())
                .eq("status", InvitationStatus.PENDING.value)
                .execute()
            )
        except PostgrestAPIError as e:
            logger.error("Failed to decline invitation: %s", e.message, extra={"user_id": str(user.user_id)})
            raise UpstreamError("We could not decline the invitation") from e

        if not response.data:
            raise NotFoundError("No pending invitation found")

        logger.info(
            "Partner invitation declined",
            extra={"user_id": str(user.user_id), "invitation_id": str(invitation_id)},
        )

    async def unpair(self, user: UserContext) -> None:
        """Unlink the caller from their partner.

        Raises:
            ValidationError: If the caller has no partner.
            UpstreamError: If the unlink RPC fails.
        """
        partner_id = await self._get_partner_id(user.user_id)
        if not partner_id:
            raise ValidationError("You are not paired with anyone")

        try:
            self.client.rpc(
                "unlink_partners",
                {"user_id_1": str(user.user_id), "user_id_2": str(partner_id)},
            ).execute()
        except PostgrestAPIError as e:
            logger.error("unlink_partners failed: %s", e.message, extra={"user_id": str(user.user_id)})
            raise UpstreamError("We could not unpair you") from e

        logger.info("Partners unpaired", extra={"user_id": str(user.user_id), "partner_id": str(partner_id)})
