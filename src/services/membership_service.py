"""Couple membership business logic.

A profile is either unpaired (no accepted membership) or paired (exactly one).
Create and join are only allowed while unpaired. The check reads memberships
and then writes, without a transaction around both steps; concurrent requests
from the same profile rely on the store's partial unique index on
profile_couples(profile_id) where status = 'accepted'.
"""

import logging
from typing import Any
from uuid import UUID

from postgrest.exceptions import APIError as PostgrestAPIError

from src.api.middleware.error_handler import (
    ActionNotImplementedError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from src.core.config import get_settings
from src.core.invite_codes import generate_invite_code, normalize_invite_code
from src.core.supabase import get_supabase_client
from src.models.couple import Couple, CoupleCreate, Membership, MembershipRole, MembershipStatus, MembershipUpsert
from src.schemas.auth import UserContext
from src.schemas.couple import CoupleMemberResponse, CoupleSummary, MembershipView

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class MembershipService:
    """Service for creating, joining and inspecting couples."""

    def __init__(self) -> None:
        """Initialize membership service with Supabase client."""
        self.client = get_supabase_client()
        self.settings = get_settings()

    async def get_memberships(self, profile_id: UUID) -> list[Membership]:
        """Get every membership row for a profile, oldest first.

        Args:
            profile_id: The profile's UUID.

        Returns:
            list[dict]: Membership rows with couple_id, status and role.
        """
        response = (
            self.client.table("profile_couples")
            .select("couple_id, status, role, created_at")
            .eq("profile_id", str(profile_id))
            .order("created_at")
            .execute()
        )

        return response.data or []

    async def get_accepted_membership(self, profile_id: UUID) -> Membership | None:
        """Get the profile's accepted membership, if any."""
        memberships = await self.get_memberships(profile_id)
        return next(
            (row for row in memberships if row.get("status") == MembershipStatus.ACCEPTED.value),
            None,
        )

    async def get_couple(self, couple_id: UUID | str) -> Couple | None:
        """Get a couple by ID.

        Args:
            couple_id: The couple's UUID.

        Returns:
            dict | None: The couple row or None if not found.
        """
        response = (
            self.client.table("couples")
            .select("id, name, invite_code")
            .eq("id", str(couple_id))
            .limit(1)
            .execute()
        )

        return response.data[0] if response.data else None

    async def find_couple_by_invite_code(self, invite_code: str) -> Couple | None:
        """Resolve a normalized invite code to its couple.

        Raises:
            ConflictError: If more than one couple carries the code.
        """
        response = (
            self.client.table("couples")
            .select("id, name, invite_code")
            .eq("invite_code", invite_code)
            .limit(2)
            .execute()
        )

        rows = response.data or []
        if len(rows) > 1:
            logger.error("Invite code resolves to several couples", extra={"invite_code": invite_code})
            raise ConflictError("This invite code is ambiguous. Ask your partner for a new one.")

        return rows[0] if rows else None

    async def ensure_unpaired(self, profile_id: UUID) -> None:
        """Reject the caller if they already belong to an accepted couple.

        Raises:
            ConflictError: If an accepted membership exists.
        """
        accepted = await self.get_accepted_membership(profile_id)
        if accepted:
            logger.info(
                "User already has an active couple",
                extra={"user_id": str(profile_id), "couple_id": accepted.get("couple_id")},
            )
            raise ConflictError(
                "You already have an active couple. Leave it before creating or joining another."
            )

    async def create_couple(self, user: UserContext, name: str | None = None) -> MembershipView:
        """Create a couple owned by the caller.

        Args:
            user: The authenticated caller.
            name: Optional couple name.

        Returns:
            MembershipView: The new couple with an accepted owner membership.

        Raises:
            ConflictError: If the caller is paired or the invite code collided.
            UpstreamError: If the store rejects a write.
        """
        await self.ensure_unpaired(user.user_id)

        couple_name = await self._resolve_couple_name(user, name)
        invite_code = generate_invite_code(self.settings.invite_code_length)
        couple_data: CoupleCreate = {"name": couple_name, "invite_code": invite_code}

        try:
            response = (
                self.client.table("couples")
                .insert(couple_data)
                .execute()
            )
        except PostgrestAPIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.warning("Invite code collision on couple insert", extra={"user_id": str(user.user_id)})
                raise ConflictError("Could not reserve an invite code. Please try again.") from e
            logger.error("Failed to create couple: %s", e.message, extra={"user_id": str(user.user_id)})
            raise UpstreamError("We could not create the couple") from e

        if not response.data:
            raise UpstreamError("We could not create the couple")

        couple = response.data[0]
        await self._upsert_membership(user.user_id, couple["id"], MembershipRole.OWNER, orphan_on_failure=True)

        logger.info(
            "Couple created",
            extra={"user_id": str(user.user_id), "couple_id": couple["id"], "action": "create"},
        )
        return self._build_view(couple, MembershipStatus.ACCEPTED, MembershipRole.OWNER)

    async def join_couple(self, user: UserContext, invite_code: str | None) -> MembershipView:
        """Join the couple identified by an invite code.

        Joining the same couple again updates the existing membership row.

        Args:
            user: The authenticated caller.
            invite_code: Code shared by the partner, any case.

        Returns:
            MembershipView: The couple with an accepted member membership.

        Raises:
            ConflictError: If the caller is already paired.
            ValidationError: If no invite code was given.
            NotFoundError: If the code matches no couple.
        """
        await self.ensure_unpaired(user.user_id)

        normalized = normalize_invite_code(invite_code)
        if not normalized:
            raise ValidationError("An invite code is required to join a couple")

        couple = await self.find_couple_by_invite_code(normalized)
        if not couple:
            logger.info("Invite code did not match a couple", extra={"user_id": str(user.user_id)})
            raise NotFoundError("No couple matches that invite code")

        await self._upsert_membership(user.user_id, couple["id"], MembershipRole.MEMBER)

        logger.info(
            "Couple joined",
            extra={"user_id": str(user.user_id), "couple_id": couple["id"], "action": "join"},
        )
        return self._build_view(couple, MembershipStatus.ACCEPTED, MembershipRole.MEMBER)

    async def leave_couple(self, user: UserContext) -> MembershipView:
        """Leaving a couple is not supported.

        Raises:
            ActionNotImplementedError: Always.
        """
        logger.warning("Leave action not implemented", extra={"user_id": str(user.user_id)})
        raise ActionNotImplementedError("Leave action not implemented")

    async def get_primary_membership(self, profile_id: UUID) -> MembershipView:
        """Get the membership that best describes the profile's current couple.

        Prefers the accepted membership, then the oldest known row. A profile
        without memberships is reported as declined with no couple.
        """
        memberships = await self.get_memberships(profile_id)
        if not memberships:
            return MembershipView(couple=None, membership_status=MembershipStatus.DECLINED, membership_role=None)

        chosen = next(
            (row for row in memberships if row.get("status") == MembershipStatus.ACCEPTED.value),
            memberships[0],
        )
        couple = await self.get_couple(chosen["couple_id"])

        return MembershipView(
            couple=CoupleSummary(**couple) if couple else None,
            membership_status=chosen.get("status") or MembershipStatus.DECLINED,
            membership_role=chosen.get("role"),
        )

    async def list_members(self, profile_id: UUID, couple_id: UUID) -> list[CoupleMemberResponse]:
        """List accepted members of a couple.

        Args:
            profile_id: The caller's profile ID.
            couple_id: The couple's UUID.

        Returns:
            list[CoupleMemberResponse]: Members with profile summaries.

        Raises:
            AuthorizationError: If the caller is not an accepted member.
        """
        response = (
            self.client.table("profile_couples")
            .select("profile_id, role, created_at")
            .eq("couple_id", str(couple_id))
            .eq("status", MembershipStatus.ACCEPTED.value)
            .order("created_at")
            .execute()
        )
        rows = response.data or []

        if str(profile_id) not in {str(row["profile_id"]) for row in rows}:
            raise AuthorizationError("You are not a member of this couple")

        profiles_response = (
            self.client.table("profiles")
            .select("id, display_name, avatar_url, theme")
            .in_("id", [str(row["profile_id"]) for row in rows])
            .execute()
        )
        profiles = {str(p["id"]): p for p in profiles_response.data or []}

        members = []
        for row in rows:
            profile = profiles.get(str(row["profile_id"]), {})
            members.append(
                CoupleMemberResponse(
                    profile_id=row["profile_id"],
                    display_name=profile.get("display_name"),
                    avatar_url=profile.get("avatar_url"),
                    theme=profile.get("theme"),
                    role=row.get("role"),
                )
            )

        return members

    async def _resolve_couple_name(self, user: UserContext, name: str | None) -> str:
        if name and name.strip():
            return name.strip()
        if user.display_name:
            return user.display_name

        response = (
            self.client.table("profiles")
            .select("display_name")
            .eq("id", str(user.user_id))
            .limit(1)
            .execute()
        )
        if response.data and response.data[0].get("display_name"):
            return response.data[0]["display_name"]

        return self.settings.default_couple_name

    async def _upsert_membership(
        self,
        profile_id: UUID,
        couple_id: str,
        role: MembershipRole,
        orphan_on_failure: bool = False,
    ) -> dict[str, Any]:
        membership_data: MembershipUpsert = {
            "profile_id": str(profile_id),
            "couple_id": str(couple_id),
            "status": MembershipStatus.ACCEPTED.value,
            "role": role.value,
        }

        try:
            response = (
                self.client.table("profile_couples")
                .upsert(membership_data, on_conflict="profile_id,couple_id")
                .execute()
            )
        except PostgrestAPIError as e:
            if orphan_on_failure:
                # The couple row stays behind without members; a retried create makes a new one
                logger.error(
                    "Membership write failed after couple insert, couple left without members",
                    extra={"user_id": str(profile_id), "couple_id": str(couple_id)},
                )
            else:
                logger.error(
                    "Membership write failed: %s",
                    e.message,
                    extra={"user_id": str(profile_id), "couple_id": str(couple_id)},
                )
            if e.code == UNIQUE_VIOLATION:
                raise ConflictError(
                    "You already have an active couple. Leave it before creating or joining another."
                ) from e
            raise UpstreamError("We could not save your couple membership") from e

        return response.data[0] if response.data else membership_data

    @staticmethod
    def _build_view(
        couple: Couple,
        status: MembershipStatus,
        role: MembershipRole,
    ) -> MembershipView:
        return MembershipView(
            couple=CoupleSummary(
                id=couple["id"],
                name=couple.get("name"),
                invite_code=couple.get("invite_code"),
            ),
            membership_status=status,
            membership_role=role,
        )
