"""Profile business logic service."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from postgrest.exceptions import APIError as PostgrestAPIError

from src.api.middleware.error_handler import NotFoundError, UpstreamError, ValidationError
from src.core.invite_codes import normalize_invite_code
from src.core.supabase import get_supabase_client
from src.models.profile import Profile
from src.schemas.auth import UserContext
from src.schemas.profile import OnboardRequest, ProfileResponse, ProfileSnapshot, ProfileUpdate
from src.services.membership_service import MembershipService

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = (
    "id, display_name, avatar_url, theme, first_name, last_name, nickname, age, email, partner_id, confirmed_at"
)


class ProfileService:
    """Service for managing user profiles."""

    def __init__(self) -> None:
        """Initialize profile service with Supabase client."""
        self.client = get_supabase_client()

    async def get_profile(self, user_id: UUID) -> Profile | None:
        """Get a profile by user ID.

        Args:
            user_id: The auth user ID (profiles.id).

        Returns:
            dict | None: The profile data or None if not found.
        """
        response = (
            self.client.table("profiles")
            .select(PROFILE_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )

        return response.data[0] if response.data else None

    async def get_or_create_profile(self, user: UserContext) -> Profile:
        """Get existing profile or create a new one.

        Args:
            user: The authenticated user.

        Returns:
            dict: The profile data.
        """
        profile = await self.get_profile(user.user_id)
        if profile:
            return profile

        fallback_name = user.email.split("@")[0] if user.email else "Cozy user"
        profile_data = {
            "id": str(user.user_id),
            "email": user.email,
            "display_name": user.display_name or fallback_name,
        }

        try:
            response = (
                self.client.table("profiles")
                .upsert(profile_data, on_conflict="id", ignore_duplicates=True)
                .execute()
            )
        except PostgrestAPIError as e:
            logger.error("Failed to create profile: %s", e.message, extra={"user_id": str(user.user_id)})
            raise UpstreamError("We could not create your profile") from e

        if not response.data:
            # Another request created the row first; keep what it wrote
            existing = await self.get_profile(user.user_id)
            if existing:
                return existing
            raise UpstreamError("We could not create your profile")

        logger.info("Profile created", extra={"user_id": str(user.user_id)})
        return response.data[0]

    async def mark_confirmed(self, user_id: UUID) -> None:
        """Stamp confirmed_at if it has never been set."""
        try:
            (
                self.client.table("profiles")
                .update({"confirmed_at": datetime.now(timezone.utc).isoformat()})
                .eq("id", str(user_id))
                .is_("confirmed_at", "null")
                .execute()
            )
        except PostgrestAPIError as e:
            logger.error("Failed to mark profile confirmed: %s", e.message, extra={"user_id": str(user_id)})
            raise UpstreamError("We could not activate your profile") from e

    async def activate(self, user: UserContext) -> ProfileSnapshot:
        """Bootstrap a freshly confirmed account.

        Ensures the profile exists, records the confirmation time once, and
        returns the initial couple view. Does not check the single active
        couple rule; nothing is created or joined here.

        Args:
            user: The authenticated user.

        Returns:
            ProfileSnapshot: Profile plus the most relevant membership.
        """
        await self.get_or_create_profile(user)
        await self.mark_confirmed(user.user_id)

        snapshot = await self.get_snapshot(user.user_id)
        logger.info(
            "Profile activation succeeded",
            extra={
                "user_id": str(user.user_id),
                "membership_status": snapshot.membership_status.value,
            },
        )
        return snapshot

    async def onboard(self, user: UserContext, data: OnboardRequest) -> ProfileSnapshot:
        """Finish sign up in one call: save the display name, then create or join a couple.

        Pairing and invite code checks run before anything is written, so a
        rejected request leaves the profile untouched.

        Args:
            user: The authenticated user.
            data: Onboarding choices from the sign up form.

        Returns:
            ProfileSnapshot: Profile plus the couple just created or joined.

        Raises:
            ConflictError: If the caller already has an active couple.
            ValidationError: If joining without an invite code.
            NotFoundError: If the invite code matches no couple.
        """
        memberships = MembershipService()
        await memberships.ensure_unpaired(user.user_id)

        if not data.create_couple:
            invite_code = normalize_invite_code(data.invite_code)
            if not invite_code:
                raise ValidationError("An invite code is required to join a couple")
            if not await memberships.find_couple_by_invite_code(invite_code):
                raise NotFoundError("No couple matches that invite code")

        await self.get_or_create_profile(user)
        await self.update_profile(user.user_id, ProfileUpdate(display_name=data.display_name))

        if data.create_couple:
            couple_name = (data.couple_name or "").strip() or data.display_name
            view = await memberships.create_couple(user, couple_name)
        else:
            view = await memberships.join_couple(user, data.invite_code)

        logger.info(
            "Onboarding completed",
            extra={
                "user_id": str(user.user_id),
                "couple_id": str(view.couple.id) if view.couple else None,
                "action": "create" if data.create_couple else "join",
            },
        )
        return await self.get_snapshot(user.user_id)

    async def get_snapshot(self, user_id: UUID) -> ProfileSnapshot:
        """Load a fresh profile and couple view.

        Raises:
            NotFoundError: If the profile does not exist.
        """
        profile = await self.get_profile(user_id)
        if not profile:
            raise NotFoundError("Profile not found")

        view = await MembershipService().get_primary_membership(user_id)

        return ProfileSnapshot(
            profile=ProfileResponse(**profile),
            couple=view.couple,
            membership_status=view.membership_status,
            membership_role=view.membership_role,
        )

    async def update_profile(self, user_id: UUID, data: ProfileUpdate) -> Profile:
        """Update a profile.

        Args:
            user_id: The auth user ID.
            data: The fields to update.

        Returns:
            dict: The updated profile data.

        Raises:
            NotFoundError: If the profile does not exist.
        """
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("display_name") is None:
            update_data.pop("display_name", None)

        if not update_data:
            profile = await self.get_profile(user_id)
            if not profile:
                raise NotFoundError("Profile not found")
            return profile

        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            response = (
                self.client.table("profiles")
                .update(update_data)
                .eq("id", str(user_id))
                .execute()
            )
        except PostgrestAPIError as e:
            logger.error("Failed to update profile: %s", e.message, extra={"user_id": str(user_id)})
            raise UpstreamError("We could not update your profile") from e

        if not response.data:
            raise NotFoundError("Profile not found")

        logger.info("Profile updated", extra={"user_id": str(user_id), "fields": sorted(update_data)})
        return response.data[0]
