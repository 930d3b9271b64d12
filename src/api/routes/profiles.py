"""Profile API routes."""

import logging

from fastapi import APIRouter

from src.api.deps import CurrentUser
from src.api.middleware.error_handler import AuthorizationError
from src.schemas.profile import (
    ActivateProfileRequest,
    OnboardRequest,
    ProfileResponse,
    ProfileSnapshot,
    ProfileUpdate,
)
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post(
    "/activate",
    response_model=ProfileSnapshot,
    summary="Activate profile after email confirmation",
    description=(
        "Called once after the identity provider confirms the account. "
        "Creates the profile if needed, stamps the confirmation time, and "
        "returns the initial couple view."
    ),
)
async def activate_profile(
    data: ActivateProfileRequest,
    user: CurrentUser,
) -> ProfileSnapshot:
    """Activate the caller's profile.

    Raises:
        AuthorizationError: 403 if userId is not the caller or the email is unconfirmed.
    """
    if data.user_id != user.user_id:
        logger.warning(
            "User mismatch on activation",
            extra={"user_id": str(user.user_id), "requested_user_id": str(data.user_id)},
        )
        raise AuthorizationError("Forbidden")

    if user.email_confirmed is False:
        raise AuthorizationError("Email address has not been confirmed yet")

    service = ProfileService()
    return await service.activate(user)


@router.post(
    "/onboard",
    response_model=ProfileSnapshot,
    summary="Complete onboarding",
    description=(
        "Saves the display name chosen at sign up and either creates a new "
        "couple or joins one with an invite code."
    ),
)
async def onboard_profile(
    data: OnboardRequest,
    user: CurrentUser,
) -> ProfileSnapshot:
    """Onboard the caller.

    Raises:
        AuthorizationError: 403 if userId is not the caller.
    """
    if data.user_id != user.user_id:
        logger.warning(
            "User mismatch on onboarding",
            extra={"user_id": str(user.user_id), "requested_user_id": str(data.user_id)},
        )
        raise AuthorizationError("Forbidden")

    service = ProfileService()
    return await service.onboard(user, data)


@router.get(
    "/me",
    response_model=ProfileSnapshot,
    summary="Get current user's profile snapshot",
    description="Returns a fresh view of the caller's profile, couple and membership.",
)
async def get_my_profile(user: CurrentUser) -> ProfileSnapshot:
    """Reload the caller's profile and couple view."""
    service = ProfileService()
    return await service.get_snapshot(user.user_id)


@router.patch(
    "/me",
    response_model=ProfileResponse,
    summary="Update current user's profile",
    description="Updates the authenticated user's profile with provided fields.",
)
async def update_my_profile(
    data: ProfileUpdate,
    user: CurrentUser,
) -> ProfileResponse:
    """Update the authenticated user's profile.

    Args:
        data: Fields to update.
        user: The authenticated user context.

    Returns:
        ProfileResponse: The updated profile data.
    """
    service = ProfileService()
    profile = await service.update_profile(user.user_id, data)
    return ProfileResponse(**profile)
