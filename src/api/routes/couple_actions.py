"""Couple action API route (create, join, leave)."""

import logging

from fastapi import APIRouter

from src.api.deps import CurrentUser
from src.schemas.couple import CoupleAction, CoupleActionRequest, MembershipView
from src.services.membership_service import MembershipService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/couple-actions", tags=["couples"])


@router.post(
    "",
    response_model=MembershipView,
    summary="Create, join or leave a couple",
    description=(
        "Creates a couple owned by the caller, or joins one by invite code. "
        "Fails with 409 when the caller already has an active couple. "
        "The leave action is not supported and always fails with 400."
    ),
    responses={
        400: {"description": "Malformed payload, missing invite code, or leave requested"},
        401: {"description": "Missing or invalid session"},
        404: {"description": "Invite code does not match a couple"},
        409: {"description": "Caller already has an active couple"},
    },
)
async def perform_couple_action(
    data: CoupleActionRequest,
    user: CurrentUser,
) -> MembershipView:
    """Dispatch a couple action for the authenticated user.

    Args:
        data: Action payload.
        user: The authenticated user context.

    Returns:
        MembershipView: The resulting couple and membership.
    """
    service = MembershipService()
    logger.info("Couple action requested", extra={"user_id": str(user.user_id), "action": data.action.value})

    if data.action == CoupleAction.LEAVE:
        return await service.leave_couple(user)

    if data.action == CoupleAction.CREATE:
        return await service.create_couple(user, data.name)

    return await service.join_couple(user, data.invite_code)
