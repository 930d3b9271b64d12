"""FastAPI dependency injection functions."""

import logging
from typing import Annotated

from fastapi import Depends, Header

from src.api.middleware.auth import AuthError, AuthErrorCode, verify_session
from src.api.middleware.error_handler import AuthenticationError
from src.schemas.auth import UserContext

logger = logging.getLogger(__name__)


async def get_current_user(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Extract and validate the current user from the Authorization header.

    This dependency requires a valid JWT token in the Authorization header.
    It runs before any route body, so an unauthenticated request never
    reaches the store.

    Args:
        authorization: The Authorization header value (Bearer token).

    Returns:
        UserContext: The authenticated user's context.

    Raises:
        AuthenticationError: 401 if token is missing, invalid, or expired.
    """
    if not authorization:
        logger.warning("Missing authorization header")
        raise AuthenticationError("Authorization header required")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("Malformed authorization header")
        raise AuthenticationError("Invalid authorization header format. Expected: Bearer <token>")

    try:
        return verify_session(parts[1])

    except AuthError as e:
        logger.warning("Authorization failed: %s", e.code.value)
        if e.code == AuthErrorCode.TOKEN_EXPIRED:
            raise AuthenticationError("Token has expired") from e

        raise AuthenticationError(e.message) from e


CurrentUser = Annotated[UserContext, Depends(get_current_user)]
