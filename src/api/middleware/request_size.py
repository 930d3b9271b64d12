"""Request body size limiting middleware."""

import logging
from typing import Callable

from fastapi import Request, Response, status

from src.api.middleware.error_handler import create_error_response
from src.core.config import get_settings

logger = logging.getLogger(__name__)


async def request_size_limit_middleware(
    request: Request,
    call_next: Callable[[Request], Response],
) -> Response:
    """Middleware to enforce request body size limits.

    Rejects requests whose Content-Length, or buffered body size for chunked
    uploads, exceeds the configured maximum.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or 413 error.
    """
    max_size = get_settings().max_request_body_size
    request_id = request.headers.get("X-Request-ID")

    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit():
        length = int(content_length)
    elif "chunked" in request.headers.get("transfer-encoding", "").lower():
        # No declared length; buffer the body, which stays readable downstream
        length = len(await request.body())
    else:
        length = 0

    if length > max_size:
        logger.warning(
            "Request body too large: %d bytes (max: %d)",
            length,
            max_size,
        )
        return create_error_response(
            error_type="request_too_large",
            message=f"Request body exceeds maximum size of {max_size} bytes",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            request_id=request_id,
        )

    return await call_next(request)
