"""Shared test identities and session token factory."""

import time
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric import ec
from jwt.algorithms import ECAlgorithm

# ES256 key pair used to sign test session tokens
TEST_PRIVATE_KEY = ec.generate_private_key(ec.SECP256R1())
TEST_PUBLIC_JWK = ECAlgorithm.to_jwk(TEST_PRIVATE_KEY.public_key())

USER_A_ID = "550e8400-e29b-41d4-a716-446655440000"
USER_B_ID = "660e8400-e29b-41d4-a716-446655440000"
USER_C_ID = "770e8400-e29b-41d4-a716-446655440000"


def create_test_token(
    sub: str = USER_A_ID,
    email: str | None = "alice@example.com",
    user_metadata: dict[str, Any] | None = None,
    expires_in: int = 3600,
    key: Any = None,
) -> str:
    """Create an ES256 session token the way Supabase issues them.

    Args:
        sub: Subject (user ID).
        email: User email, omitted from the claims when None.
        user_metadata: Supabase user_metadata claim.
        expires_in: Seconds from now for expiration (negative for expired).
        key: Signing key, defaults to the test key pair.

    Returns:
        str: Encoded JWT token.
    """
    now = int(time.time())
    payload: dict[str, Any] = {
        "sub": sub,
        "role": "authenticated",
        "aud": "authenticated",
        "iss": "https://test-project.supabase.co/auth/v1",
        "exp": now + expires_in,
        "iat": now - 10,
        "user_metadata": user_metadata if user_metadata is not None else {"email_verified": True},
    }
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, key or TEST_PRIVATE_KEY, algorithm="ES256")
