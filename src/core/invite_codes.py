"""Invite code generation and normalization.

Codes are short, human-shareable tokens. The alphabet leaves out characters
that are easy to confuse when read aloud or copied by hand (0/O, 1/I/L).
Uniqueness is not checked here; the couples table enforces it on insert.
"""

import secrets

INVITE_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
DEFAULT_INVITE_CODE_LENGTH = 8


def generate_invite_code(length: int = DEFAULT_INVITE_CODE_LENGTH) -> str:
    """Generate a random invite code.

    Args:
        length: Number of characters in the code.

    Returns:
        str: Uppercase code drawn from INVITE_CODE_ALPHABET.

    Raises:
        ValueError: If length is not positive.
    """
    if length < 1:
        raise ValueError("Invite code length must be positive")

    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def normalize_invite_code(code: str | None) -> str | None:
    """Canonicalize a user-supplied invite code for lookup.

    Returns:
        str | None: Trimmed, uppercased code, or None if nothing usable was given.
    """
    if not code:
        return None
    normalized = code.strip().upper()
    return normalized or None
