"""Unit tests for invite code generation and normalization."""

import pytest

from src.core.invite_codes import (
    DEFAULT_INVITE_CODE_LENGTH,
    INVITE_CODE_ALPHABET,
    generate_invite_code,
    normalize_invite_code,
)


class TestInviteCodeAlphabet:
    """Tests for the invite code alphabet."""

    def test_excludes_ambiguous_characters(self) -> None:
        """Test that easily confused characters are left out."""
        for char in "0O1IL":
            assert char not in INVITE_CODE_ALPHABET

    def test_is_uppercase_alphanumeric_without_duplicates(self) -> None:
        """Test alphabet contents."""
        assert INVITE_CODE_ALPHABET.isalnum()
        assert INVITE_CODE_ALPHABET == INVITE_CODE_ALPHABET.upper()
        assert len(set(INVITE_CODE_ALPHABET)) == len(INVITE_CODE_ALPHABET) == 31


class TestGenerateInviteCode:
    """Tests for generate_invite_code function."""

    def test_default_length(self) -> None:
        """Test that codes have eight characters by default."""
        assert DEFAULT_INVITE_CODE_LENGTH == 8
        assert len(generate_invite_code()) == 8

    def test_custom_length(self) -> None:
        """Test that the requested length is honored."""
        assert len(generate_invite_code(12)) == 12

    def test_uses_only_alphabet_characters(self) -> None:
        """Test that every character comes from the alphabet."""
        for _ in range(200):
            code = generate_invite_code()
            assert set(code) <= set(INVITE_CODE_ALPHABET)

    def test_codes_vary(self) -> None:
        """Test that repeated calls do not return a constant."""
        codes = {generate_invite_code() for _ in range(50)}
        assert len(codes) > 1

    @pytest.mark.parametrize("length", [0, -3])
    def test_rejects_non_positive_length(self, length: int) -> None:
        """Test that a non-positive length raises ValueError."""
        with pytest.raises(ValueError):
            generate_invite_code(length)


class TestNormalizeInviteCode:
    """Tests for normalize_invite_code function."""

    def test_uppercases_and_trims(self) -> None:
        """Test that case and surrounding whitespace are ignored."""
        assert normalize_invite_code("  abcd2345 ") == "ABCD2345"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_input_returns_none(self, raw: str | None) -> None:
        """Test that missing codes normalize to None."""
        assert normalize_invite_code(raw) is None
