"""Profile Pydantic schemas for API request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from src.core.themes import normalize_theme_name
from src.models.couple import MembershipRole, MembershipStatus
from src.schemas.common import CamelModel
from src.schemas.couple import CoupleSummary

DISPLAY_NAME_MAX_LENGTH = 80


def clean_display_name(value: str | None) -> str | None:
    """Strip a display name and enforce its length limits."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Display name cannot be empty")
    if len(value) > DISPLAY_NAME_MAX_LENGTH:
        raise ValueError(f"Display name must be at most {DISPLAY_NAME_MAX_LENGTH} characters")
    return value


class ProfileResponse(CamelModel):
    """Schema for profile API responses."""

    id: UUID = Field(description="Profile unique identifier (auth user id)")
    display_name: str | None = Field(default=None, description="User display name")
    avatar_url: str | None = Field(default=None, description="URL to user's avatar image")
    theme: str | None = Field(default=None, description="Theme preference, null for automatic")
    first_name: str | None = Field(default=None)
    last_name: str | None = Field(default=None)
    nickname: str | None = Field(default=None)
    age: int | None = Field(default=None)
    email: str | None = Field(default=None, description="Contact email")
    confirmed_at: datetime | None = Field(default=None, description="When the account was activated")


class ProfileUpdate(CamelModel):
    """Schema for updating a profile.

    All fields are optional for partial updates; an explicit null clears a
    nullable field. `theme` accepts the catalog names, legacy aliases, and
    "default" (stored as null).
    """

    display_name: str | None = Field(default=None, description="New display name")
    avatar_url: str | None = Field(default=None, max_length=2048, description="New avatar URL")
    theme: str | None = Field(default=None, description="New theme")
    first_name: str | None = Field(default=None, max_length=80)
    last_name: str | None = Field(default=None, max_length=80)
    nickname: str | None = Field(default=None, max_length=80)
    age: int | None = Field(default=None, ge=0, le=130)
    email: EmailStr | None = Field(default=None, description="Contact email")

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, value: str | None) -> str | None:
        return clean_display_name(value)

    @field_validator("theme")
    @classmethod
    def validate_theme(cls, value: str | None) -> str | None:
        return normalize_theme_name(value)


class ActivateProfileRequest(CamelModel):
    """Request body for profile activation after email confirmation."""

    user_id: UUID = Field(..., description="Auth user id; must match the caller")


class ProfileSnapshot(CamelModel):
    """Profile together with the user's current couple view."""

    profile: ProfileResponse = Field(description="The user's profile")
    couple: CoupleSummary | None = Field(default=None, description="Most relevant couple")
    membership_status: MembershipStatus = Field(description="Status of that membership")
    membership_role: MembershipRole | None = Field(default=None, description="Role in that couple")


class OnboardRequest(CamelModel):
    """Request body for first-run onboarding.

    Either creates a couple (`create_couple`) or joins one by `invite_code`.
    """

    user_id: UUID = Field(..., description="Auth user id; must match the caller")
    display_name: str = Field(..., description="Display name chosen during sign up")
    create_couple: bool = Field(default=False, description="Create a new couple instead of joining")
    couple_name: str | None = Field(default=None, max_length=120, description="Name for a new couple")
    invite_code: str | None = Field(default=None, max_length=64, description="Partner's invite code")

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, value: str) -> str:
        return clean_display_name(value)
