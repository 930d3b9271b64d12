"""Profile model type definitions for database operations."""

from datetime import datetime
from typing import TypedDict
from uuid import UUID


class Profile(TypedDict):
    """Profile table row representation.

    The id is the Supabase auth user id.
    """

    id: UUID
    display_name: str
    avatar_url: str | None
    theme: str | None
    first_name: str | None
    last_name: str | None
    nickname: str | None
    age: int | None
    email: str | None
    partner_id: UUID | None
    confirmed_at: datetime | None
    created_at: datetime
    updated_at: datetime
