"""User domain models."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class User(BaseModel):
    """User data transfer object (one row of the ``users`` table)."""

    id: str = Field(..., description="Unique user ID from database")
    phone: str = Field(..., description="Normalized 10-digit phone number")
    login_times: list[str] = Field(default_factory=list, description="Successful login timestamps, earliest first")
    created_at: str = Field(..., description="Creation timestamp (ISO format)")
    updated_at: str = Field(..., description="Last update timestamp (ISO format)")

    @field_validator("phone")
    @classmethod
    def validate_phone_digits(cls, v: str) -> str:
        """Validate phone number is exactly 10 digits."""
        if not re.match(r"^\d{10}$", v):
            msg = "Phone number must be exactly 10 digits"
            raise ValueError(msg)
        return v


class PublicUser(BaseModel):
    """User summary returned to the client after login."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    phone: str
    login_count: int
    last_login: str | None
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            phone=user.phone,
            login_count=len(user.login_times),
            last_login=user.login_times[-1] if user.login_times else None,
            created_at=user.created_at,
        )
