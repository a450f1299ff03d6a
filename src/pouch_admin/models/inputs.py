"""Pydantic models for validating key-related CLI input before it is submitted."""

from pydantic import BaseModel, Field

KEY_NAME_MAX_LENGTH = 50
KEY_NAME_PATTERN = r"^[\w\-\s]+$"


class KeyCreateInput(BaseModel):
    """Model for key creation validation."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=KEY_NAME_MAX_LENGTH,
        pattern=KEY_NAME_PATTERN,
        description="Key name (letters, digits, '_', '-' and spaces)",
        examples=["staging-app", "mobile client"],
    )
    budget_limit: float | None = Field(
        None, ge=0, description="Budget limit in USD, 0 for unlimited"
    )
    reset_period: int | None = Field(
        None, ge=0, description="Budget reset period in seconds, 0 for never"
    )
    expires_in_days: int = Field(0, ge=0, description="Days until expiry, 0 for never")


class KeyEditInput(BaseModel):
    """Model for key edit validation. Unset fields are left as stored."""

    name: str | None = Field(
        None,
        min_length=1,
        max_length=KEY_NAME_MAX_LENGTH,
        pattern=KEY_NAME_PATTERN,
    )
    budget_limit: float | None = Field(None, ge=0)
    reset_period: int | None = Field(None, ge=0)
    expires_in_days: int | None = Field(None, ge=0)
