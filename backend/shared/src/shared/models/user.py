"""User registration models."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

# bcrypt only hashes the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

# Names are trimmed; the password is hashed exactly as sent
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]


class UserCreate(BaseModel):
    """Data required to register a user account."""

    model_config = ConfigDict(populate_by_name=True)

    username: TrimmedStr = Field(..., min_length=3, max_length=50)
    first_name: TrimmedStr = Field(..., min_length=1, max_length=100, alias="firstName")
    last_name: TrimmedStr = Field(..., min_length=1, max_length=100, alias="lastName")
    email: EmailStr
    password: str = Field(..., min_length=8, description="Plain text password")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class UserResult(BaseModel):
    """Response for a newly registered user."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "User registered successfully"
    user_id: int = Field(..., alias="userId")
