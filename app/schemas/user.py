# app/schemas/user.py
import uuid
from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from app.core.auth import MAX_PASSWORD_BYTES
from app.schemas.common import ApiInput, ApiModel, strip_required


class UserRegister(ApiInput):
    """
    Payload for creating a farm account.

    Validation rules:
      - email must be a valid EmailStr; stored lower-cased
      - password, farmName and address cannot be empty
    """

    email: EmailStr
    password: str = Field(min_length=1)
    farm_name: str = Field(max_length=200)
    address: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v

    @field_validator("farm_name", "address")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return strip_required(v)


class UserLogin(ApiInput):
    """Credentials for POST /login."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserRead(ApiModel):
    """
    Public account fields (never the password hash).
    Also used for the farm directory.
    """

    id: uuid.UUID
    email: str
    farm_name: str
    address: str
    created_at: datetime


class LoginResponse(ApiModel):
    status: str = "ok"
    user: UserRead


class FarmSnapshot(ApiModel):
    """Owner fields embedded into goat detail responses."""

    id: uuid.UUID
    email: str
    farm_name: str
    address: str
