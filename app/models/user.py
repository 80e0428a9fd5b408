# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    A farm account.

    Identity:
      - id: generated UUID
      - email: unique, stored trimmed + lower-cased

    The password is only ever stored as a salted bcrypt hash and is
    never part of a response schema.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Login email (normalized to lower case)",
    )

    password_hash: str = Field(
        description="bcrypt hash of the account password",
    )

    farm_name: str = Field(
        max_length=200,
        description="Public farm display name",
    )

    address: str = Field(
        description="Farm address shown on listings",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
