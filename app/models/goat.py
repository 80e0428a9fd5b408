# app/models/goat.py
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


def _default_health_status() -> list[str]:
    return ["Healthy"]


class Goat(SQLModel, table=True):
    """
    Livestock record.

    Natural key:
      - rfid_tag: unique, trimmed. Registering the same tag again
        updates this row instead of inserting a duplicate.

    Marketplace fields:
      - price, for_sale, is_sold
    """

    __tablename__ = "goats"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    owner_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
        description="FK to users.id",
    )

    rfid_tag: str = Field(
        unique=True,
        index=True,
        description="Scanned RFID tag (unique)",
    )

    name: str = Field(max_length=100)

    # Male | Female
    gender: str = Field(max_length=10)

    breed: str | None = Field(default=None, max_length=100)

    birth_date: date | None = Field(default=None)

    weight: float | None = Field(default=None, ge=0)

    height: float | None = Field(default=None, ge=0)

    health_status: list[str] = Field(
        default_factory=_default_health_status,
        sa_column=Column(JSON, nullable=False),
        description="Ordered free-text health tags",
    )

    price: float = Field(
        default=0,
        ge=0,
        description="Asking price when listed",
    )

    for_sale: bool = Field(
        default=False,
        index=True,
        description="Visible on the marketplace feed",
    )

    is_sold: bool = Field(default=False)

    added_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Added/listed timestamp (UTC), refreshed on upsert",
    )
