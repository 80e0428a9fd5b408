# app/models/image.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Image(SQLModel, table=True):
    """
    Photo metadata; the bytes live in the upload directory under
    `filename`.

    goat_id is optional: the legacy multipart upload can store a
    photo before the goat exists.
    """

    __tablename__ = "images"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    goat_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="goats.id",
        index=True,
        description="FK to goats.id",
    )

    filename: str = Field(
        unique=True,
        description="Blob filename inside the upload directory",
    )

    image_url: str = Field(
        description="Public URL/path the blob is served from",
    )

    notes: str | None = Field(default=None)

    sort_order: int = Field(
        default=0,
        ge=0,
        description="Position within the goat's photo batch",
    )

    uploaded_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Upload timestamp (UTC)",
    )
