# app/schemas/goat.py
import uuid
from datetime import date, datetime
from typing import Any, Literal

from pydantic import Field, field_validator

from app.schemas.common import ApiInput, ApiModel, strip_optional, strip_required
from app.schemas.image import ImageRead
from app.schemas.user import FarmSnapshot

Gender = Literal["Male", "Female"]

DEFAULT_HEALTH_STATUS = ["Healthy"]


def _normalize_health_status(v):
    if v is None:
        return v
    if isinstance(v, str):
        v = [v]
    return v


def _clean_health_tags(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    tags = [t.strip() for t in v if t and t.strip()]
    return tags or list(DEFAULT_HEALTH_STATUS)


class GoatUpsert(ApiInput):
    """
    Payload for POST /add-goat (create-or-update keyed by rfidTag).

    - owner: the owning user's id. Older clients send the whole user
      object back instead of its id; both are coerced to a UUID here.
    - price / forSale / isSold are only written when provided, so
      re-registering a listed goat does not unlist it.
    - photos: optional data-URL strings; a non-empty list replaces
      every photo already linked to the goat. Entries are checked one
      by one during ingestion, so a malformed entry is only skipped.
    """

    owner: uuid.UUID
    rfid_tag: str = Field(max_length=100)
    name: str = Field(max_length=100)
    gender: Gender
    breed: str | None = Field(default=None, max_length=100)
    birth_date: date | None = None
    weight: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)
    health_status: list[str] = Field(default_factory=lambda: list(DEFAULT_HEALTH_STATUS))
    price: float | None = Field(default=None, ge=0)
    for_sale: bool | None = None
    is_sold: bool | None = None
    photos: list[Any] | None = None

    @field_validator("owner", mode="before")
    @classmethod
    def coerce_owner(cls, v):
        if isinstance(v, dict):
            v = v.get("id") or v.get("_id")
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("rfid_tag", "name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return strip_required(v)

    @field_validator("breed")
    @classmethod
    def normalize_breed(cls, v: str | None) -> str | None:
        return strip_optional(v)

    @field_validator("health_status", mode="before")
    @classmethod
    def wrap_health_status(cls, v):
        if v is None:
            return list(DEFAULT_HEALTH_STATUS)
        return _normalize_health_status(v)

    @field_validator("health_status")
    @classmethod
    def clean_health_status(cls, v: list[str]) -> list[str]:
        return _clean_health_tags(v)


class GoatUpdate(ApiInput):
    """
    Partial update payload for PUT /update-goat/{id}.
    All fields are optional; the RFID tag and owner cannot be changed.
    """

    name: str | None = Field(default=None, max_length=100)
    gender: Gender | None = None
    breed: str | None = Field(default=None, max_length=100)
    birth_date: date | None = None
    weight: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)
    health_status: list[str] | None = None
    price: float | None = Field(default=None, ge=0)
    for_sale: bool | None = None
    is_sold: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return strip_required(v)

    @field_validator("breed")
    @classmethod
    def normalize_breed(cls, v: str | None) -> str | None:
        return strip_optional(v)

    @field_validator("health_status", mode="before")
    @classmethod
    def wrap_health_status(cls, v):
        return _normalize_health_status(v)

    @field_validator("health_status")
    @classmethod
    def clean_health_status(cls, v: list[str] | None) -> list[str] | None:
        return _clean_health_tags(v)


class GoatRead(ApiModel):
    """Goat representation for clients."""

    id: uuid.UUID
    owner: uuid.UUID
    rfid_tag: str
    name: str
    gender: Gender
    breed: str | None
    birth_date: date | None
    weight: float | None
    height: float | None
    health_status: list[str]
    price: float
    for_sale: bool
    is_sold: bool
    added_at: datetime


class GoatListItem(GoatRead):
    """Goat plus the URL of its first photo (if any)."""

    image_url: str | None = None


class MarketplaceItem(GoatListItem):
    """Marketplace card: goat, first photo and the seller's farm."""

    farm_name: str | None = None
    address: str | None = None


class GoatDetail(GoatRead):
    """
    Full goat view:
      - images: every photo URL in batch order
      - farm: snapshot of the owner's public farm fields
    """

    images: list[str]
    farm: FarmSnapshot | None = None


class GoatUpsertResult(ApiModel):
    status: str = "ok"
    message: str
    goat: GoatRead
    images: list[ImageRead]
    warnings: list[str] = []


class DeleteResult(ApiModel):
    status: str = "ok"
    message: str
    warnings: list[str] = []
