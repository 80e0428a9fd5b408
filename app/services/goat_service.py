# app/services/goat_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.ids import parse_uuid
from app.core.locks import KeyedLock
from app.core.storage_utils import BlobStore
from app.models.goat import Goat
from app.models.image import Image
from app.repositories.goat_repo import GoatRepository
from app.repositories.image_repo import ImageRepository
from app.repositories.user_repo import UserRepository
from app.schemas.goat import (
    DeleteResult,
    GoatDetail,
    GoatListItem,
    GoatRead,
    GoatUpdate,
    GoatUpsert,
    GoatUpsertResult,
    MarketplaceItem,
)
from app.schemas.image import ImageRead
from app.schemas.user import FarmSnapshot
from app.services.image_service import ImageService

logger = logging.getLogger(__name__)


def _goat_fields(goat: Goat) -> dict:
    """Column values of a Goat in response-schema field names."""
    return {
        "id": goat.id,
        "owner": goat.owner_id,
        "rfid_tag": goat.rfid_tag,
        "name": goat.name,
        "gender": goat.gender,
        "breed": goat.breed,
        "birth_date": goat.birth_date,
        "weight": goat.weight,
        "height": goat.height,
        "health_status": list(goat.health_status or []),
        "price": goat.price,
        "for_sale": goat.for_sale,
        "is_sold": goat.is_sold,
        "added_at": goat.added_at,
    }


class GoatService:
    """
    Business logic for goats, their photos and the marketplace.

    Responsibilities:
      - upsert keyed by RFID tag (serialized per tag)
      - photo replacement on upsert via ImageService
      - cascade photo cleanup on delete
      - denormalized reads (first photo, owner farm fields)
    """

    def __init__(
        self,
        goat_repo: GoatRepository,
        image_repo: ImageRepository,
        user_repo: UserRepository,
        image_service: ImageService,
        locks: KeyedLock | None = None,
    ):
        self.goat_repo = goat_repo
        self.image_repo = image_repo
        self.user_repo = user_repo
        self.image_service = image_service
        self.locks = locks or KeyedLock()

    # ----- Helpers -----

    def get_goat(self, session: Session, goat_id: str | uuid.UUID) -> Goat:
        """
        Resolve a goat from a raw identifier.

        Raises:
            HTTPException(404): if the id is malformed or unknown.
        """
        parsed = parse_uuid(goat_id)
        goat = self.goat_repo.get_by_id(session, parsed) if parsed else None
        if not goat:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Goat not found",
            )
        return goat

    # ----- Writes -----

    def upsert_goat(
        self,
        session: Session,
        blobs: BlobStore,
        payload: GoatUpsert,
    ) -> GoatUpsertResult:
        """
        Create or update the goat identified by payload.rfid_tag.

        Steps:
          1. Ensure the owner exists.
          2. Load the goat by tag, or start a new one.
          3. Overwrite registration fields; write price/for-sale/sold
             only when provided; refresh added_at.
          4. If photos were sent: delete the goat's current photos, then
             store the new batch.
          5. Commit and return goat + photos + warnings.
        """
        with self.locks.hold(payload.rfid_tag):
            if not self.user_repo.get_by_id(session, payload.owner):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Owner not found",
                )

            goat = self.goat_repo.get_by_tag(session, payload.rfid_tag)
            created = goat is None
            if goat is None:
                goat = Goat(
                    owner_id=payload.owner,
                    rfid_tag=payload.rfid_tag,
                    name=payload.name,
                    gender=payload.gender,
                )

            goat.owner_id = payload.owner
            goat.name = payload.name
            goat.gender = payload.gender
            goat.breed = payload.breed
            goat.birth_date = payload.birth_date
            goat.weight = payload.weight
            goat.height = payload.height
            goat.health_status = list(payload.health_status)

            if payload.price is not None:
                goat.price = payload.price
            if payload.for_sale is not None:
                goat.for_sale = payload.for_sale
            if payload.is_sold is not None:
                goat.is_sold = payload.is_sold

            goat.added_at = datetime.now(timezone.utc)

            warnings: list[str] = []
            try:
                goat = self.goat_repo.save(session, goat)
                if payload.photos:
                    ingest = self.image_service.replace_goat_images(
                        session, blobs, goat.id, payload.photos
                    )
                    warnings = ingest.warnings
                session.commit()
            except IntegrityError:
                session.rollback()
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="A goat with this RFID tag already exists",
                )

            session.refresh(goat)
            images = self.image_repo.list_for_goat(session, goat.id)

        logger.info(
            "%s goat %s (tag=%s, photos=%d)",
            "Registered" if created else "Updated",
            goat.id,
            goat.rfid_tag,
            len(images),
        )
        return GoatUpsertResult(
            status="ok",
            message=(
                "Goat registered successfully!"
                if created
                else "Goat updated successfully!"
            ),
            goat=GoatRead(**_goat_fields(goat)),
            images=[ImageRead.model_validate(img) for img in images],
            warnings=warnings,
        )

    def update_goat(
        self,
        session: Session,
        goat_id: str,
        payload: GoatUpdate,
    ) -> GoatRead:
        """
        Partial update; only fields present in the payload are written.
        Typical use: marketplace price / for-sale / sold toggles.
        """
        goat = self.get_goat(session, goat_id)

        for key, value in payload.model_dump(exclude_unset=True).items():
            if value is None and key in ("name", "gender", "health_status", "price", "for_sale", "is_sold"):
                # Required columns cannot be cleared
                continue
            setattr(goat, key, value)

        goat = self.goat_repo.save(session, goat)
        session.commit()
        session.refresh(goat)
        return GoatRead(**_goat_fields(goat))

    def delete_goat(
        self,
        session: Session,
        blobs: BlobStore,
        goat_id: str,
    ) -> DeleteResult:
        """
        Delete a goat and every Image row linked to it.
        Blob files are removed best-effort; failures become warnings.
        """
        goat = self.get_goat(session, goat_id)
        deleted_id, rfid_tag = goat.id, goat.rfid_tag

        with self.locks.hold(rfid_tag):
            # A concurrent delete may have won the lock
            session.expire(goat)
            goat = self.get_goat(session, deleted_id)
            warnings = self.image_service.clear_goat_images(session, blobs, deleted_id)
            self.goat_repo.delete(session, goat)
            session.commit()

        logger.info("Deleted goat %s (tag=%s)", deleted_id, rfid_tag)
        return DeleteResult(
            status="ok",
            message="Goat deleted successfully",
            warnings=warnings,
        )

    # ----- Reads -----

    def list_owner_goats(self, session: Session, owner_id: str) -> list[GoatListItem]:
        """
        Goats of one owner, newest first, each with its first photo URL.
        A malformed owner id simply has no goats.
        """
        parsed = parse_uuid(owner_id)
        if parsed is None:
            return []

        goats = self.goat_repo.list_for_owner(session, parsed)
        first_urls = self.image_repo.first_urls_for_goats(session, [g.id for g in goats])
        return [
            GoatListItem(**_goat_fields(g), image_url=first_urls.get(g.id))
            for g in goats
        ]

    def get_goat_detail(self, session: Session, goat_id: str) -> GoatDetail:
        """Goat fields, every photo URL (batch order) and the owner's farm."""
        goat = self.get_goat(session, goat_id)
        images: list[Image] = self.image_repo.list_for_goat(session, goat.id)
        owner = self.user_repo.get_by_id(session, goat.owner_id)

        return GoatDetail(
            **_goat_fields(goat),
            images=[img.image_url for img in images],
            farm=FarmSnapshot.model_validate(owner) if owner else None,
        )

    def list_marketplace(self, session: Session) -> list[MarketplaceItem]:
        """
        Public feed: every goat flagged for sale, newest listed first,
        with its first photo and the seller's farm name/address.
        """
        rows = self.goat_repo.list_for_sale_with_owner(session)
        first_urls = self.image_repo.first_urls_for_goats(
            session, [goat.id for goat, _ in rows]
        )
        return [
            MarketplaceItem(
                **_goat_fields(goat),
                image_url=first_urls.get(goat.id),
                farm_name=owner.farm_name if owner else None,
                address=owner.address if owner else None,
            )
            for goat, owner in rows
        ]
