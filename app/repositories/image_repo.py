# app/repositories/image_repo.py
import uuid

from sqlmodel import Session, select

from app.models.image import Image


class ImageRepository:
    """
    Data access layer for Image metadata rows.

    Ordering everywhere is (sort_order, uploaded_at) so the "first"
    photo of a goat is stable.
    """

    def list_for_goat(self, session: Session, goat_id: uuid.UUID) -> list[Image]:
        stmt = (
            select(Image)
            .where(Image.goat_id == goat_id)
            .order_by(Image.sort_order, Image.uploaded_at)
        )
        return list(session.exec(stmt).all())

    def first_urls_for_goats(
        self,
        session: Session,
        goat_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, str]:
        """
        Map goat_id -> URL of its first photo, for the given goats.
        Goats without photos are absent from the result.
        """
        if not goat_ids:
            return {}
        stmt = (
            select(Image)
            .where(Image.goat_id.in_(goat_ids))
            .order_by(Image.sort_order, Image.uploaded_at)
        )
        first: dict[uuid.UUID, str] = {}
        for image in session.exec(stmt).all():
            first.setdefault(image.goat_id, image.image_url)
        return first

    def create_many(self, session: Session, images: list[Image]) -> list[Image]:
        session.add_all(images)
        session.flush()
        for image in images:
            session.refresh(image)
        return images

    def create(self, session: Session, image: Image) -> Image:
        session.add(image)
        session.commit()
        session.refresh(image)
        return image

    def delete_many(self, session: Session, images: list[Image]) -> None:
        """Delete the given rows without committing."""
        for image in images:
            session.delete(image)
        session.flush()
