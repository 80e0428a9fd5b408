# app/repositories/goat_repo.py
import uuid

from sqlmodel import Session, select

from app.models.goat import Goat
from app.models.user import User


class GoatRepository:
    """
    Data access layer for goats.

    NOTE:
      - No commits here; an upsert and its photo replacement form one
        transaction. The service is responsible for session.commit().
    """

    def get_by_id(self, session: Session, goat_id: uuid.UUID) -> Goat | None:
        return session.get(Goat, goat_id)

    def get_by_tag(self, session: Session, rfid_tag: str) -> Goat | None:
        stmt = select(Goat).where(Goat.rfid_tag == rfid_tag)
        return session.exec(stmt).first()

    def list_for_owner(self, session: Session, owner_id: uuid.UUID) -> list[Goat]:
        stmt = (
            select(Goat)
            .where(Goat.owner_id == owner_id)
            .order_by(Goat.added_at.desc())
        )
        return list(session.exec(stmt).all())

    def list_for_sale_with_owner(
        self,
        session: Session,
    ) -> list[tuple[Goat, User | None]]:
        """
        Marketplace rows: every goat flagged for sale, newest first,
        joined with its owner (None if the owner row is missing).
        """
        stmt = (
            select(Goat, User)
            .join(User, Goat.owner_id == User.id, isouter=True)
            .where(Goat.for_sale == True)  # noqa: E712
            .order_by(Goat.added_at.desc())
        )
        return [(goat, owner) for goat, owner in session.exec(stmt).all()]

    def save(self, session: Session, goat: Goat) -> Goat:
        """
        Insert or update a Goat without committing, but ensure the id is
        populated and unique constraints are checked.
        """
        session.add(goat)
        session.flush()
        session.refresh(goat)
        return goat

    def delete(self, session: Session, goat: Goat) -> None:
        session.delete(goat)
        session.flush()
