# app/services/user_service.py
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.auth import hash_password, verify_password
from app.core.ids import parse_uuid
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserLogin, UserRegister

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for farm accounts.

    Responsibilities:
      - registration with unique (case-insensitive) email
      - password hashing / verification
      - public farm lookups
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Accounts -----

    def register(self, session: Session, payload: UserRegister) -> User:
        """
        Create a new account.

        Raises:
            HTTPException(400): if the email is already registered.
        """
        if self.repo.get_by_email(session, payload.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already in use.",
            )

        user = User(
            email=payload.email,
            password_hash=hash_password(payload.password),
            farm_name=payload.farm_name,
            address=payload.address,
        )
        try:
            user = self.repo.create(session, user)
        except IntegrityError:
            # Lost a race against a concurrent registration
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already in use.",
            )

        logger.info("Registered user %s (%s)", user.id, user.email)
        return user

    def authenticate(self, session: Session, payload: UserLogin) -> User:
        """
        Check credentials.

        Raises:
            HTTPException(404): unknown email.
            HTTPException(400): wrong password.
        """
        user = self.repo.get_by_email(session, payload.email)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )

        if not verify_password(user.password_hash, payload.password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid credentials",
            )

        logger.info("Login ok for user %s", user.id)
        return user

    # ----- Farm directory -----

    def list_farms(self, session: Session) -> list[User]:
        return self.repo.list(session)

    def get_farm(self, session: Session, farm_id: str) -> User:
        """
        Get a farm (user) by id.

        Raises:
            HTTPException(404): if the id is malformed or unknown.
        """
        parsed = parse_uuid(farm_id)
        user = self.repo.get_by_id(session, parsed) if parsed else None
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Farm not found",
            )
        return user
