# app/routers/marketplace.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.repositories.user_repo import UserRepository
from app.routers.goats import service as goat_service
from app.schemas.goat import MarketplaceItem
from app.schemas.user import UserRead
from app.services.user_service import UserService

router = APIRouter(tags=["Marketplace"])

user_service = UserService(UserRepository())


# -------- Public endpoints --------


@router.get("/api/goats", response_model=list[MarketplaceItem])
@router.get("/goats", response_model=list[MarketplaceItem], include_in_schema=False)
def marketplace_feed(session: Session = Depends(get_session)):
    """
    Goats listed for sale, newest first, with first photo and farm.
    """
    return goat_service.list_marketplace(session)


@router.get("/api/farms", response_model=list[UserRead])
def list_farms(session: Session = Depends(get_session)):
    """
    Public farm directory.
    """
    return user_service.list_farms(session)


@router.get("/api/farms/{farm_id}", response_model=UserRead)
def get_farm(
    farm_id: str,
    session: Session = Depends(get_session),
):
    """
    Single farm profile.
    """
    return user_service.get_farm(session, farm_id)
