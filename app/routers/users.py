# app/routers/users.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.database import get_session
from app.repositories.user_repo import UserRepository
from app.schemas.user import LoginResponse, UserLogin, UserRead, UserRegister
from app.services.user_service import UserService

router = APIRouter(tags=["Users"])

repo = UserRepository()
service = UserService(repo)


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: UserRegister,
    session: Session = Depends(get_session),
):
    """
    Create a farm account.

    - Email is matched case-insensitively; duplicates get 400.
    - The response never includes the password.
    """
    return service.register(session, payload)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: UserLogin,
    session: Session = Depends(get_session),
):
    """
    Check email + password and return the account (without password).
    """
    user = service.authenticate(session, payload)
    return LoginResponse(status="ok", user=UserRead.model_validate(user))
