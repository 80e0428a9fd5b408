# app/routers/goats.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.storage_utils import BlobStore, get_blob_store
from app.database import get_session
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
)
from app.services.goat_service import GoatService
from app.services.image_service import ImageService

router = APIRouter(tags=["Goats"])

goat_repo = GoatRepository()
image_repo = ImageRepository()
user_repo = UserRepository()
service = GoatService(goat_repo, image_repo, user_repo, ImageService(image_repo))


@router.post(
    "/add-goat",
    response_model=GoatUpsertResult,
    status_code=status.HTTP_201_CREATED,
)
def add_goat(
    payload: GoatUpsert,
    session: Session = Depends(get_session),
    blobs: BlobStore = Depends(get_blob_store),
):
    """
    Register a goat, or update the one already registered under the
    same RFID tag.

    - `photos`: optional list of `data:image/...;base64,...` strings.
      When non-empty they replace all photos of the goat.
    - Invalid photos are skipped and reported in `warnings`.
    """
    return service.upsert_goat(session, blobs, payload)


@router.put("/update-goat/{goat_id}", response_model=GoatRead)
def update_goat(
    goat_id: str,
    payload: GoatUpdate,
    session: Session = Depends(get_session),
):
    """
    Partial update (commonly price / forSale / isSold).
    """
    return service.update_goat(session, goat_id, payload)


@router.delete("/delete-goat/{goat_id}", response_model=DeleteResult)
def delete_goat(
    goat_id: str,
    session: Session = Depends(get_session),
    blobs: BlobStore = Depends(get_blob_store),
):
    """
    Delete a goat together with its photo records.
    """
    return service.delete_goat(session, blobs, goat_id)


@router.get("/get-goats/{user_id}", response_model=list[GoatListItem])
def list_user_goats(
    user_id: str,
    session: Session = Depends(get_session),
):
    """
    Goats owned by a user, newest first, each with its first photo URL.
    """
    return service.list_owner_goats(session, user_id)


@router.get("/get-goat/{goat_id}", response_model=GoatDetail)
def get_goat(
    goat_id: str,
    session: Session = Depends(get_session),
):
    """
    One goat with every photo URL and its owner's farm details.
    """
    return service.get_goat_detail(session, goat_id)
