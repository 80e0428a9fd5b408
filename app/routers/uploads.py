# app/routers/uploads.py
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlmodel import Session

from app.core.storage_utils import BlobStore, get_blob_store
from app.database import get_session
from app.routers.goats import image_repo, service as goat_service
from app.schemas.image import ImageRead
from app.services.image_service import ImageService

router = APIRouter(tags=["Uploads"])

image_service = ImageService(image_repo)


@router.post(
    "/upload",
    response_model=ImageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a single photo (multipart)",
)
def upload_image(
    image: UploadFile = File(...),
    goat_id: str | None = Form(default=None, alias="goatId"),
    notes: str | None = Form(default=None),
    session: Session = Depends(get_session),
    blobs: BlobStore = Depends(get_blob_store),
):
    """
    Legacy upload path used before photos were sent inline.

    - `goatId` is optional; when given it must name an existing goat.
    - The file is stored as `<epoch-millis>_<original name>`.
    """
    linked_goat = None
    if goat_id and goat_id.strip():
        linked_goat = goat_service.get_goat(session, goat_id).id

    # One byte over the limit is enough to reject the upload
    file_bytes = image.file.read(blobs.max_bytes + 1)
    return image_service.save_upload(
        session,
        blobs,
        content_type=image.content_type,
        file_bytes=file_bytes,
        original_name=image.filename,
        goat_id=linked_goat,
        notes=notes.strip() if notes and notes.strip() else None,
    )
