# app/services/image_service.py
import base64
import binascii
import logging
import re
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.storage_utils import (
    BlobStore,
    extension_for,
    goat_image_filename,
    upload_filename,
)
from app.models.image import Image
from app.repositories.image_repo import ImageRepository

logger = logging.getLogger(__name__)

# data:<media-type>;base64,<payload>
DATA_URL_PATTERN = re.compile(r"^data:([A-Za-z0-9.+/-]+);base64,(.+)$", re.DOTALL)

# Plain name first, then salted retries for the legacy upload path
UPLOAD_NAME_ATTEMPTS = 3


@dataclass
class DecodedImage:
    index: int
    media_type: str
    data: bytes


@dataclass
class IngestResult:
    """Outcome of a photo batch: rows created plus per-item warnings."""

    images: list[Image] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def decode_data_url(raw: Any, max_bytes: int) -> tuple[str, bytes]:
    """
    Decode one `data:image/...;base64,...` string.

    Returns:
        (media_type, decoded bytes)

    Raises:
        ValueError: if the string is not a base64 image data URL, or the
        decoded image is empty or larger than max_bytes.
    """
    match = DATA_URL_PATTERN.match(raw.strip()) if isinstance(raw, str) else None
    if not match:
        raise ValueError("not a base64 data URL")

    media_type = match.group(1).lower()
    if not media_type.startswith("image/"):
        raise ValueError(f"unsupported media type {media_type}")

    try:
        data = base64.b64decode(match.group(2), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 payload ({e})") from e

    if not data:
        raise ValueError("empty image")
    if len(data) > max_bytes:
        raise ValueError(f"image too large ({len(data)} bytes, max {max_bytes})")
    return media_type, data


class ImageService:
    """
    Turns inline base64 photos into blobs + Image rows, and removes
    the photos a goat already has.

    Policy:
      - invalid entries are skipped, never fail the batch
      - blob writes of one batch run concurrently
      - a missing or undeletable blob during cleanup is a warning
    """

    def __init__(self, repo: ImageRepository):
        self.repo = repo

    # ----- Decoding -----

    @staticmethod
    def decode_batch(
        photos: list[Any],
        max_bytes: int,
    ) -> tuple[list[DecodedImage], list[str]]:
        decoded: list[DecodedImage] = []
        warnings: list[str] = []
        for index, raw in enumerate(photos):
            try:
                media_type, data = decode_data_url(raw, max_bytes)
            except ValueError as e:
                msg = f"Skipped invalid image at index {index}: {e}"
                logger.warning(msg)
                warnings.append(msg)
                continue
            decoded.append(DecodedImage(index=index, media_type=media_type, data=data))
        return decoded, warnings

    # ----- Cleanup -----

    def clear_goat_images(
        self,
        session: Session,
        blobs: BlobStore,
        goat_id: uuid.UUID,
    ) -> list[str]:
        """
        Delete every photo linked to a goat: blobs first (best effort),
        then the metadata rows. Does not commit.

        Returns:
            Warnings for blobs that could not be deleted.
        """
        existing = self.repo.list_for_goat(session, goat_id)
        warnings: list[str] = []

        for image in existing:
            try:
                blobs.delete(image.filename)
            except FileNotFoundError:
                msg = f"Blob {image.filename} not found"
                logger.warning(msg)
                warnings.append(msg)
            except (OSError, ValueError) as e:
                msg = f"Could not delete blob {image.filename}: {e}"
                logger.warning(msg)
                warnings.append(msg)

        self.repo.delete_many(session, existing)
        if existing:
            logger.info("Removed %d image(s) of goat %s", len(existing), goat_id)
        return warnings

    # ----- Ingestion -----

    def write_goat_images(
        self,
        session: Session,
        blobs: BlobStore,
        goat_id: uuid.UUID,
        photos: list[Any],
    ) -> IngestResult:
        """
        Decode a photo batch, write the blobs concurrently and create one
        Image row per written blob. Does not commit.

        Filenames: <epoch-millis>_<goat-id>_img<index>.<ext>, where index is
        the entry's position in `photos` (also used as sort_order).
        """
        decoded, warnings = self.decode_batch(photos, blobs.max_bytes)
        result = IngestResult(warnings=warnings)
        if not decoded:
            return result

        planned = [
            (item, goat_image_filename(goat_id, item.index, extension_for(item.media_type)))
            for item in decoded
        ]

        workers = min(blobs.write_workers, len(planned))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="blob_write") as pool:
            futures = [
                (item, filename, pool.submit(blobs.write, filename, item.data))
                for item, filename in planned
            ]

        written: list[Image] = []
        for item, filename, fut in futures:
            try:
                fut.result()
            except (OSError, ValueError) as e:
                msg = f"Could not write image at index {item.index}: {e}"
                logger.warning(msg)
                result.warnings.append(msg)
                continue
            written.append(
                Image(
                    goat_id=goat_id,
                    filename=filename,
                    image_url=blobs.url_for(filename),
                    sort_order=item.index,
                )
            )

        result.images = self.repo.create_many(session, written) if written else []
        logger.info(
            "Stored %d/%d image(s) for goat %s",
            len(result.images),
            len(photos),
            goat_id,
        )
        return result

    def replace_goat_images(
        self,
        session: Session,
        blobs: BlobStore,
        goat_id: uuid.UUID,
        photos: list[Any],
    ) -> IngestResult:
        """Cleanup-then-write: the new batch becomes the goat's only photos."""
        cleanup_warnings = self.clear_goat_images(session, blobs, goat_id)
        result = self.write_goat_images(session, blobs, goat_id, photos)
        result.warnings = cleanup_warnings + result.warnings
        return result

    # ----- Legacy multipart upload -----

    def save_upload(
        self,
        session: Session,
        blobs: BlobStore,
        content_type: str | None,
        file_bytes: bytes,
        original_name: str | None,
        goat_id: uuid.UUID | None = None,
        notes: str | None = None,
    ) -> Image:
        """
        Store one uploaded file and its Image row (committed).

        Raises:
            HTTPException(400): not an image / empty file.
            HTTPException(413): larger than the configured limit.
            HTTPException(409): no unique filename could be allocated.
        """
        if not content_type or not content_type.lower().startswith("image/"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded file must be an image",
            )
        if not file_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded file is empty",
            )
        if len(file_bytes) > blobs.max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"Image too large (max {blobs.max_bytes} bytes)",
            )

        filename = self._write_unique(blobs, original_name, file_bytes)
        logger.info("Saved upload %s (goat=%s)", filename, goat_id)

        image = Image(
            goat_id=goat_id,
            filename=filename,
            image_url=blobs.url_for(filename),
            notes=notes,
        )
        try:
            return self.repo.create(session, image)
        except IntegrityError:
            session.rollback()
            blobs.delete(filename)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An image with this filename already exists",
            )

    @staticmethod
    def _write_unique(
        blobs: BlobStore,
        original_name: str | None,
        file_bytes: bytes,
    ) -> str:
        """
        Write an upload under a fresh filename. The plain
        <epoch-millis>_<name> is tried first, then salted variants.

        Raises:
            HTTPException(409): every candidate name was taken.
        """
        for attempt in range(UPLOAD_NAME_ATTEMPTS):
            filename = upload_filename(original_name, salted=attempt > 0)
            try:
                blobs.write(filename, file_bytes)
            except FileExistsError:
                logger.warning("Upload filename %s taken, retrying", filename)
                continue
            return filename

        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Could not allocate a unique filename for the upload",
        )
