# app/core/storage_utils.py
import time
import uuid
from pathlib import Path

from fastapi import Request

# Media type -> file extension for stored photos.
# Other image/* types fall back to DEFAULT_IMAGE_EXT.
IMAGE_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/heic": "heic",
}

DEFAULT_IMAGE_EXT = "jpg"


class BlobStore:
    """
    Local filesystem blob store for uploaded images.

    Blobs are flat files inside `root`, keyed by filename, and served
    by the static /uploads mount. One instance is built per app and
    reached from handlers through get_blob_store().
    """

    def __init__(
        self,
        root: str | Path,
        url_prefix: str = "/uploads",
        max_bytes: int = 5 * 1024 * 1024,
        write_workers: int = 4,
    ):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes
        self.write_workers = max(write_workers, 1)

    def ensure_root(self) -> None:
        """Create the upload directory if it does not exist yet."""
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        """
        Resolve a filename inside the store.

        Raises:
            ValueError: if the name tries to escape the upload directory.
        """
        name = Path(filename).name
        if not name or name != filename:
            raise ValueError(f"Invalid blob filename: {filename!r}")
        return self.root / name

    def url_for(self, filename: str) -> str:
        """
        Public URL/path for a stored blob.

        Example:
            'uploads' prefix '/uploads' + '1700000000000_<id>_img0.jpg'
            -> '/uploads/1700000000000_<id>_img0.jpg'
        """
        return f"{self.url_prefix}/{filename}"

    def write(self, filename: str, data: bytes) -> Path:
        """
        Create a new blob and return its path. Existing blobs are never
        overwritten.

        Raises:
            FileExistsError: if a blob with this filename already exists.
        """
        path = self.path_for(filename)
        with path.open("xb") as f:
            f.write(data)
        return path

    def delete(self, filename: str) -> None:
        """
        Delete a blob by filename.

        Raises:
            FileNotFoundError: if the blob is already gone.
            OSError: on any other filesystem failure.
        """
        self.path_for(filename).unlink()

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()


def extension_for(media_type: str) -> str:
    return IMAGE_EXTENSIONS.get(media_type.lower(), DEFAULT_IMAGE_EXT)


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def goat_image_filename(goat_id: uuid.UUID, index: int, ext: str) -> str:
    """
    Filename for a photo written from an upsert batch.

    Pattern:
        <epoch-millis>_<goat-id>_img<index>.<ext>
    """
    return f"{epoch_millis()}_{goat_id}_img{index}.{ext}"


def upload_filename(original_name: str | None, salted: bool = False) -> str:
    """
    Filename for the legacy multipart upload: <epoch-millis>_<original name>.
    Directory parts of the client-supplied name are dropped.

    With salted=True a random token goes between the timestamp and the
    name (<epoch-millis>_<hex8>_<original name>), for retrying a collision.
    """
    base = Path(original_name or "").name.replace(" ", "_")
    if not base:
        base = f"{uuid.uuid4()}.{DEFAULT_IMAGE_EXT}"
    if salted:
        return f"{epoch_millis()}_{uuid.uuid4().hex[:8]}_{base}"
    return f"{epoch_millis()}_{base}"


def get_blob_store(request: Request) -> BlobStore:
    """FastAPI dependency returning the app's BlobStore."""
    return request.app.state.blob_store
