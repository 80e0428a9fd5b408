# app/schemas/image.py
import uuid
from datetime import datetime

from app.schemas.common import ApiModel


class ImageRead(ApiModel):
    """
    Read model for goat photos.
    """

    id: uuid.UUID
    goat_id: uuid.UUID | None
    filename: str
    image_url: str
    notes: str | None
    sort_order: int
    uploaded_at: datetime
