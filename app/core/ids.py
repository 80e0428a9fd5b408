# app/core/ids.py
import uuid


def parse_uuid(raw: str | uuid.UUID | None) -> uuid.UUID | None:
    """
    Parse an identifier taken from a URL or form field.

    Returns None for anything that is not a UUID, so callers can
    answer "not found" instead of a validation error.
    """
    if raw is None:
        return None
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(raw.strip())
    except (ValueError, AttributeError):
        return None
