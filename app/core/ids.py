"""Record id helpers."""
import uuid

from app.core.errors import MalformedIdError


def new_id() -> str:
    """Generate a new opaque record id."""
    return str(uuid.uuid4())


def is_valid_id(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        return False
    return True


def parse_id(value: str, kind: str = "record") -> str:
    """Normalize an id, raising MalformedIdError if it is not a valid UUID."""
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, AttributeError, TypeError):
        raise MalformedIdError(f"Invalid {kind} ID format")
